# src/schemas/group.py
# -----------------------------------------------------------------------------
# СХЕМЫ Pydantic: Group
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, Field

from .group_member import GroupMemberOut


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Название группы")
    description: Optional[str] = Field(default=None, max_length=500, description="Описание группы")
    owner_id: int = Field(..., description="ID владельца")
    default_currency_code: str = Field("USD", description="Код валюты ISO-4217 по умолчанию")


class GroupOut(BaseModel):
    id: int = Field(..., description="ID группы")
    name: str = Field(..., description="Название группы")
    description: Optional[str] = Field(None, description="Описание группы")
    owner_id: int = Field(..., description="ID владельца группы")
    default_currency_code: str = Field("USD", description="Код валюты ISO-4217 по умолчанию")
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = Field(None, description="Soft-delete метка")

    members: List[GroupMemberOut] = Field(default_factory=list, description="Состав группы")

    class Config:
        from_attributes = True


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100, description="Новое название")
    description: Optional[str] = Field(default=None, max_length=500, description="Новое описание")
    default_currency_code: Optional[str] = Field(default=None, description="Новая валюта по умолчанию")
