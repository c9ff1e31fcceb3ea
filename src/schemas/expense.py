# src/schemas/expense.py
# -----------------------------------------------------------------------------
# СХЕМЫ Pydantic: Expense
# -----------------------------------------------------------------------------
# Цели:
#   • Сумма — int в минорных единицах (> 0), никаких float.
#   • Доли на вход задаются параметрами деления (SplitIn), итоговые owed_share
#     считает сервис через src.utils.money.allocate_split.
#   • Валюта может не прийти — тогда берём дефолт группы.
# -----------------------------------------------------------------------------

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from src.schemas.split import SplitIn, SplitType


def _normalize_code(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = str(v).strip()
    if v == "":
        return None
    v = v.upper()
    if len(v) != 3:
        raise ValueError("Currency code must have 3 letters (ISO 4217)")
    return v


class ExpenseCreate(BaseModel):
    group_id: int
    description: str = Field(..., min_length=1, max_length=200)
    amount: int = Field(..., gt=0, description="Сумма в минорных единицах")
    currency_code: Optional[str] = None
    paid_by: int
    created_by: Optional[int] = None
    category: Optional[str] = Field(default=None, max_length=50)
    date: datetime = Field(default_factory=datetime.utcnow)

    split_type: SplitType = "equal"
    splits: List[SplitIn] = Field(..., min_length=1)

    @field_validator("currency_code")
    @classmethod
    def _normalize_currency_code(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_code(v)


class ExpenseSplitOut(BaseModel):
    id: int
    user_id: int
    owed_share: int
    paid_share: int
    percentage: Optional[Decimal] = None
    shares: Optional[int] = None

    class Config:
        from_attributes = True


class ExpenseOut(BaseModel):
    id: int
    group_id: int
    description: str
    amount: int
    currency_code: str
    paid_by: int
    created_by: Optional[int] = None
    category: Optional[str] = None
    split_type: Optional[str] = None
    is_payment: bool
    date: datetime
    created_at: datetime
    splits: List[ExpenseSplitOut] = Field(default_factory=list)

    class Config:
        from_attributes = True


class ExpenseUpdate(BaseModel):
    """
    Частичное обновление. Если пришли splits — доли пересчитываются заново
    (split_type по умолчанию берётся у расхода). Сменить amount без splits нельзя.
    """
    description: Optional[str] = Field(default=None, min_length=1, max_length=200)
    amount: Optional[int] = Field(default=None, gt=0, description="Сумма в минорных единицах")
    currency_code: Optional[str] = None
    paid_by: Optional[int] = None
    category: Optional[str] = Field(default=None, max_length=50)
    date: Optional[datetime] = None

    split_type: Optional[SplitType] = None
    splits: Optional[List[SplitIn]] = Field(default=None, min_length=1)

    @field_validator("currency_code")
    @classmethod
    def _normalize_currency_code(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_code(v)
