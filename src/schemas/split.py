# src/schemas/split.py
# -----------------------------------------------------------------------------
# СХЕМЫ Pydantic: входные доли расхода и превью деления
# -----------------------------------------------------------------------------
# Одна и та же схема SplitIn используется и при создании расхода, и в
# POST /api/splits/preview — так превью на фронте совпадает с серверной проверкой.
# -----------------------------------------------------------------------------

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

SplitType = Literal["equal", "percentage", "shares", "exact"]


class SplitIn(BaseModel):
    user_id: int = Field(..., description="ID участника")
    # для split_type='exact'
    amount: Optional[int] = Field(default=None, ge=0, description="Точная сумма (минорные единицы)")
    # для split_type='percentage'
    percentage: Optional[Decimal] = Field(default=None, ge=0, le=100, description="Процент 0–100")
    # для split_type='shares'
    shares: Optional[int] = Field(default=None, ge=0, description="Число долей")


class SplitPreviewIn(BaseModel):
    amount: int = Field(..., ge=0, description="Общая сумма (минорные единицы)")
    split_type: SplitType
    paid_by: Optional[int] = Field(default=None, description="Кому уходит остаток от деления")
    splits: List[SplitIn] = Field(default_factory=list)


class SplitShareOut(BaseModel):
    user_id: int
    owed_share: int


class SplitPreviewOut(BaseModel):
    amount: int
    split_type: SplitType
    shares: List[SplitShareOut]


def split_entries(split_type: str, splits: List[SplitIn]) -> List[tuple]:
    """Пары (user_id, значение) для src.utils.money.allocate_split."""
    field = {"equal": None, "percentage": "percentage", "shares": "shares", "exact": "amount"}[split_type]
    if field is None:
        return [(s.user_id, None) for s in splits]
    return [(s.user_id, getattr(s, field)) for s in splits]


def shares_out(allocation: Dict[int, int]) -> List[SplitShareOut]:
    return [SplitShareOut(user_id=uid, owed_share=share) for uid, share in allocation.items()]
