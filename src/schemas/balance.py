# src/schemas/balance.py
# -----------------------------------------------------------------------------
# СХЕМЫ Pydantic: балансы и долги
# -----------------------------------------------------------------------------
# Все суммы — int в минорных единицах. Форматирование под валюту — на фронте
# (или через src/utils/currency.format_money).
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class NetBalanceOut(BaseModel):
    user_id: int = Field(..., description="ID пользователя")
    currency: str = Field(..., description="Код валюты ISO-4217")
    amount: int = Field(..., description="> 0 — пользователю должны; < 0 — он должен")
    user_name: Optional[str] = Field(None, description="Отображаемое имя")

    class Config:
        from_attributes = True


class DebtOut(BaseModel):
    from_user_id: int = Field(..., description="Кто переводит (должник)")
    to_user_id: int = Field(..., description="Кому переводят (кредитор)")
    amount: int = Field(..., gt=0, description="Сумма перевода в минорных единицах")
    currency: str = Field(..., description="Код валюты ISO-4217")

    class Config:
        from_attributes = True


class GroupBalancesOut(BaseModel):
    balances: List[NetBalanceOut] = Field(default_factory=list)
    debts: List[DebtOut] = Field(default_factory=list, description="Парные долги без упрощения")
    simplified_debts: List[DebtOut] = Field(default_factory=list, description="Минимальный набор переводов")


class CurrencyTotalOut(BaseModel):
    currency: str
    amount: int


class OverallBalancesOut(BaseModel):
    balances: List[CurrencyTotalOut] = Field(default_factory=list)
