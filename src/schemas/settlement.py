# src/schemas/settlement.py

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.schemas.expense import _normalize_code


class SettleUpIn(BaseModel):
    """
    Запись погашения: from_user_id перевёл to_user_id сумму amount.
    Сохраняется как расход с is_payment=True (доли: отправитель 0, получатель amount).
    """
    from_user_id: int  # кто перевёл деньги (должник)
    to_user_id: int    # кому перевели (кредитор)
    amount: int = Field(..., gt=0, description="Сумма в минорных единицах")
    currency_code: Optional[str] = None  # по умолчанию — валюта группы

    @field_validator("currency_code")
    @classmethod
    def _normalize_currency_code(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_code(v)
