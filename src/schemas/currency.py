# src/schemas/currency.py
# СХЕМЫ: справочник валют.

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field


class CurrencyOut(BaseModel):
    code: str = Field(..., description="Код валюты ISO-4217, напр. 'USD'")
    numeric_code: int = Field(..., description="Числовой код ISO-4217, напр. 840 для USD")
    decimals: int = Field(..., description="Количество знаков после запятой (2 для USD, 0 для JPY)")
    scale: int = Field(..., description="Минорных единиц в одной основной: 1, 100 или 1000")
    symbol: Optional[str] = Field(None, description="Символ валюты (например, '$', '€')")
    name: str = Field(..., description="Название валюты")

    class Config:
        from_attributes = True
