# МОДЕЛЬ: Справочник валют (ISO-4217)
# ЦЕЛИ:
#   - Хранить код валюты, числовой код, количество знаков, символ и название.
#   - decimals задаёт масштаб минорной единицы (0 → 1, 2 → 100, 3 → 1000);
#     используется только для показа/ввода, не в расчётах балансов.
#   - Заполняется скриптом src/scripts/seed_currencies.py из src/utils/currency.CURRENCIES.

from __future__ import annotations

from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    UniqueConstraint,
    Index,
    SmallInteger,
)
from sqlalchemy.sql import func

from ..db import Base


class Currency(Base):
    __tablename__ = "currencies"

    # Текстовый код валюты (ISO-4217), пример: "USD", "EUR", "KWD"
    code = Column(
        String(3),
        primary_key=True,
        comment="Код валюты ISO-4217 (PK), пример: 'USD'",
    )

    numeric_code = Column(
        SmallInteger,
        nullable=False,
        comment="Числовой код ISO-4217, пример: 840 для USD",
    )

    decimals = Column(
        SmallInteger,
        nullable=False,
        comment="Число десятичных знаков (2 для USD, 0 для JPY, 3 для KWD)",
    )

    symbol = Column(
        String(8),
        nullable=True,
        comment="Символ валюты (например, '$', '€', '₽')",
    )

    name = Column(String(64), nullable=False, comment="Название валюты (en)")

    is_active = Column(
        Boolean,
        nullable=False,
        default=True,
        comment="Активная валюта",
    )

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("numeric_code", name="uq_currencies_numeric_code"),
        Index("ix_currencies_is_active", "is_active"),
    )
