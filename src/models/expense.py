# src/models/expense.py
# -----------------------------------------------------------------------------
# МОДЕЛЬ: Expense (SQLAlchemy)
# -----------------------------------------------------------------------------
# Суммы — BIGINT в минорных единицах валюты (центы и т.п.).
# Погашение долга (settle-up) — тот же Expense с is_payment=True.
# Атрибуты amount/currency_code/paid_by/splits/is_deleted читает движок
# балансов (src/utils/balance.py) напрямую.
# -----------------------------------------------------------------------------

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import relationship

from src.db import Base


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)

    group_id = Column(
        Integer,
        ForeignKey("groups.id"),
        nullable=False,
        comment="ID группы, к которой относится расход",
    )

    created_by = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=True,
        comment="Пользователь, создавший расход",
    )

    description = Column(String(200), nullable=False, default="")

    amount = Column(
        BigInteger,
        nullable=False,
        comment="Сумма в минорных единицах валюты (> 0)",
    )

    currency_code = Column(
        String(3),
        nullable=False,
        comment="Код валюты ISO-4217 (напр., 'USD'). Фиксируется на расходе.",
    )

    paid_by = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="Кто оплатил",
    )

    split_type = Column(
        String(16),
        nullable=True,
        comment="Тип деления ('equal', 'percentage', 'shares', 'exact')",
    )

    category = Column(String(50), nullable=True)

    is_payment = Column(
        Boolean,
        nullable=False,
        default=False,
        comment="Погашение долга (settle-up), а не обычный расход",
    )

    date = Column(DateTime, nullable=False, default=datetime.utcnow)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    updated_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    is_deleted = Column(
        Boolean,
        nullable=False,
        default=False,
        comment="Soft-delete флаг",
    )

    __table_args__ = (
        Index("ix_expenses_group_date", "group_id", "date"),
        Index(
            "ix_expenses_group_currency_active",
            "group_id",
            "currency_code",
            postgresql_where=text("is_deleted = false"),
        ),
    )

    group = relationship("Group")
    payer = relationship("User", foreign_keys=[paid_by])

    splits = relationship(
        "ExpenseSplit",
        back_populates="expense",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ExpenseSplit.id",
    )
