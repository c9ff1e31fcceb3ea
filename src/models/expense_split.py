# src/models/expense_split.py
# -----------------------------------------------------------------------------
# МОДЕЛЬ: ExpenseSplit (SQLAlchemy) — доля участника в расходе
# -----------------------------------------------------------------------------
# Инвариант (проверяется сервисом при создании, не движком):
#   sum(owed_share) == expense.amount и sum(paid_share) == expense.amount.
# -----------------------------------------------------------------------------

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from src.db import Base


class ExpenseSplit(Base):
    __tablename__ = "expense_splits"

    id = Column(Integer, primary_key=True, index=True)

    expense_id = Column(
        Integer,
        ForeignKey("expenses.id", ondelete="CASCADE"),
        nullable=False,
        comment="ID расхода",
    )

    user_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="ID участника группы",
    )

    owed_share = Column(BigInteger, nullable=False, default=0, comment="Сколько участник должен (минорные единицы)")
    paid_share = Column(BigInteger, nullable=False, default=0, comment="Сколько участник заплатил (минорные единицы)")

    # исходные параметры деления — для показа и редактирования
    percentage = Column(Numeric(7, 4), nullable=True, comment="Процент (если split_type='percentage')")
    shares = Column(Integer, nullable=True, comment="Количество долей (если split_type='shares')")

    __table_args__ = (
        UniqueConstraint("expense_id", "user_id", name="uq_expense_splits_expense_user"),
        Index("ix_expense_splits_expense", "expense_id"),
        Index("ix_expense_splits_user", "user_id"),
    )

    expense = relationship("Expense", back_populates="splits")
    user = relationship("User")
