# src/services/expenses.py
# -----------------------------------------------------------------------------
# СЕРВИС: создание/изменение/удаление расходов и запись погашений (settle-up)
# -----------------------------------------------------------------------------
# Здесь — внешний слой валидации, который гарантирует инварианты движка:
#   • участники и плательщик — активные члены группы, без дублей;
#   • sum(owed_share) == amount (через src.utils.money.allocate_split);
#   • sum(paid_share) == amount (плательщику — вся сумма);
#   • расход и его доли пишутся одним commit'ом.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from src.models.expense import Expense
from src.models.expense_split import ExpenseSplit
from src.models.group import Group
from src.schemas.expense import ExpenseCreate, ExpenseUpdate
from src.schemas.settlement import SettleUpIn
from src.schemas.split import SplitIn, split_entries
from src.utils.currency import UnknownCurrency, get_currency
from src.utils.groups import get_group_member_ids, get_group_or_404
from src.utils.money import allocate_split

log = logging.getLogger(__name__)


class ExpenseValidationError(ValueError):
    pass


class ExpenseNotFound(LookupError):
    pass


def _resolve_currency(code: Optional[str], group) -> str:
    raw = code or getattr(group, "default_currency_code", None)
    try:
        return get_currency(raw)["code"]
    except UnknownCurrency as e:
        raise ExpenseValidationError(str(e)) from None


def _require_members(member_ids: List[int], user_ids: List[int]) -> None:
    active = set(member_ids)
    missing = [uid for uid in user_ids if uid not in active]
    if missing:
        raise ExpenseValidationError(
            f"Invalid split: users {missing} are not active group members"
        )


def _allocate_rows(
    member_ids: List[int],
    amount: int,
    paid_by: int,
    split_type: str,
    splits: List[SplitIn],
) -> List[ExpenseSplit]:
    """
    Проверяет участников и считает доли. Возвращает ещё не сохранённые строки
    expense_splits: sum(owed_share) == sum(paid_share) == amount.
    """
    split_user_ids = [s.user_id for s in splits]
    if len(set(split_user_ids)) != len(split_user_ids):
        raise ExpenseValidationError("Invalid split: duplicate user IDs are not allowed")
    _require_members(member_ids, split_user_ids + [paid_by])

    # SplitError наследует ValueError — роутер отдаёт его как 422
    owed: Dict[int, int] = allocate_split(split_type, amount, split_entries(split_type, splits), paid_by)

    by_user = {s.user_id: s for s in splits}
    rows = [
        ExpenseSplit(
            user_id=uid,
            owed_share=share,
            paid_share=amount if uid == paid_by else 0,
            percentage=by_user[uid].percentage if split_type == "percentage" else None,
            shares=by_user[uid].shares if split_type == "shares" else None,
        )
        for uid, share in owed.items()
    ]
    if paid_by not in owed:
        # плательщик не участвует в расходе, но заплатил за всех
        rows.append(ExpenseSplit(user_id=paid_by, owed_share=0, paid_share=amount))
    return rows


def create_expense(db: Session, payload: ExpenseCreate) -> Expense:
    group = get_group_or_404(db, payload.group_id)
    currency = _resolve_currency(payload.currency_code, group)

    rows = _allocate_rows(
        get_group_member_ids(db, group.id),
        payload.amount,
        payload.paid_by,
        payload.split_type,
        payload.splits,
    )

    expense = Expense(
        group_id=group.id,
        created_by=payload.created_by,
        description=payload.description,
        amount=payload.amount,
        currency_code=currency,
        paid_by=payload.paid_by,
        split_type=payload.split_type,
        category=payload.category,
        is_payment=False,
        date=payload.date,
    )
    expense.splits.extend(rows)

    db.add(expense)
    db.commit()
    db.refresh(expense)

    log.info(
        "expense %s created in group %s: %s %s paid by %s, split=%s",
        expense.id, group.id, payload.amount, currency, payload.paid_by, payload.split_type,
    )
    return expense


def update_expense(db: Session, expense_id: int, payload: ExpenseUpdate) -> Expense:
    """
    Частичное обновление расхода. Новые splits заменяют старые строки целиком,
    в одном commit'е. Без splits доли не меняются, поэтому:
      • сменить amount или split_type без splits нельзя;
      • смена плательщика только переносит paid_share.
    """
    expense = get_expense(db, expense_id)
    if expense.is_payment:
        raise ExpenseValidationError("Payments cannot be edited; delete it and record a new one")

    amount = payload.amount if payload.amount is not None else expense.amount
    paid_by = payload.paid_by if payload.paid_by is not None else expense.paid_by

    if payload.splits is None:
        if amount != expense.amount:
            raise ExpenseValidationError(
                "Cannot change amount without providing new splits that sum to the new amount"
            )
        if payload.split_type is not None and payload.split_type != expense.split_type:
            raise ExpenseValidationError("Cannot change split type without providing new splits")

    member_ids = get_group_member_ids(db, expense.group_id)
    currency = expense.currency_code
    if payload.currency_code is not None:
        currency = _resolve_currency(payload.currency_code, expense.group)

    if payload.splits is not None:
        split_type = payload.split_type or expense.split_type or "equal"
        rows = _allocate_rows(member_ids, amount, paid_by, split_type, payload.splits)
        expense.splits.clear()
        # старые строки удаляются до вставки новых: уникальность (expense_id, user_id)
        db.flush()
        expense.splits.extend(rows)
        expense.split_type = split_type
    elif paid_by != expense.paid_by:
        _require_members(member_ids, [paid_by])
        for row in expense.splits:
            row.paid_share = amount if row.user_id == paid_by else 0
        if all(row.user_id != paid_by for row in expense.splits):
            expense.splits.append(ExpenseSplit(user_id=paid_by, owed_share=0, paid_share=amount))

    expense.amount = amount
    expense.currency_code = currency
    expense.paid_by = paid_by
    for field in ("description", "category", "date"):
        value = getattr(payload, field)
        if value is not None:
            setattr(expense, field, value)

    db.commit()
    db.refresh(expense)

    log.info(
        "expense %s updated in group %s: %s %s paid by %s, splits %s",
        expense.id, expense.group_id, expense.amount, expense.currency_code, paid_by,
        "replaced" if payload.splits is not None else "kept",
    )
    return expense


def record_settlement(db: Session, group_id: int, payload: SettleUpIn) -> Expense:
    """
    Погашение = расход с is_payment=True:
      paid_by = отправитель, доли {отправитель: 0, получатель: amount}.
    """
    group = get_group_or_404(db, group_id)
    if payload.from_user_id == payload.to_user_id:
        raise ExpenseValidationError("Cannot settle up with yourself")

    currency = _resolve_currency(payload.currency_code, group)
    _require_members(get_group_member_ids(db, group.id), [payload.from_user_id, payload.to_user_id])

    expense = Expense(
        group_id=group.id,
        created_by=payload.from_user_id,
        description="Payment",
        amount=payload.amount,
        currency_code=currency,
        paid_by=payload.from_user_id,
        split_type="exact",
        is_payment=True,
        date=datetime.utcnow(),
    )
    expense.splits.append(ExpenseSplit(user_id=payload.from_user_id, owed_share=0, paid_share=payload.amount))
    expense.splits.append(ExpenseSplit(user_id=payload.to_user_id, owed_share=payload.amount, paid_share=0))

    db.add(expense)
    db.commit()
    db.refresh(expense)

    log.info(
        "settlement %s in group %s: %s -> %s, %s %s",
        expense.id, group.id, payload.from_user_id, payload.to_user_id, payload.amount, currency,
    )
    return expense


def get_expense(db: Session, expense_id: int) -> Expense:
    # расходы удалённой группы недоступны ни на чтение, ни на изменение
    expense = db.scalar(
        select(Expense)
        .join(Group, Group.id == Expense.group_id)
        .where(
            Expense.id == expense_id,
            Expense.is_deleted.is_(False),
            Group.deleted_at.is_(None),
        )
        .options(selectinload(Expense.splits))
    )
    if not expense:
        raise ExpenseNotFound(expense_id)
    return expense


def list_group_expenses(
    db: Session,
    group_id: int,
    *,
    include_payments: bool = True,
    offset: int = 0,
    limit: int = 50,
) -> List[Expense]:
    get_group_or_404(db, group_id)
    stmt = (
        select(Expense)
        .where(Expense.group_id == group_id, Expense.is_deleted.is_(False))
        .options(selectinload(Expense.splits))
    )
    if not include_payments:
        stmt = stmt.where(Expense.is_payment.is_(False))
    stmt = stmt.order_by(Expense.date.desc(), Expense.id.desc()).offset(offset).limit(limit)
    return list(db.scalars(stmt).all())


def soft_delete_expense(db: Session, expense_id: int) -> None:
    expense = get_expense(db, expense_id)
    expense.is_deleted = True
    db.commit()
    log.info("expense %s deleted (group %s)", expense_id, expense.group_id)
