# src/utils/groups.py
# ОБЩИЕ ХЕЛПЕРЫ ДЛЯ РАБОТЫ С ГРУППАМИ: гарды, загрузка участников и расходов.

from __future__ import annotations

from typing import List

from fastapi import HTTPException
from starlette import status
from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from ..models.group import Group
from ..models.group_member import GroupMember
from ..models.expense import Expense
from ..models.expense_split import ExpenseSplit
from ..models.user import User
from .balance import compute_net_balances, is_settled

# =========================
# БАЗОВЫЕ ГАРДЫ / ЗАГРУЗКИ
# =========================

def get_group_or_404(db: Session, group_id: int, *, include_deleted: bool = False) -> Group:
    stmt = select(Group).where(Group.id == group_id)
    if not include_deleted:
        stmt = stmt.where(Group.deleted_at.is_(None))
    group = db.scalar(stmt)
    if not group:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return group


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def is_active_member(db: Session, group_id: int, user_id: int) -> bool:
    """
    Активный участник = запись в group_members с deleted_at IS NULL.
    """
    count = db.scalar(
        select(func.count())
        .select_from(GroupMember)
        .where(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id,
            GroupMember.deleted_at.is_(None),
        )
    )
    return bool(count)


def require_membership(db: Session, group_id: int, user_id: int) -> Group:
    group = get_group_or_404(db, group_id)
    if not is_active_member(db, group_id, user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is not a group member")
    return group


# =========================
# ЧЛЕНЫ ГРУППЫ
# =========================

def get_group_member_ids(db: Session, group_id: int) -> List[int]:
    """
    Возвращает только активные membership'ы, в порядке вступления.
    """
    rows = db.execute(
        select(GroupMember.user_id)
        .where(
            GroupMember.group_id == group_id,
            GroupMember.deleted_at.is_(None),
        )
        .order_by(GroupMember.id.asc())
    ).all()
    return [uid for (uid,) in rows]


# =========================
# РАСХОДЫ
# =========================

def load_group_expenses(db: Session, group_id: int) -> List[Expense]:
    """
    Активные расходы группы (включая платежи settle-up) с подгруженными долями.
    Удалённые расходы сюда не попадают.
    """
    stmt = (
        select(Expense)
        .where(
            Expense.group_id == group_id,
            Expense.is_deleted.is_(False),
        )
        .options(selectinload(Expense.splits))
        .order_by(Expense.date.asc(), Expense.id.asc())
    )
    return list(db.scalars(stmt).all())


def load_user_expenses(db: Session, user_id: int) -> List[Expense]:
    """
    Активные расходы, в которых участвует пользователь (плательщик или доля),
    по всем НЕудалённым группам, где он активный участник.
    """
    group_ids = (
        select(GroupMember.group_id)
        .join(Group, Group.id == GroupMember.group_id)
        .where(
            GroupMember.user_id == user_id,
            GroupMember.deleted_at.is_(None),
            Group.deleted_at.is_(None),
        )
    )
    share_expense_ids = select(ExpenseSplit.expense_id).where(ExpenseSplit.user_id == user_id)
    stmt = (
        select(Expense)
        .where(
            Expense.group_id.in_(group_ids),
            Expense.is_deleted.is_(False),
            (Expense.paid_by == user_id) | Expense.id.in_(share_expense_ids),
        )
        .options(selectinload(Expense.splits))
        .order_by(Expense.date.asc(), Expense.id.asc())
    )
    return list(db.scalars(stmt).all())


# =========================
# ПРОВЕРКИ ДОЛГОВ
# =========================

def has_group_debts(db: Session, group_id: int) -> bool:
    """
    Есть ли в группе ненулевой баланс хоть у кого-то хоть в одной валюте.
    """
    balances = compute_net_balances(load_group_expenses(db, group_id))
    return not is_settled(balances)


def ensure_member_can_be_removed(db: Session, group_id: int, user_id: int) -> None:
    """
    Разрешаем удаление участника, если его баланс = 0 по всем валютам.
    """
    balances = [
        b for b in compute_net_balances(load_group_expenses(db, group_id))
        if b.user_id == user_id
    ]
    if not is_settled(balances):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Member has unsettled balance and cannot be removed.",
        )


def ensure_group_can_be_deleted(db: Session, group_id: int) -> None:
    """
    Разрешаем удаление группы, если долгов нет.
    """
    get_group_or_404(db, group_id)
    if has_group_debts(db, group_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Group has unsettled balances and cannot be deleted.",
        )
