# src/routers/groups.py
# -----------------------------------------------------------------------------
# РОУТЕР: Группы, участники, балансы и settle-up
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette import status
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.group import Group
from src.models.group_member import GroupMember
from src.models.user import User
from src.schemas.balance import GroupBalancesOut, NetBalanceOut, DebtOut
from src.schemas.expense import ExpenseOut
from src.schemas.group import GroupCreate, GroupOut, GroupUpdate
from src.schemas.group_member import GroupMemberCreate, GroupMemberOut
from src.schemas.settlement import SettleUpIn
from src.services.balances import get_group_balances
from src.services.expenses import ExpenseValidationError, record_settlement
from src.utils.currency import UnknownCurrency, get_currency
from src.utils.groups import (
    ensure_group_can_be_deleted,
    ensure_member_can_be_removed,
    get_group_or_404,
    get_user_or_404,
)

router = APIRouter()
log = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ===== Группы ================================================================

@router.post("/", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(group: GroupCreate, db: Session = Depends(get_db)):
    get_user_or_404(db, group.owner_id)
    try:
        currency = get_currency(group.default_currency_code)["code"]
    except UnknownCurrency as e:
        raise HTTPException(status_code=422, detail=str(e))

    db_group = Group(
        name=group.name.strip(),
        description=group.description or "",
        owner_id=group.owner_id,
        default_currency_code=currency,
    )
    db.add(db_group)
    db.flush()
    # владелец — сразу участник
    db.add(GroupMember(group_id=db_group.id, user_id=group.owner_id, role="owner"))
    db.commit()
    db.refresh(db_group)
    return db_group


@router.get("/", response_model=List[GroupOut])
def list_user_groups(
    user_id: int = Query(..., description="ID пользователя"),
    db: Session = Depends(get_db),
):
    """
    Активные группы, где пользователь — активный участник. Новые сверху.
    """
    get_user_or_404(db, user_id)
    stmt = (
        select(Group)
        .join(GroupMember, GroupMember.group_id == Group.id)
        .where(
            GroupMember.user_id == user_id,
            GroupMember.deleted_at.is_(None),
            Group.deleted_at.is_(None),
        )
        .order_by(Group.id.desc())
    )
    return db.scalars(stmt).all()


@router.get("/{group_id}", response_model=GroupOut)
def get_group(group_id: int, db: Session = Depends(get_db)):
    return get_group_or_404(db, group_id)


@router.patch("/{group_id}", response_model=GroupOut)
def update_group(group_id: int, payload: GroupUpdate, db: Session = Depends(get_db)):
    group = get_group_or_404(db, group_id)
    if payload.default_currency_code is not None:
        try:
            group.default_currency_code = get_currency(payload.default_currency_code)["code"]
        except UnknownCurrency as e:
            raise HTTPException(status_code=422, detail=str(e))
    if payload.name is not None:
        group.name = payload.name.strip()
    if payload.description is not None:
        group.description = payload.description
    db.commit()
    db.refresh(group)
    log.info("group %s updated", group.id)
    return group


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def soft_delete_group(group_id: int, db: Session = Depends(get_db)):
    """
    Soft-delete: расходы удалённой группы больше не участвуют ни в каких балансах.
    Разрешено только при нулевых балансах.
    """
    ensure_group_can_be_deleted(db, group_id)
    group = get_group_or_404(db, group_id)
    group.deleted_at = _utc_now()
    db.commit()


# ===== Участники =============================================================

@router.post("/{group_id}/members", response_model=GroupMemberOut, status_code=status.HTTP_201_CREATED)
def add_member(group_id: int, payload: GroupMemberCreate, db: Session = Depends(get_db)):
    """
    Идемпотентно добавляет (или реактивирует) участника.
    """
    get_group_or_404(db, group_id)
    get_user_or_404(db, payload.user_id)

    row = db.scalar(
        select(GroupMember).where(
            GroupMember.group_id == group_id,
            GroupMember.user_id == payload.user_id,
        )
    )
    if row is None:
        row = GroupMember(group_id=group_id, user_id=payload.user_id, role=payload.role)
        db.add(row)
    elif row.deleted_at is not None:
        row.deleted_at = None
        row.role = payload.role
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{group_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(group_id: int, user_id: int, db: Session = Depends(get_db)):
    get_group_or_404(db, group_id)
    row = db.scalar(
        select(GroupMember).where(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id,
            GroupMember.deleted_at.is_(None),
        )
    )
    if row is None:
        raise HTTPException(status_code=404, detail="Member not found")
    ensure_member_can_be_removed(db, group_id, user_id)
    row.deleted_at = _utc_now()
    db.commit()


# ===== Балансы / Settle-up ====================================================

@router.get("/{group_id}/balances", response_model=GroupBalancesOut)
def group_balances(group_id: int, db: Session = Depends(get_db)):
    """
    balances          — net по (пользователь, валюта), включая нули для участников;
    debts             — парные долги «как в расходах» (без неттинга через третьих);
    simplified_debts  — минимальный набор переводов (жадный алгоритм, по валютам).
    """
    result = get_group_balances(db, group_id)

    user_ids = {b.user_id for b in result.balances}
    names = {}
    if user_ids:
        names = {u.id: u.name for u in db.scalars(select(User).where(User.id.in_(user_ids))).all()}

    return GroupBalancesOut(
        balances=[
            NetBalanceOut(user_id=b.user_id, currency=b.currency, amount=b.amount, user_name=names.get(b.user_id))
            for b in result.balances
        ],
        debts=[DebtOut.model_validate(d) for d in result.debts],
        simplified_debts=[DebtOut.model_validate(d) for d in result.simplified_debts],
    )


@router.post("/{group_id}/settle", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def settle_up(group_id: int, payload: SettleUpIn, db: Session = Depends(get_db)):
    try:
        return record_settlement(db, group_id, payload)
    except ExpenseValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
