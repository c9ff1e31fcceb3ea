# src/services/balances.py
# -----------------------------------------------------------------------------
# СЕРВИС: балансы группы и пользователя
# -----------------------------------------------------------------------------
# Тонкая прослойка между БД и движком src/utils/balance.py:
#   • достаём активные расходы (удалённые расходы и группы не участвуют);
#   • отдаём их в движок как есть (ORM-объекты);
#   • ничего не кешируем — каждый запрос считает заново.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import List

from sqlalchemy.orm import Session

from src.utils.balance import (
    GroupBalances,
    NetBalance,
    compute_group_balances,
    compute_overall_balances,
)
from src.utils.groups import (
    get_group_member_ids,
    get_group_or_404,
    get_user_or_404,
    load_group_expenses,
    load_user_expenses,
)

log = logging.getLogger(__name__)


def get_group_balances(db: Session, group_id: int) -> GroupBalances:
    """
    Балансы всех участников группы + парные и упрощённые долги.
    Если расходов ещё нет — нулевые балансы в дефолтной валюте группы.
    """
    group = get_group_or_404(db, group_id)
    member_ids = get_group_member_ids(db, group_id)
    expenses = load_group_expenses(db, group_id)

    result = compute_group_balances(
        expenses,
        member_ids=member_ids,
        currencies=[group.default_currency_code],
    )
    log.debug(
        "group %s: %d expenses, %d balances, %d debts, %d simplified",
        group_id, len(expenses), len(result.balances), len(result.debts), len(result.simplified_debts),
    )
    return result


def get_overall_balances(db: Session, user_id: int) -> List[NetBalance]:
    """
    Итог пользователя по всем его активным группам, по валютам отдельно.
    """
    get_user_or_404(db, user_id)
    expenses = load_user_expenses(db, user_id)
    balances = compute_overall_balances(user_id, expenses)
    log.debug("user %s: %d expenses, balances in %d currencies", user_id, len(expenses), len(balances))
    return balances
