# src/utils/balance.py
# -----------------------------------------------------------------------------
# УТИЛИТЫ РАСЧЁТА БАЛАНСОВ / SETTLE-UP
# -----------------------------------------------------------------------------
# Политика:
#   • Мультивалютность без конверсии: считаем по каждой валюте отдельно.
#   • Нет межвалютного неттинга.
#   • Все суммы — int в минорных единицах, никакого округления внутри.
#   • Семантика net:
#       net > 0 — пользователю ДОЛЖНЫ; net < 0 — он ДОЛЖЕН.
#   • Погашение (settle-up) — обычный расход с is_payment=True:
#       paid_by = отправитель, доли {отправитель: 0, получатель: amount}.
#   • Два представления долгов:
#       1) simplified — жадный минимум переводов (сведение по net);
#       2) debts      — парные долги «как в расходах» (без неттинга через третьих лиц).
#   • Балансы не кешируются: каждый запрос считает заново по истории расходов.
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, NamedTuple, Optional, Sequence


# =========================
# ТИПЫ
# =========================

class BalanceKey(NamedTuple):
    user_id: Hashable
    currency: str


@dataclass(frozen=True)
class NetBalance:
    user_id: Hashable
    currency: str
    amount: int


@dataclass(frozen=True)
class Debt:
    from_user_id: Hashable
    to_user_id: Hashable
    amount: int
    currency: str


@dataclass(frozen=True)
class ExpenseSplitRecord:
    user_id: Hashable
    owed_share: int
    paid_share: int = 0


@dataclass(frozen=True)
class ExpenseRecord:
    """
    Расход в виде, в котором его видит движок. ORM-модель Expense
    имеет те же атрибуты, поэтому строки из БД передаются как есть.
    """
    id: Hashable
    group_id: Hashable
    amount: int
    currency_code: str
    paid_by: Hashable
    splits: Sequence[ExpenseSplitRecord] = field(default_factory=tuple)
    is_payment: bool = False
    is_deleted: bool = False


@dataclass(frozen=True)
class GroupBalances:
    balances: List[NetBalance]
    debts: List[Debt]
    simplified_debts: List[Debt]


# =========================
# ВСПОМОГАТЕЛЬНОЕ
# =========================

def _ccy(expense) -> str:
    return (getattr(expense, "currency_code", None) or "").upper()


def _active(expenses: Iterable) -> Iterable:
    for exp in expenses:
        if getattr(exp, "is_deleted", False):
            continue
        yield exp


def _currencies_in_order(items: Iterable[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for code in items:
        seen.setdefault(code, None)
    return list(seen)


# =========================
# NET-БАЛАНСЫ
# =========================

def aggregate_net_balances(expenses: Iterable) -> Dict[BalanceKey, int]:
    """
    net[(user, ccy)] = сумма оплаченного − сумма долей.

    Плательщик получает +amount один раз на расход (а не на каждую строку долей),
    каждый участник — минус свой owed_share. Удалённые расходы пропускаются.
    """
    net: Dict[BalanceKey, int] = defaultdict(int)
    for exp in _active(expenses):
        code = _ccy(exp)
        for split in getattr(exp, "splits", None) or []:
            net[BalanceKey(split.user_id, code)] -= int(split.owed_share)
        net[BalanceKey(exp.paid_by, code)] += int(exp.amount)
    return dict(net)


def compute_net_balances(
    expenses: Iterable,
    member_ids: Optional[Iterable[Hashable]] = None,
    currencies: Optional[Iterable[str]] = None,
) -> List[NetBalance]:
    """
    Список NetBalance, не более одной записи на (user, ccy).

    Если передан member_ids — каждому участнику выдаём запись по каждой валюте
    (нулевую, если он в расходах не фигурирует). Когда расходов нет, валюты берём
    из currencies (обычно — дефолтная валюта группы).
    """
    expenses = list(expenses)
    net = aggregate_net_balances(expenses)

    codes = _currencies_in_order(_ccy(exp) for exp in _active(expenses))
    if not codes and currencies:
        codes = _currencies_in_order(c.upper() for c in currencies)

    if member_ids is None:
        return [NetBalance(key.user_id, key.currency, amount) for key, amount in net.items()]

    members = list(dict.fromkeys(member_ids))
    member_set = set(members)
    # бывшие участники, у которых остались расходы, тоже попадают в выдачу
    former = [key.user_id for key in net if key.user_id not in member_set]
    users = list(dict.fromkeys(members + former))

    out: List[NetBalance] = []
    for code in codes:
        for uid in users:
            key = BalanceKey(uid, code)
            if uid in member_set or key in net:
                out.append(NetBalance(uid, code, net.get(key, 0)))
    return out


def is_settled(balances: Iterable[NetBalance]) -> bool:
    return all(b.amount == 0 for b in balances)


# =========================
# ЖАДНОЕ УПРОЩЕНИЕ
# =========================

def simplify_debts(balances: Iterable[NetBalance], currency: str) -> List[Debt]:
    """
    Жадный settle-up для ОДНОЙ валюты.

    Кредиторы и должники сортируются по убыванию суммы (стабильно — при равенстве
    сохраняется входной порядок); крупнейший должник платит крупнейшему кредитору
    min(остатков), сторона с нулевым остатком выбывает. Не больше N−1 переводов.
    """
    code = currency.upper()
    filtered = [b for b in balances if b.currency.upper() == code and b.amount != 0]

    creditors = [[b.user_id, b.amount] for b in filtered if b.amount > 0]
    debtors = [[b.user_id, -b.amount] for b in filtered if b.amount < 0]
    creditors.sort(key=lambda x: -x[1])
    debtors.sort(key=lambda x: -x[1])

    result: List[Debt] = []
    i, j = 0, 0
    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        amount = min(debtor[1], creditor[1])
        result.append(Debt(debtor[0], creditor[0], amount, code))

        debtor[1] -= amount
        creditor[1] -= amount
        if debtor[1] == 0:
            i += 1
        if creditor[1] == 0:
            j += 1

    return result


def simplify_multi_currency(balances: Iterable[NetBalance]) -> List[Debt]:
    balances = list(balances)
    result: List[Debt] = []
    for code in _currencies_in_order(b.currency.upper() for b in balances):
        result.extend(simplify_debts(balances, code))
    return result


# =========================
# ПАРНЫЕ ДОЛГИ (без упрощения)
# =========================
# pairs[ccy][(a, b)] = сколько a ДОЛЖЕН b в валюте ccy

def build_pairwise_debts(expenses: Iterable) -> List[Debt]:
    """
    Долги «как в расходах»:
      • каждый участник (кроме плательщика) должен плательщику свой owed_share;
      • суммируем по упорядоченной паре a->b;
      • сводим ТОЛЬКО встречные долги внутри пары A↔B, без неттинга через третьих.
    """
    pairs: Dict[str, Dict[tuple, int]] = defaultdict(lambda: defaultdict(int))
    for exp in _active(expenses):
        code = _ccy(exp)
        payer = exp.paid_by
        for split in getattr(exp, "splits", None) or []:
            owed = int(split.owed_share)
            if split.user_id == payer or owed == 0:
                continue
            pairs[code][(split.user_id, payer)] += owed

    result: List[Debt] = []
    for code, matrix in pairs.items():
        done = set()
        items: List[Debt] = []
        for (a, b), ab in matrix.items():
            if (a, b) in done:
                continue
            done.add((a, b))
            done.add((b, a))
            diff = ab - matrix.get((b, a), 0)
            if diff > 0:
                items.append(Debt(a, b, diff, code))
            elif diff < 0:
                items.append(Debt(b, a, -diff, code))
        items.sort(key=lambda d: (d.from_user_id, d.to_user_id))
        result.extend(items)
    return result


# =========================
# СБОРКА ОТВЕТОВ
# =========================

def compute_group_balances(
    expenses: Iterable,
    member_ids: Optional[Iterable[Hashable]] = None,
    currencies: Optional[Iterable[str]] = None,
) -> GroupBalances:
    expenses = list(_active(expenses))
    balances = compute_net_balances(expenses, member_ids, currencies)
    return GroupBalances(
        balances=balances,
        debts=build_pairwise_debts(expenses),
        simplified_debts=simplify_multi_currency(balances),
    )


def compute_overall_balances(user_id: Hashable, expenses: Iterable) -> List[NetBalance]:
    """
    Итог пользователя по всем его группам: одна запись на валюту, нулевые опускаем.
    """
    totals: Dict[str, int] = {}
    for exp in _active(expenses):
        code = _ccy(exp)
        net = 0
        if exp.paid_by == user_id:
            net += int(exp.amount)
        for split in getattr(exp, "splits", None) or []:
            if split.user_id == user_id:
                net -= int(split.owed_share)
        totals[code] = totals.get(code, 0) + net

    return [NetBalance(user_id, code, amount) for code, amount in totals.items() if amount != 0]
