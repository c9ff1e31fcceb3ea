# src/utils/money.py
# -----------------------------------------------------------------------------
# УТИЛИТЫ ДЕЛЕНИЯ СУММ (SPLIT ALLOCATOR)
# -----------------------------------------------------------------------------
# Политика:
#   • Все суммы — int в минорных единицах валюты (центы, иены, филсы).
#   • Доля каждого участника считается с округлением вниз (floor).
#   • Остаток (total − сумма долей) целиком уходит плательщику (payer).
#     Если плательщика нет среди участников — первому участнику в списке.
#   • Сумма долей ВСЕГДА равна total, ровно.
#   • Функции чистые: без БД, без логов, без побочных эффектов.
# -----------------------------------------------------------------------------

from __future__ import annotations

from decimal import Decimal, ROUND_FLOOR, InvalidOperation
from typing import Dict, Hashable, Iterable, List, Sequence, Tuple

PERCENT_TOLERANCE = Decimal("0.01")

SPLIT_EQUAL = "equal"
SPLIT_PERCENTAGE = "percentage"
SPLIT_SHARES = "shares"
SPLIT_EXACT = "exact"
SPLIT_TYPES = (SPLIT_EQUAL, SPLIT_PERCENTAGE, SPLIT_SHARES, SPLIT_EXACT)


# =========================
# ОШИБКИ
# =========================

class SplitError(ValueError):
    """Базовая ошибка деления суммы (невалидный ввод)."""


class InvalidSplitInput(SplitError):
    pass


class EmptyParticipantSet(SplitError):
    pass


class PercentageSumMismatch(SplitError):
    def __init__(self, actual_sum):
        self.actual_sum = actual_sum
        super().__init__(f"Percentages must sum to 100, got {actual_sum}")


class ZeroTotalShares(SplitError):
    pass


class ExactAmountSumMismatch(SplitError):
    def __init__(self, actual_sum: int, expected_total: int):
        self.actual_sum = actual_sum
        self.expected_total = expected_total
        super().__init__(
            f"Sum of amounts ({actual_sum}) does not equal total ({expected_total})"
        )


# =========================
# ВСПОМОГАТЕЛЬНОЕ
# =========================

def _check_total(total: int) -> int:
    if isinstance(total, bool) or not isinstance(total, int):
        raise InvalidSplitInput(f"Total must be an integer amount in minor units, got {total!r}")
    if total < 0:
        raise InvalidSplitInput(f"Total must not be negative, got {total}")
    return total


def _check_unique(ids: Sequence[Hashable]) -> None:
    seen = set()
    for uid in ids:
        if uid in seen:
            raise InvalidSplitInput(f"Duplicate participant: {uid!r}")
        seen.add(uid)


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value))
        except InvalidOperation:
            raise InvalidSplitInput(f"Not a number: {value!r}") from None
    if not d.is_finite():
        raise InvalidSplitInput(f"Not a finite number: {value!r}")
    return d


def _absorb_overflow(result: Dict[Hashable, int], overflow: int, first: Hashable) -> int:
    """
    Снимает лишнее сначала с first, затем с самых крупных долей (по убыванию).
    Возвращает то, что снять не удалось.
    """
    order = [first] + sorted(
        (uid for uid in result if uid != first), key=lambda uid: result[uid], reverse=True
    )
    for uid in order:
        if overflow == 0:
            break
        take = min(result[uid], overflow)
        result[uid] -= take
        overflow -= take
    return overflow


def _assign_remainder(result: Dict[Hashable, int], total: int, payer_id: Hashable) -> Dict[Hashable, int]:
    remainder = total - sum(result.values())
    if remainder > 0 and result:
        target = payer_id if payer_id in result else next(iter(result))
        result[target] += remainder
    return result


# =========================
# ЧЕТЫРЕ ПОЛИТИКИ
# =========================

def split_evenly(total: int, participant_ids: Sequence[Hashable], payer_id: Hashable) -> Dict[Hashable, int]:
    """
    Поровну: floor(total / n) каждому, остаток — плательщику.

    >>> split_evenly(1000, ["a", "b", "c"], "a")
    {'a': 334, 'b': 333, 'c': 333}
    """
    total = _check_total(total)
    ids = list(participant_ids)
    if not ids:
        raise EmptyParticipantSet("Cannot split among zero participants")
    _check_unique(ids)

    base = total // len(ids)
    result = {uid: base for uid in ids}
    return _assign_remainder(result, total, payer_id)


def split_by_percentages(
    total: int,
    percentages: Iterable[Tuple[Hashable, object]],
    payer_id: Hashable,
) -> Dict[Hashable, int]:
    """
    По процентам (0–100, можно дробные). Сумма процентов должна быть 100 ± 0.01.
    Доля = floor(total * pct / 100), считается в Decimal, без float-дрейфа.
    """
    total = _check_total(total)
    items: List[Tuple[Hashable, Decimal]] = [(uid, _to_decimal(pct)) for uid, pct in percentages]
    _check_unique([uid for uid, _ in items])

    for uid, pct in items:
        if pct < 0 or pct > 100:
            raise InvalidSplitInput(f"Percentage for {uid!r} must be between 0 and 100, got {pct}")

    total_pct = sum((pct for _, pct in items), Decimal("0"))
    if abs(total_pct - 100) > PERCENT_TOLERANCE:
        raise PercentageSumMismatch(total_pct)

    result: Dict[Hashable, int] = {}
    for uid, pct in items:
        share = (Decimal(total) * pct / 100).to_integral_value(rounding=ROUND_FLOOR)
        result[uid] = int(share)

    # при сумме процентов до 100.01 floor-доли могут перелететь total
    overflow = sum(result.values()) - total
    if overflow > 0:
        target = payer_id if payer_id in result else next(iter(result))
        if _absorb_overflow(result, overflow, target):
            raise PercentageSumMismatch(total_pct)

    return _assign_remainder(result, total, payer_id)


def split_by_shares(
    total: int,
    shares: Iterable[Tuple[Hashable, int]],
    payer_id: Hashable,
) -> Dict[Hashable, int]:
    """
    По долям (весам): floor(total * weight / сумма весов), остаток — плательщику.

    >>> split_by_shares(10000, [("a", 2), ("b", 1)], "a")
    {'a': 6667, 'b': 3333}
    """
    total = _check_total(total)
    items = list(shares)
    _check_unique([uid for uid, _ in items])

    for uid, weight in items:
        if isinstance(weight, bool) or not isinstance(weight, int) or weight < 0:
            raise InvalidSplitInput(f"Shares for {uid!r} must be a non-negative integer, got {weight!r}")

    total_weight = sum(weight for _, weight in items)
    if total_weight == 0:
        raise ZeroTotalShares("Total shares cannot be zero")

    result = {uid: (total * weight) // total_weight for uid, weight in items}
    return _assign_remainder(result, total, payer_id)


def split_by_amounts(total: int, amounts: Iterable[Tuple[Hashable, int]]) -> Dict[Hashable, int]:
    """
    Точные суммы: только валидация. Ни округления, ни остатка.
    """
    total = _check_total(total)
    items = list(amounts)
    _check_unique([uid for uid, _ in items])

    for uid, amount in items:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise InvalidSplitInput(f"Amount for {uid!r} must be a non-negative integer, got {amount!r}")

    actual = sum(amount for _, amount in items)
    if actual != total:
        raise ExactAmountSumMismatch(actual, total)

    return {uid: amount for uid, amount in items}


# =========================
# ДИСПЕТЧЕР
# =========================

def allocate_split(
    split_type: str,
    total: int,
    entries: Sequence[Tuple[Hashable, object]],
    payer_id: Hashable,
) -> Dict[Hashable, int]:
    """
    Единая точка входа для сервиса расходов и превью на фронте.

    entries — пары (user_id, значение), где значение зависит от split_type:
      • equal       — игнорируется (может быть None);
      • percentage  — процент;
      • shares      — вес (int);
      • exact       — сумма в минорных единицах.
    """
    kind = (split_type or "").lower().strip()
    if kind == SPLIT_EQUAL:
        return split_evenly(total, [uid for uid, _ in entries], payer_id)
    if kind == SPLIT_PERCENTAGE:
        return split_by_percentages(total, entries, payer_id)
    if kind == SPLIT_SHARES:
        return split_by_shares(total, entries, payer_id)
    if kind == SPLIT_EXACT:
        return split_by_amounts(total, entries)
    raise InvalidSplitInput(f"Unknown split type: {split_type!r}")
