# src/utils/currency.py
# -----------------------------------------------------------------------------
# СПРАВОЧНИК ВАЛЮТ И ПЕРЕВОД major <-> minor
# -----------------------------------------------------------------------------
# Масштаб (10 ** decimals) нужен ТОЛЬКО на границе отображения/ввода:
# движок балансов работает с целыми минорными единицами и про масштаб не знает.
# -----------------------------------------------------------------------------

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Dict, List, Union

DEFAULT_CURRENCY = "USD"

# code, numeric_code, decimals, symbol, name
CURRENCIES: List[Dict] = [
    {"code": "USD", "numeric_code": 840, "decimals": 2, "symbol": "$", "name": "US Dollar"},
    {"code": "EUR", "numeric_code": 978, "decimals": 2, "symbol": "€", "name": "Euro"},
    {"code": "GBP", "numeric_code": 826, "decimals": 2, "symbol": "£", "name": "British Pound"},
    {"code": "JPY", "numeric_code": 392, "decimals": 0, "symbol": "¥", "name": "Japanese Yen"},
    {"code": "CNY", "numeric_code": 156, "decimals": 2, "symbol": "CN¥", "name": "Chinese Yuan"},
    {"code": "AUD", "numeric_code": 36, "decimals": 2, "symbol": "A$", "name": "Australian Dollar"},
    {"code": "CAD", "numeric_code": 124, "decimals": 2, "symbol": "CA$", "name": "Canadian Dollar"},
    {"code": "CHF", "numeric_code": 756, "decimals": 2, "symbol": "CHF", "name": "Swiss Franc"},
    {"code": "INR", "numeric_code": 356, "decimals": 2, "symbol": "₹", "name": "Indian Rupee"},
    {"code": "MXN", "numeric_code": 484, "decimals": 2, "symbol": "MX$", "name": "Mexican Peso"},
    {"code": "RUB", "numeric_code": 643, "decimals": 2, "symbol": "₽", "name": "Russian Ruble"},
    {"code": "BHD", "numeric_code": 48, "decimals": 3, "symbol": "BD", "name": "Bahraini Dinar"},
    {"code": "KWD", "numeric_code": 414, "decimals": 3, "symbol": "KD", "name": "Kuwaiti Dinar"},
]

_BY_CODE: Dict[str, Dict] = {c["code"]: c for c in CURRENCIES}


class UnknownCurrency(ValueError):
    def __init__(self, code):
        self.code = code
        super().__init__(f"Unknown currency: {code!r}")


def normalize_currency_code(code) -> str:
    v = str(code or "").strip().upper()
    if len(v) != 3 or not v.isalpha():
        raise UnknownCurrency(code)
    return v


def get_currency(code) -> Dict:
    v = normalize_currency_code(code)
    cur = _BY_CODE.get(v)
    if cur is None:
        raise UnknownCurrency(code)
    return cur


def is_known_currency(code) -> bool:
    try:
        get_currency(code)
    except UnknownCurrency:
        return False
    return True


def currency_decimals(code) -> int:
    return int(get_currency(code)["decimals"])


def minor_unit_scale(code) -> int:
    """1, 100 или 1000 — сколько минорных единиц в одной основной."""
    return 10 ** currency_decimals(code)


def _q(decimals: int) -> Decimal:
    return Decimal("1") if decimals <= 0 else Decimal("1").scaleb(-decimals)


def to_minor_units(amount: Union[Decimal, int, str, float], code) -> int:
    """
    Основные единицы -> минорные, округление ROUND_HALF_UP.
    Float принимаем только через str(), чтобы не тащить двоичный хвост.
    """
    try:
        d = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"Not a number: {amount!r}") from None
    scaled = d * minor_unit_scale(code)
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int, code) -> Decimal:
    decimals = currency_decimals(code)
    return (Decimal(int(amount)) / (10 ** decimals)).quantize(_q(decimals))


def format_money(amount: int, code) -> str:
    """
    -1250 USD -> '-$12.50'; 1000 JPY -> '¥1,000'.
    """
    cur = get_currency(code)
    major = from_minor_units(amount, code)
    sign = "-" if major < 0 else ""
    body = f"{abs(major):,.{int(cur['decimals'])}f}"
    return f"{sign}{cur['symbol']}{body}"
