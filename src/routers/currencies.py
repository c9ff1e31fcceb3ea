# src/routers/currencies.py
# РОУТЕР СПРАВОЧНИКА ВАЛЮТ
# -----------------------------------------------------------------------------
# Что делает этот файл:
#  - Возвращает список валют (для "списка выбора" на фронте).
#  - Возвращает конкретную валюту по коду.
#
# Ключевые детали:
#  - Таблица currencies заполняется скриптом src/scripts/seed_currencies.py.
#  - scale = 10 ** decimals — во сколько раз минорная единица меньше основной;
#    фронт переводит суммы для показа сам, в API суммы всегда целые.
#  - По умолчанию отдаём только активные валюты (is_active=true).

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, HTTPException
from starlette import status
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.currency import Currency
from ..schemas.currency import CurrencyOut
from ..db import get_db

router = APIRouter(
    prefix="/currencies",   # в main.py будет подключено под /api → итого: /api/currencies
)


def _to_dto(row: Currency) -> CurrencyOut:
    decimals = int(row.decimals)
    return CurrencyOut(
        code=row.code,
        numeric_code=int(row.numeric_code),
        decimals=decimals,
        scale=10 ** decimals,
        symbol=row.symbol,
        name=row.name,
    )


@router.get("", response_model=List[CurrencyOut], summary="Список валют")
def list_currencies(
    response: Response,
    db: Session = Depends(get_db),
    q: Optional[str] = Query(None, description="Поиск по коду и названию"),
    only_active: bool = Query(True, description="Отдавать только активные валюты (is_active=true)"),
):
    stmt = select(Currency)
    if only_active:
        stmt = stmt.where(Currency.is_active.is_(True))
    if q:
        pattern = f"%{q.strip()}%"
        stmt = stmt.where(Currency.code.ilike(pattern) | Currency.name.ilike(pattern))

    rows = list(db.scalars(stmt.order_by(Currency.code.asc())).all())

    # справочник статичен
    response.headers["Cache-Control"] = "public, max-age=86400"
    return [_to_dto(r) for r in rows]


@router.get("/{code}", response_model=CurrencyOut, summary="Валюта по коду")
def get_currency_by_code(
    code: str,
    response: Response,
    db: Session = Depends(get_db),
):
    norm_code = (code or "").upper().strip()
    row = db.scalar(
        select(Currency).where(Currency.code == norm_code, Currency.is_active.is_(True))
    )
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Currency not found")

    response.headers["Cache-Control"] = "public, max-age=86400"
    return _to_dto(row)
