"""
Идемпотентный сидинг валют из src/utils/currency.CURRENCIES. Запуск:
  $ python -m src.scripts.seed_currencies
"""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from src.db import SessionLocal
from src.models.currency import Currency
from src.utils.currency import CURRENCIES

log = logging.getLogger(__name__)


def seed_currencies(db: Session) -> int:
    """Upsert по коду валюты; работает и на PostgreSQL, и на SQLite."""
    for c in CURRENCIES:
        db.merge(Currency(is_active=True, **c))
    db.commit()
    return len(CURRENCIES)


def main():
    logging.basicConfig(level=logging.INFO)
    db = SessionLocal()
    try:
        count = seed_currencies(db)
    finally:
        db.close()
    log.info("Currencies seeded: %d", count)

if __name__ == "__main__":
    main()
