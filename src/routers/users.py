# src/routers/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.models.user import User
from src.schemas.user import UserCreate, UserOut
from src.schemas.balance import CurrencyTotalOut, OverallBalancesOut
from src.db import get_db
from src.services.balances import get_overall_balances
from src.utils.groups import get_user_or_404

router = APIRouter()


@router.post("/", response_model=UserOut, status_code=201)
def create_user(user: UserCreate, db: Session = Depends(get_db)):
    db_user = User(
        name=user.name.strip(),
        email=(user.email or None),
        avatar_url=user.avatar_url,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return get_user_or_404(db, user_id)


@router.get("/{user_id}/balances", response_model=OverallBalancesOut)
def get_user_balances(user_id: int, db: Session = Depends(get_db)):
    """
    Итог пользователя по всем его группам: по валюте отдельно, без конверсии.
    Нулевые валюты не возвращаем.
    """
    balances = get_overall_balances(db, user_id)
    return OverallBalancesOut(
        balances=[CurrencyTotalOut(currency=b.currency, amount=b.amount) for b in balances]
    )
