# src/routers/expenses.py
# -----------------------------------------------------------------------------
# РОУТЕР: Расходы
# -----------------------------------------------------------------------------
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette import status
from sqlalchemy.orm import Session

from src.db import get_db
from src.schemas.expense import ExpenseCreate, ExpenseOut, ExpenseUpdate
from src.services.expenses import (
    ExpenseNotFound,
    create_expense,
    get_expense,
    list_group_expenses,
    soft_delete_expense,
    update_expense,
)

router = APIRouter()


@router.get("/", response_model=List[ExpenseOut])
def get_expenses(
    group_id: int = Query(..., description="ID группы"),
    include_payments: bool = Query(True, description="Показывать погашения (settle-up)"),
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return list_group_expenses(
        db, group_id, include_payments=include_payments, offset=offset, limit=limit
    )


@router.get("/{expense_id}", response_model=ExpenseOut)
def get_expense_by_id(expense_id: int, db: Session = Depends(get_db)):
    try:
        return get_expense(db, expense_id)
    except ExpenseNotFound:
        raise HTTPException(status_code=404, detail="Expense not found")


@router.post("/", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def post_expense(payload: ExpenseCreate, db: Session = Depends(get_db)):
    # ExpenseValidationError и SplitError — оба ValueError
    try:
        return create_expense(db, payload)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.patch("/{expense_id}", response_model=ExpenseOut)
def patch_expense(expense_id: int, payload: ExpenseUpdate, db: Session = Depends(get_db)):
    """
    Новые splits заменяют старые целиком (доли пересчитываются тем же делителем).
    """
    try:
        return update_expense(db, expense_id, payload)
    except ExpenseNotFound:
        raise HTTPException(status_code=404, detail="Expense not found")
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(expense_id: int, db: Session = Depends(get_db)):
    try:
        soft_delete_expense(db, expense_id)
    except ExpenseNotFound:
        raise HTTPException(status_code=404, detail="Expense not found")
