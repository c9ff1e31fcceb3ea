# src/routers/splits.py
# -----------------------------------------------------------------------------
# РОУТЕР: превью деления суммы
# -----------------------------------------------------------------------------
# Тот же allocate_split, что и при создании расхода: фронт показывает ровно те
# доли, которые потом сохранит сервер. БД не нужна.
# -----------------------------------------------------------------------------

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from src.schemas.split import SplitPreviewIn, SplitPreviewOut, split_entries, shares_out
from src.utils.money import SplitError, allocate_split

router = APIRouter()


@router.post("/preview", response_model=SplitPreviewOut)
def preview_split(payload: SplitPreviewIn):
    entries = split_entries(payload.split_type, payload.splits)
    payer = payload.paid_by if payload.paid_by is not None else (entries[0][0] if entries else None)
    try:
        allocation = allocate_split(payload.split_type, payload.amount, entries, payer)
    except SplitError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return SplitPreviewOut(amount=payload.amount, split_type=payload.split_type, shares=shares_out(allocation))
