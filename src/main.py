# src/main.py
# Главная точка входа FastAPI для Splitledger.
#  • Роутеры: пользователи, группы (балансы/settle-up), расходы, превью деления, валюты.
#  • Аутентификация — снаружи (шлюз/прокси); сюда приходят уже известные user_id.
#  • Настройки — из окружения (.env): DATABASE_URL, LOG_LEVEL, CORS_ORIGINS.

from __future__ import annotations

import logging
import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dotenv import load_dotenv
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from src.db import engine  # noqa: E402,F401  инициализация БД/пула соединений

from src.routers.users import router as users_router  # noqa: E402
from src.routers.groups import router as groups_router  # noqa: E402
from src.routers.expenses import router as expenses_router  # noqa: E402
from src.routers.splits import router as splits_router  # noqa: E402
from src.routers.currencies import router as currencies_router  # noqa: E402

_DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]

app = FastAPI(
    title="Splitledger Backend",
    description="Общие расходы в группах: деление сумм, балансы и минимальный план переводов.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()] or _DEFAULT_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users_router,      prefix="/api/users",    tags=["Пользователи"])
app.include_router(groups_router,     prefix="/api/groups",   tags=["Группы"])
app.include_router(expenses_router,   prefix="/api/expenses", tags=["Расходы"])
app.include_router(splits_router,     prefix="/api/splits",   tags=["Деление сумм"])
# роутер валют уже имеет prefix="/currencies" → /api/currencies
app.include_router(currencies_router, prefix="/api",          tags=["Валюты"])

@app.get("/")
def root():
    """Простой healthcheck."""
    return {"message": "Splitledger backend работает!", "docs": "/docs"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("src.main:app", host="0.0.0.0", port=8000, reload=False)
