# tests/conftest.py
# Общие фикстуры: SQLite в памяти (одно соединение на весь тест) + TestClient
# с подменой зависимости get_db.

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.db import Base, get_db
from src.main import app
from src.models.group import Group
from src.models.group_member import GroupMember
from src.models.user import User
from src.scripts.seed_currencies import seed_currencies


@pytest.fixture()
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    seed_currencies(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def client(db):
    def _override():
        yield db

    app.dependency_overrides[get_db] = _override
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def trip(db):
    """Группа из трёх участников (Alice — владелец), валюта по умолчанию USD."""
    alice = User(name="Alice", email="alice@example.com")
    bob = User(name="Bob", email="bob@example.com")
    carol = User(name="Carol", email="carol@example.com")
    db.add_all([alice, bob, carol])
    db.flush()

    group = Group(name="Trip", owner_id=alice.id, default_currency_code="USD")
    db.add(group)
    db.flush()
    db.add_all([
        GroupMember(group_id=group.id, user_id=alice.id, role="owner"),
        GroupMember(group_id=group.id, user_id=bob.id),
        GroupMember(group_id=group.id, user_id=carol.id),
    ])
    db.commit()
    return {"group": group.id, "alice": alice.id, "bob": bob.id, "carol": carol.id}
