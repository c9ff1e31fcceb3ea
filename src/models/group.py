# src/models/group.py
# -----------------------------------------------------------------------------
# МОДЕЛЬ: Group (SQLAlchemy)
# -----------------------------------------------------------------------------

from __future__ import annotations

from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Index,
    func,
)
from sqlalchemy.orm import relationship

from ..db import Base


class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    description = Column(String, default="")

    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    owner = relationship("User")

    default_currency_code = Column(
        String(3),
        nullable=False,
        default="USD",
        comment="Дефолтная валюта группы (ISO-4217, напр., 'USD')",
    )

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    deleted_at = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="Soft-delete метка; если не NULL — группа скрыта и не участвует в балансах",
    )

    members = relationship(
        "GroupMember",
        primaryjoin="and_(Group.id == GroupMember.group_id, GroupMember.deleted_at.is_(None))",
        viewonly=True,
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_groups_deleted_at", "deleted_at"),
        Index("ix_groups_default_currency_code", "default_currency_code"),
    )
