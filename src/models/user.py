# src/models/user.py

from sqlalchemy import Column, Integer, String, DateTime, func
from src.db import Base

class User(Base):
    """
    Пользователь. Аутентификация живёт снаружи — здесь только профиль,
    на который ссылаются группы и расходы.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=True)
    name = Column(String, index=True, nullable=False)  # Отображаемое имя
    avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, name={self.name})>"
