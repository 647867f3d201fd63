from sqlalchemy import Column, Integer, String, DateTime, Boolean, SmallInteger
from sqlalchemy.sql import func

from friendhub.database.database import Base


class User(Base):
    """
    Таблица пользователей.
    Редактирование профиля живёт вне этого сервиса, здесь только чтение.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    mobile = Column(String(11), unique=True, index=True, nullable=False)
    nickname = Column(String(50), nullable=False, default="")
    avatar = Column(String(255), default="")
    motto = Column(String(100), default="")
    gender = Column(SmallInteger, default=0)  # 0 - не указан, 1 - мужской, 2 - женский
    email = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    is_active = Column(Boolean, default=True)
