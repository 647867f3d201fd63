from sqlalchemy import Column, Integer, SmallInteger, DateTime, ForeignKey, Index
from sqlalchemy.sql import func

from friendhub.database.database import Base

CHAT_TYPE_PRIVATE = 1
CHAT_TYPE_GROUP = 2


class ChatListItem(Base):
    """Строка списка диалогов пользователя."""
    __tablename__ = "users_chat_list"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(SmallInteger, nullable=False, default=CHAT_TYPE_PRIVATE)
    uid = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    friend_id = Column(Integer, nullable=False, default=0)
    group_id = Column(Integer, nullable=False, default=0)
    status = Column(SmallInteger, nullable=False, default=1)  # 1 - виден, 0 - удалён
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("ix_users_chat_list_uid_friend", "uid", "friend_id"),
    )
