from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from friendhub.database.database import Base


class FriendApply(Base):
    __tablename__ = "friend_applies"

    id = Column(Integer, primary_key=True, index=True)
    applicant_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    target_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    remark = Column(String(50), nullable=False, default="")
    status = Column(String(20), nullable=False, default="pending")  # pending, accepted, rejected
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    applicant = relationship("User", foreign_keys=[applicant_id])
    target = relationship("User", foreign_keys=[target_id])

    __table_args__ = (
        CheckConstraint("applicant_id <> target_id", name="ck_friend_apply_not_self"),
        Index("ix_friend_applies_target_created", "target_id", "created_at"),
    )


class UsersFriend(Base):
    """
    Направленная запись дружбы.
    Пара (A, B) и (B, A) создаётся и удаляется только вместе.
    """
    __tablename__ = "users_friends"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    friend_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    remark = Column(String(50), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    friend = relationship("User", foreign_keys=[friend_id])

    __table_args__ = (
        UniqueConstraint("user_id", "friend_id", name="unique_users_friend"),
        CheckConstraint("user_id <> friend_id", name="ck_users_friend_not_self"),
    )
