from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict


class ApplyStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class RelationStatus(str, Enum):
    SELF = "self"
    FRIEND = "friend"
    PENDING_SENT = "pending_sent"
    PENDING_RECEIVED = "pending_received"
    NONE = "none"


class FriendApplyCreate(BaseModel):
    friend_id: int = Field(..., gt=0, description="ID пользователя, которому отправляется заявка")
    remark: str = Field("", max_length=50, description="Сообщение к заявке")


class FriendApplyHandle(BaseModel):
    remark: str = Field("", max_length=50, description="Заметка о новом друге")
    accept: bool = Field(True, description="Принять или отклонить")


class FriendApplyItem(BaseModel):
    id: int = Field(gt=0)
    applicant_id: int
    target_id: int
    remark: str = ""
    status: ApplyStatus
    nickname: Optional[str] = None
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FriendApplyPage(BaseModel):
    page: int
    page_size: int
    total: int
    rows: List[FriendApplyItem]


class UnreadApplyNum(BaseModel):
    unread_num: int


class FriendItem(BaseModel):
    friend_id: int
    nickname: str = ""
    avatar: Optional[str] = None
    motto: Optional[str] = None
    gender: int = 0
    remark: str = ""
    online: bool = False

    model_config = ConfigDict(from_attributes=True)


class FriendRemarkUpdate(BaseModel):
    remark: str = Field(..., min_length=1, max_length=50)


class FriendRemark(BaseModel):
    friend_id: int
    remark: str


class UserSearchQuery(BaseModel):
    user_id: Optional[int] = Field(None, gt=0)
    mobile: Optional[str] = None


class UserSummary(BaseModel):
    """Краткая информация о найденном пользователе."""
    id: int = Field(gt=0)
    nickname: str = ""
    avatar: Optional[str] = None
    motto: Optional[str] = None
    gender: int = 0
    friend_status: RelationStatus = RelationStatus.NONE
    remark: str = ""

    model_config = ConfigDict(from_attributes=True)
