from typing import Optional

from fastapi import APIRouter, Depends, Query

from friendhub.api.auth.dependencies import get_current_active_user
from friendhub.api.friends.router import get_friendship_service
from friendhub.api.friends.schemas import UserSearchQuery, UserSummary
from friendhub.api.friends.service import FriendshipService
from friendhub.api.users.models import User
from friendhub.core.exceptions import NotFound

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/search", response_model=UserSummary)
async def search_user(
        user_id: Optional[int] = Query(None, gt=0),
        mobile: Optional[str] = None,
        current_user: User = Depends(get_current_active_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    summary = friendship_service.search_user(UserSearchQuery(user_id=user_id, mobile=mobile), current_user.id)
    if summary is None:
        raise NotFound("Пользователь не найден")
    return summary
