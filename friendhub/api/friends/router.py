from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from friendhub.api.auth.dependencies import get_current_active_user
from friendhub.api.friends.apply_service import FriendApplyService
from friendhub.api.friends.schemas import (
    FriendApplyCreate,
    FriendApplyHandle,
    FriendApplyItem,
    FriendApplyPage,
    FriendItem,
    FriendRemark,
    FriendRemarkUpdate,
    UnreadApplyNum,
)
from friendhub.api.friends.service import FriendshipService
from friendhub.api.users.models import User
from friendhub.cache.apply_num import UnreadApplyCounter
from friendhub.cache.friend_remark import FriendRemarkCache
from friendhub.cache.store import kv_store
from friendhub.core.config import settings
from friendhub.database.database import get_db
from friendhub.websocket.websocket_manager import dispatcher, presence

router = APIRouter(prefix="/api/v1/friends", tags=["friends"])


def get_friendship_service(db: Session = Depends(get_db)) -> FriendshipService:
    return FriendshipService(db, presence=presence, remark_cache=FriendRemarkCache(kv_store))


def get_friend_apply_service(
        db: Session = Depends(get_db),
        friendship_service: FriendshipService = Depends(get_friendship_service)
) -> FriendApplyService:
    return FriendApplyService(
        db,
        friendships=friendship_service,
        counter=UnreadApplyCounter(kv_store),
        remark_cache=friendship_service.remark_cache,
        presence=presence,
        dispatcher=dispatcher,
    )


@router.get("/", response_model=List[FriendItem])
async def get_friends(
        current_user: User = Depends(get_current_active_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    return await friendship_service.list_friends(current_user.id)


@router.get("/applies", response_model=FriendApplyPage)
async def get_applies(
        page: int = 1,
        page_size: int = settings.APPLY_PAGE_SIZE,
        current_user: User = Depends(get_current_active_user),
        apply_service: FriendApplyService = Depends(get_friend_apply_service)
):
    return await apply_service.list_applies(current_user.id, page, page_size)


@router.get("/applies/unread-num", response_model=UnreadApplyNum)
async def get_apply_unread_num(
        current_user: User = Depends(get_current_active_user),
        apply_service: FriendApplyService = Depends(get_friend_apply_service)
):
    return {"unread_num": await apply_service.unread_count(current_user.id)}


@router.post("/applies", response_model=FriendApplyItem, status_code=status.HTTP_201_CREATED)
async def send_apply(
        data: FriendApplyCreate,
        current_user: User = Depends(get_current_active_user),
        apply_service: FriendApplyService = Depends(get_friend_apply_service)
):
    return await apply_service.send_apply(current_user.id, data.friend_id, data.remark)


@router.put("/applies/{apply_id}")
async def handle_apply(
        apply_id: int,
        data: FriendApplyHandle,
        current_user: User = Depends(get_current_active_user),
        apply_service: FriendApplyService = Depends(get_friend_apply_service)
):
    success = await apply_service.resolve_apply(current_user.id, apply_id, data.remark, data.accept)
    return {"success": success}


@router.delete("/applies/{apply_id}")
async def delete_apply(
        apply_id: int,
        current_user: User = Depends(get_current_active_user),
        apply_service: FriendApplyService = Depends(get_friend_apply_service)
):
    return {"success": await apply_service.delete_apply(current_user.id, apply_id)}


@router.get("/{friend_id}/remark", response_model=FriendRemark)
async def get_remark(
        friend_id: int,
        current_user: User = Depends(get_current_active_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    remark = await friendship_service.get_remark(current_user.id, friend_id)
    return FriendRemark(friend_id=friend_id, remark=remark)


@router.put("/{friend_id}/remark")
async def edit_remark(
        friend_id: int,
        data: FriendRemarkUpdate,
        current_user: User = Depends(get_current_active_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    return {"success": await friendship_service.edit_remark(current_user.id, friend_id, data.remark)}


@router.delete("/{friend_id}")
async def remove_friend(
        friend_id: int,
        current_user: User = Depends(get_current_active_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    return {"success": await friendship_service.remove_friend(current_user.id, friend_id)}
