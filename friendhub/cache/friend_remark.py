import logging
from typing import Optional

from sqlalchemy.orm import Session

from friendhub.api.friends.models import UsersFriend
from friendhub.cache.store import KeyValueStore

logger = logging.getLogger(__name__)


class FriendRemarkCache:
    """
    Кэш заметок о друзьях: (владелец, друг) -> заметка.
    Источник истины - users_friends.remark.
    """

    PREFIX = "friend:remark:"

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _key(self, owner_id: int, friend_id: int) -> str:
        return f"{self.PREFIX}{owner_id}:{friend_id}"

    async def get(self, owner_id: int, friend_id: int) -> Optional[str]:
        return await self.store.get(self._key(owner_id, friend_id))

    async def set(self, owner_id: int, friend_id: int, remark: str) -> None:
        await self.store.set(self._key(owner_id, friend_id), remark)

    async def delete(self, owner_id: int, friend_id: int) -> None:
        await self.store.delete(self._key(owner_id, friend_id))

    async def get_or_load(self, db: Session, owner_id: int, friend_id: int) -> Optional[str]:
        """
        Read-through: сначала кэш, при промахе - БД.
        Возвращает None, если такой дружбы нет.
        """
        try:
            cached = await self.get(owner_id, friend_id)
        except Exception as e:
            logger.warning(f"Remark cache read failed for {owner_id}->{friend_id}: {e}")
            cached = None
        if cached is not None:
            return cached

        row = db.query(UsersFriend.remark).filter(
            UsersFriend.user_id == owner_id,
            UsersFriend.friend_id == friend_id
        ).first()
        if row is None:
            return None

        try:
            await self.set(owner_id, friend_id, row.remark)
        except Exception as e:
            logger.warning(f"Remark cache fill failed for {owner_id}->{friend_id}: {e}")
        return row.remark
