import asyncio
import logging
from typing import Dict, Iterable, Optional, Set, Tuple

from friendhub.cache.store import KeyValueStore
from friendhub.core.config import settings

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """
    Онлайн-статус: user_id -> набор session_id живых подключений.

    Ответы - снимок на момент запроса. Пользователь может отключиться сразу
    после проверки, поэтому доставка уведомлений всегда best-effort.
    """

    USER_PREFIX = "presence:user:"
    SID_TO_UID = "presence:sid_to_uid"

    def __init__(self, store: KeyValueStore, timeout: float = settings.PRESENCE_TIMEOUT_SECONDS):
        self.store = store
        self.timeout = timeout

    def _key(self, user_id: int) -> str:
        return f"{self.USER_PREFIX}{user_id}"

    async def register(self, user_id: int, sid: str) -> bool:
        """Возвращает True, если это первое подключение пользователя."""
        await self.store.hset(self.SID_TO_UID, sid, user_id)
        await self.store.sadd(self._key(user_id), sid)
        return await self.store.scard(self._key(user_id)) == 1

    async def unregister(self, sid: str) -> Optional[Tuple[int, bool]]:
        """
        Удаляет подключение.
        Возвращает (user_id, ушёл_ли_в_офлайн) или None для неизвестной сессии.
        """
        user_id = await self.store.hget(self.SID_TO_UID, sid)
        if user_id is None:
            return None
        await self.store.hdel(self.SID_TO_UID, sid)
        remaining = await self.store.srem(self._key(user_id), sid)
        return user_id, remaining == 0

    async def connection_ids(self, user_id: int) -> Set[str]:
        return await self.store.smembers(self._key(user_id))

    async def is_online(self, user_id: int) -> bool:
        try:
            count = await asyncio.wait_for(self.store.scard(self._key(user_id)), self.timeout)
        except Exception as e:
            logger.warning(f"Presence lookup failed for user {user_id}, assuming offline: {e!r}")
            return False
        return count > 0

    async def batch_online_status(self, user_ids: Iterable[int]) -> Dict[int, bool]:
        user_ids = list(dict.fromkeys(user_ids))
        if not user_ids:
            return {}
        try:
            counts = await asyncio.wait_for(
                self.store.scard_many([self._key(uid) for uid in user_ids]),
                self.timeout
            )
        except Exception as e:
            logger.warning(f"Batch presence lookup failed for {len(user_ids)} users, assuming offline: {e!r}")
            return {uid: False for uid in user_ids}
        return {uid: count > 0 for uid, count in zip(user_ids, counts)}
