from friendhub.cache.store import KeyValueStore


class UnreadApplyCounter:
    """Количество непросмотренных заявок в друзья (для бейджа в UI)."""

    PREFIX = "friend:apply:unread:"

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _key(self, user_id: int) -> str:
        return f"{self.PREFIX}{user_id}"

    async def get(self, user_id: int) -> int:
        value = await self.store.get(self._key(user_id))
        return max(int(value or 0), 0)

    async def set(self, user_id: int, value: int) -> None:
        await self.store.set(self._key(user_id), max(int(value), 0))

    async def increment(self, user_id: int) -> int:
        return await self.store.incr(self._key(user_id))

    async def delete(self, user_id: int) -> None:
        await self.store.delete(self._key(user_id))
