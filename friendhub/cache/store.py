import asyncio
from typing import Any, Dict, Iterable, List, Optional, Set


class KeyValueStore:
    """
    Общее key-value хранилище для счётчиков, кэша заметок и онлайна.

    Каждая операция атомарна для вызывающего: все изменения идут под одним
    asyncio.Lock. Данные вспомогательные и восстанавливаются из БД или
    повторным подключением клиента.

    Данные живут в памяти одного процесса: онлайн и счётчики согласованы
    только при запуске с одним воркером uvicorn (--workers 1).
    """

    def __init__(self):
        self._values: Dict[str, Any] = {}
        self._hashes: Dict[str, Dict[str, Any]] = {}
        self._sets: Dict[str, Set[str]] = {}
        self._lock = asyncio.Lock()

    # ───── строки и счётчики ─────

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            return self._values.get(key)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            self._values[key] = value

    async def incr(self, key: str, amount: int = 1) -> int:
        async with self._lock:
            value = int(self._values.get(key) or 0) + amount
            self._values[key] = value
            return value

    async def delete(self, *keys: str) -> int:
        async with self._lock:
            removed = 0
            for key in keys:
                for bucket in (self._values, self._hashes, self._sets):
                    if key in bucket:
                        del bucket[key]
                        removed += 1
            return removed

    # ───── хэши ─────

    async def hget(self, key: str, field: str) -> Optional[Any]:
        async with self._lock:
            return self._hashes.get(key, {}).get(field)

    async def hset(self, key: str, field: str, value: Any) -> None:
        async with self._lock:
            self._hashes.setdefault(key, {})[field] = value

    async def hdel(self, key: str, field: str) -> bool:
        async with self._lock:
            bucket = self._hashes.get(key)
            if not bucket or field not in bucket:
                return False
            del bucket[field]
            if not bucket:
                del self._hashes[key]
            return True

    async def hgetall(self, key: str) -> Dict[str, Any]:
        async with self._lock:
            return dict(self._hashes.get(key, {}))

    # ───── множества ─────

    async def sadd(self, key: str, member: str) -> bool:
        async with self._lock:
            members = self._sets.setdefault(key, set())
            if member in members:
                return False
            members.add(member)
            return True

    async def srem(self, key: str, member: str) -> int:
        """Удаляет элемент и возвращает оставшийся размер множества."""
        async with self._lock:
            members = self._sets.get(key)
            if members is None:
                return 0
            members.discard(member)
            if not members:
                del self._sets[key]
                return 0
            return len(members)

    async def smembers(self, key: str) -> Set[str]:
        async with self._lock:
            return set(self._sets.get(key, set()))

    async def scard(self, key: str) -> int:
        async with self._lock:
            return len(self._sets.get(key, ()))

    async def scard_many(self, keys: Iterable[str]) -> List[int]:
        """Размеры нескольких множеств за одно обращение."""
        async with self._lock:
            return [len(self._sets.get(key, ())) for key in keys]


kv_store = KeyValueStore()
