import asyncio
import logging
from typing import Any, Dict, Set

from friendhub.core.config import settings
from friendhub.websocket.presence import PresenceRegistry

logger = logging.getLogger(__name__)


class SocketNotificationDispatcher:
    """
    Доставка событий пользователю через Socket.IO.
    Ничего не гарантирует: ошибки и таймауты только логируются.
    """

    def __init__(self, server, presence: PresenceRegistry, timeout: float = settings.NOTIFY_TIMEOUT_SECONDS):
        self.server = server
        self.presence = presence
        self.timeout = timeout
        self._tasks: Set[asyncio.Task] = set()

    async def send_to_user(self, user_id: int, event: str, data: Dict[str, Any]) -> int:
        """Отправить событие всем подключениям пользователя. Возвращает число доставок."""
        try:
            session_ids = await self.presence.connection_ids(user_id)
        except Exception as e:
            logger.warning(f"Cannot resolve connections of user {user_id}: {e!r}")
            return 0

        sent = 0
        for session_id in session_ids:
            try:
                await asyncio.wait_for(self.server.emit(event, data, room=session_id), self.timeout)
                sent += 1
            except Exception as e:
                logger.warning(f"Failed to emit {event} to user {user_id} (session {session_id}): {e!r}")
        return sent

    async def notify(self, user_id: int, payload: Dict[str, Any]) -> int:
        return await self.send_to_user(user_id, "notification", payload)

    def dispatch(self, user_id: int, payload: Dict[str, Any]) -> asyncio.Task:
        """Fire-and-forget: запускает notify в фоне и сразу возвращает управление."""
        task = asyncio.create_task(self.notify(user_id, payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Дождаться фоновых отправок (остановка сервера, тесты)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
