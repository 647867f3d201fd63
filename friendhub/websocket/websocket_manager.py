import logging
from typing import List

import socketio
from sqlalchemy.orm import Session

from friendhub.api.auth.utils import decode_user_id
from friendhub.api.friends.models import UsersFriend
from friendhub.cache.store import kv_store
from friendhub.core.config import settings
from friendhub.database.database import SessionLocal
from friendhub.websocket.dispatcher import SocketNotificationDispatcher
from friendhub.websocket.presence import PresenceRegistry

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════
# SOCKETIO SERVER
# ═══════════════════════════════════════════
sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins=settings.CORS_ORIGINS,
    logger=settings.DEBUG,
    engineio_logger=settings.DEBUG,
    allow_upgrades=True,
)

presence = PresenceRegistry(kv_store)
dispatcher = SocketNotificationDispatcher(sio, presence)


# ═══════════════════════════════════════════
# SOCKET EVENTS
# ═══════════════════════════════════════════

@sio.event
async def connect(sid, environ, auth):
    """Подключение клиента: auth = {"token": "<jwt>"}"""
    token = auth.get('token') if auth else None
    user_id = decode_user_id(token) if token else None

    if not user_id:
        logger.warning(f"Connection {sid} rejected: no valid token")
        return False

    first_connection = await presence.register(user_id, sid)
    logger.info(f"User {user_id} connected (session: {sid})")

    if first_connection:
        await broadcast_online_status(user_id, True)
    return True


@sio.event
async def disconnect(sid):
    """Отключение клиента"""
    result = await presence.unregister(sid)
    if result is None:
        logger.warning(f"Disconnect of unknown session: {sid}")
        return

    user_id, went_offline = result
    logger.info(f"User {user_id} disconnected (session: {sid})")
    if went_offline:
        await broadcast_online_status(user_id, False)


# ═══════════════════════════════════════════
# ONLINE STATUS
# ═══════════════════════════════════════════

def get_friend_ids(db: Session, user_id: int) -> List[int]:
    rows = db.query(UsersFriend.friend_id).filter(UsersFriend.user_id == user_id).all()
    return [row.friend_id for row in rows]


async def broadcast_online_status(user_id: int, is_online: bool):
    """Уведомить друзей о смене онлайн статуса"""
    db = SessionLocal()
    try:
        friend_ids = get_friend_ids(db, user_id)
    except Exception as e:
        logger.error(f"broadcast_online_status: cannot load friends of {user_id}: {e}")
        return
    finally:
        db.close()

    statuses = await presence.batch_online_status(friend_ids)
    for friend_id, online in statuses.items():
        if online:
            await dispatcher.send_to_user(friend_id, 'user_online_status', {
                'user_id': user_id,
                'is_online': is_online
            })

    logger.debug(f"Online status {is_online} of user {user_id} sent to {sum(statuses.values())} friends")
