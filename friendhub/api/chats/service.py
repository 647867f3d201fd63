import logging

from sqlalchemy.orm import Session

from friendhub.api.chats.models import ChatListItem, CHAT_TYPE_PRIVATE

logger = logging.getLogger(__name__)


class ChatListService:
    def __init__(self, db: Session):
        self.db = db

    def remove_item(self, uid: int, friend_id: int, chat_type: int = CHAT_TYPE_PRIVATE) -> bool:
        """Скрыть диалог из списка (мягкое удаление, status = 0)."""
        updated = (
            self.db.query(ChatListItem)
            .filter(
                ChatListItem.uid == uid,
                ChatListItem.friend_id == friend_id,
                ChatListItem.type == chat_type,
                ChatListItem.status == 1,
            )
            .update({"status": 0}, synchronize_session=False)
        )
        self.db.commit()
        return bool(updated)
