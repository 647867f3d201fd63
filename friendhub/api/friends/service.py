import logging
from typing import Any, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from friendhub.api.chats.service import ChatListService
from friendhub.api.friends.models import FriendApply, UsersFriend
from friendhub.api.friends.schemas import FriendItem, RelationStatus, UserSearchQuery, UserSummary
from friendhub.api.users.models import User
from friendhub.cache.friend_remark import FriendRemarkCache
from friendhub.core.exceptions import InvalidArgument, NotFound
from friendhub.core.validators import as_id, is_phone
from friendhub.database.database import write_transaction
from friendhub.websocket.presence import PresenceRegistry

logger = logging.getLogger(__name__)

REMARK_MAX_LENGTH = 50


class FriendshipService:
    """
    Хранилище дружбы. Единственное место, которое пишет в users_friends.
    """

    def __init__(
            self,
            db: Session,
            presence: PresenceRegistry,
            remark_cache: FriendRemarkCache,
            chat_list: Optional[ChatListService] = None
    ):
        self.db = db
        self.presence = presence
        self.remark_cache = remark_cache
        self.chat_list = chat_list or ChatListService(db)

    def _pair_filter(self, user_id: int, friend_id: int):
        return or_(
            and_(UsersFriend.user_id == user_id, UsersFriend.friend_id == friend_id),
            and_(UsersFriend.user_id == friend_id, UsersFriend.friend_id == user_id)
        )

    @staticmethod
    def _ids(user_id: Any, friend_id: Any):
        uid, fid = as_id(user_id), as_id(friend_id)
        if uid is None or fid is None:
            raise InvalidArgument("Некорректный идентификатор пользователя")
        if uid == fid:
            raise InvalidArgument("Нельзя выполнить действие над самим собой")
        return uid, fid

    async def list_friends(self, user_id: int) -> List[FriendItem]:
        rows = (
            self.db.query(UsersFriend, User)
            .join(User, User.id == UsersFriend.friend_id)
            .filter(UsersFriend.user_id == user_id)
            .order_by(UsersFriend.id)
            .all()
        )
        online = await self.presence.batch_online_status(friend.id for _, friend in rows)

        return [
            FriendItem(
                friend_id=friend.id,
                nickname=friend.nickname or "",
                avatar=friend.avatar,
                motto=friend.motto,
                gender=friend.gender or 0,
                remark=link.remark or "",
                online=online.get(friend.id, False),
            )
            for link, friend in rows
        ]

    def is_friend(self, user_id: int, friend_id: int) -> bool:
        return self.db.query(UsersFriend.id).filter(
            UsersFriend.user_id == user_id,
            UsersFriend.friend_id == friend_id
        ).first() is not None

    def create_pair(self, user_id: int, friend_id: int, user_remark: str = "", friend_remark: str = "") -> None:
        """
        Добавляет обе направленные записи в текущую транзакцию (без commit).
        Уже существующая запись не дублируется.
        """
        existing = {
            (row.user_id, row.friend_id): row
            for row in self.db.query(UsersFriend).filter(self._pair_filter(user_id, friend_id)).all()
        }

        for owner, other, remark in ((user_id, friend_id, user_remark), (friend_id, user_id, friend_remark)):
            row = existing.get((owner, other))
            if row is None:
                self.db.add(UsersFriend(user_id=owner, friend_id=other, remark=remark or ""))
            elif remark:
                row.remark = remark
        self.db.flush()

    async def remove_friend(self, user_id: Any, friend_id: Any) -> bool:
        user_id, friend_id = self._ids(user_id, friend_id)

        with write_transaction(self.db):
            deleted = (
                self.db.query(UsersFriend)
                .filter(self._pair_filter(user_id, friend_id))
                .delete(synchronize_session=False)
            )
            if deleted == 0:
                raise NotFound("Дружба не найдена")
            if deleted == 1:
                logger.error(f"One-sided friendship {user_id}<->{friend_id} found and removed")

        await self._cleanup_after_remove(user_id, friend_id)
        return True

    async def _cleanup_after_remove(self, user_id: int, friend_id: int) -> None:
        for owner, other in ((user_id, friend_id), (friend_id, user_id)):
            try:
                await self.remark_cache.delete(owner, other)
            except Exception as e:
                logger.warning(f"Remark cache invalidation failed for {owner}->{other}: {e!r}")
            try:
                self.chat_list.remove_item(owner, other)
            except Exception as e:
                self.db.rollback()
                logger.warning(f"Chat list cleanup failed for {owner}->{other}: {e!r}")

    async def edit_remark(self, owner_id: Any, friend_id: Any, remark: str) -> bool:
        remark = (remark or "").strip()
        if not remark or len(remark) > REMARK_MAX_LENGTH:
            raise InvalidArgument("Заметка должна содержать от 1 до 50 символов")
        owner_id, friend_id = self._ids(owner_id, friend_id)

        with write_transaction(self.db):
            updated = (
                self.db.query(UsersFriend)
                .filter(UsersFriend.user_id == owner_id, UsersFriend.friend_id == friend_id)
                .update({"remark": remark}, synchronize_session=False)
            )
            if not updated:
                raise NotFound("Дружба не найдена")

        try:
            await self.remark_cache.set(owner_id, friend_id, remark)
        except Exception as e:
            logger.warning(f"Remark cache write failed for {owner_id}->{friend_id}: {e!r}")
        return True

    async def get_remark(self, owner_id: Any, friend_id: Any) -> str:
        owner_id, friend_id = self._ids(owner_id, friend_id)
        remark = await self.remark_cache.get_or_load(self.db, owner_id, friend_id)
        if remark is None:
            raise NotFound("Дружба не найдена")
        return remark

    def friendship_status(self, user_id: int, requester_id: int) -> RelationStatus:
        """Отношение requester к user_id."""
        if user_id == requester_id:
            return RelationStatus.SELF
        if self.is_friend(requester_id, user_id):
            return RelationStatus.FRIEND

        pending = self.db.query(FriendApply).filter(
            FriendApply.status == "pending",
            or_(
                and_(FriendApply.applicant_id == requester_id, FriendApply.target_id == user_id),
                and_(FriendApply.applicant_id == user_id, FriendApply.target_id == requester_id)
            )
        ).order_by(FriendApply.id.desc()).first()
        if pending is None:
            return RelationStatus.NONE
        if pending.applicant_id == requester_id:
            return RelationStatus.PENDING_SENT
        return RelationStatus.PENDING_RECEIVED

    def search_user(self, criteria: UserSearchQuery, requester_id: int) -> Optional[UserSummary]:
        if criteria.user_id is not None and criteria.mobile:
            raise InvalidArgument("Укажите либо user_id, либо mobile")

        query = self.db.query(User)
        if criteria.user_id is not None:
            query = query.filter(User.id == criteria.user_id)
        elif is_phone(criteria.mobile):
            query = query.filter(User.mobile == criteria.mobile)
        else:
            raise InvalidArgument("Параметры поиска некорректны")

        user = query.first()
        if user is None:
            return None

        status = self.friendship_status(user.id, requester_id)
        remark = ""
        if status == RelationStatus.FRIEND:
            link = self.db.query(UsersFriend.remark).filter(
                UsersFriend.user_id == requester_id,
                UsersFriend.friend_id == user.id
            ).first()
            remark = link.remark if link else ""

        return UserSummary(
            id=user.id,
            nickname=user.nickname or "",
            avatar=user.avatar,
            motto=user.motto,
            gender=user.gender or 0,
            friend_status=status,
            remark=remark,
        )
