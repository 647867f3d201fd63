import logging
from typing import Any, Optional

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from friendhub.api.friends.models import FriendApply
from friendhub.api.friends.schemas import ApplyStatus, FriendApplyItem, FriendApplyPage
from friendhub.api.friends.service import FriendshipService
from friendhub.api.users.models import User
from friendhub.cache.apply_num import UnreadApplyCounter
from friendhub.cache.friend_remark import FriendRemarkCache
from friendhub.core.config import settings
from friendhub.core.exceptions import AlreadyResolved, Forbidden, InvalidArgument, NotFound
from friendhub.core.validators import as_id
from friendhub.database.database import write_transaction
from friendhub.websocket.dispatcher import SocketNotificationDispatcher
from friendhub.websocket.notifications import friend_accepted_notification, friend_apply_notification
from friendhub.websocket.presence import PresenceRegistry

logger = logging.getLogger(__name__)


class FriendApplyService:
    """
    Заявки в друзья: pending -> accepted | rejected.

    Переход из pending выполняется условным UPDATE (... AND status = 'pending'),
    поэтому из двух параллельных обработок одной заявки успешна ровно одна.
    Счётчик, онлайн и уведомления - побочные эффекты: их сбой не отменяет запись.
    """

    def __init__(
            self,
            db: Session,
            friendships: FriendshipService,
            counter: UnreadApplyCounter,
            remark_cache: FriendRemarkCache,
            presence: PresenceRegistry,
            dispatcher: SocketNotificationDispatcher
    ):
        self.db = db
        self.friendships = friendships
        self.counter = counter
        self.remark_cache = remark_cache
        self.presence = presence
        self.dispatcher = dispatcher

    async def send_apply(self, applicant_id: Any, target_id: Any, remark: str = "") -> FriendApplyItem:
        applicant_id, target_id = as_id(applicant_id), as_id(target_id)
        if applicant_id is None or target_id is None:
            raise InvalidArgument("Некорректный идентификатор пользователя")
        if applicant_id == target_id:
            raise InvalidArgument("Нельзя добавить себя в друзья")
        remark = (remark or "").strip()
        if len(remark) > 50:
            raise InvalidArgument("Сообщение к заявке длиннее 50 символов")

        applicant = self.db.query(User).filter(User.id == applicant_id).first()
        target = self.db.query(User).filter(User.id == target_id).first()
        if not applicant or not target:
            raise NotFound("Пользователь не найден")

        apply = FriendApply(applicant_id=applicant_id, target_id=target_id, remark=remark, status="pending")
        with write_transaction(self.db):
            self.db.add(apply)
        self.db.refresh(apply)

        try:
            await self.counter.increment(target_id)
        except Exception as e:
            logger.warning(f"Unread apply counter increment failed for user {target_id}: {e!r}")

        if await self.presence.is_online(target_id):
            self.dispatcher.dispatch(target_id, friend_apply_notification(
                apply_id=apply.id,
                sender_id=applicant_id,
                sender_name=applicant.nickname,
                remark=remark,
            ))

        return self._to_item(apply, applicant)

    async def list_applies(self, user_id: int, page: int = 1, page_size: Optional[int] = None) -> FriendApplyPage:
        if page_size is None:
            page_size = settings.APPLY_PAGE_SIZE
        if page < 1 or not 1 <= page_size <= settings.APPLY_MAX_PAGE_SIZE:
            raise InvalidArgument("Некорректные параметры пагинации")

        total = self.db.query(func.count(FriendApply.id)).filter(FriendApply.target_id == user_id).scalar() or 0
        rows = (
            self.db.query(FriendApply, User)
            .join(User, User.id == FriendApply.applicant_id)
            .filter(FriendApply.target_id == user_id)
            .order_by(desc(FriendApply.created_at), desc(FriendApply.id))
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )

        # Просмотр списка = заявки прочитаны
        try:
            await self.counter.delete(user_id)
        except Exception as e:
            logger.warning(f"Unread apply counter reset failed for user {user_id}: {e!r}")

        return FriendApplyPage(
            page=page,
            page_size=page_size,
            total=total,
            rows=[self._to_item(apply, applicant) for apply, applicant in rows],
        )

    async def unread_count(self, user_id: int) -> int:
        try:
            return await self.counter.get(user_id)
        except Exception as e:
            logger.warning(f"Unread apply counter read failed for user {user_id}: {e!r}")
            return 0

    async def resolve_apply(self, resolver_id: int, apply_id: Any, remark: str = "", accept: bool = True) -> bool:
        apply_id = as_id(apply_id)
        if apply_id is None:
            raise InvalidArgument("Некорректный идентификатор заявки")
        remark = (remark or "").strip()
        if len(remark) > 50:
            raise InvalidArgument("Заметка длиннее 50 символов")

        apply = self.db.query(FriendApply).filter(FriendApply.id == apply_id).first()
        if not apply or apply.target_id != resolver_id:
            raise NotFound("Заявка не найдена")
        if apply.status != ApplyStatus.PENDING.value:
            raise AlreadyResolved()

        applicant_id = apply.applicant_id
        new_status = ApplyStatus.ACCEPTED if accept else ApplyStatus.REJECTED

        with write_transaction(self.db):
            updated = (
                self.db.query(FriendApply)
                .filter(FriendApply.id == apply_id, FriendApply.status == ApplyStatus.PENDING.value)
                .update({"status": new_status.value, "resolved_at": func.now()}, synchronize_session=False)
            )
            if updated == 0:
                # Другой запрос успел раньше
                raise AlreadyResolved()
            if accept:
                self.friendships.create_pair(resolver_id, applicant_id, user_remark=remark)

        if not accept:
            return True

        if remark:
            try:
                await self.remark_cache.set(resolver_id, applicant_id, remark)
            except Exception as e:
                logger.warning(f"Remark cache write failed for {resolver_id}->{applicant_id}: {e!r}")

        if await self.presence.is_online(applicant_id):
            resolver = self.db.query(User.nickname).filter(User.id == resolver_id).first()
            self.dispatcher.dispatch(applicant_id, friend_accepted_notification(
                apply_id=apply_id,
                accepter_id=resolver_id,
                accepter_name=resolver.nickname if resolver else "",
            ))
        return True

    async def delete_apply(self, user_id: int, apply_id: Any) -> bool:
        apply_id = as_id(apply_id)
        if apply_id is None:
            raise InvalidArgument("Некорректный идентификатор заявки")

        apply = self.db.query(FriendApply).filter(FriendApply.id == apply_id).first()
        if not apply:
            raise NotFound("Заявка не найдена")
        if user_id not in (apply.applicant_id, apply.target_id):
            raise Forbidden("Заявка принадлежит другому пользователю")

        with write_transaction(self.db):
            deleted = self.db.query(FriendApply).filter(FriendApply.id == apply_id).delete(synchronize_session=False)
            if not deleted:
                raise NotFound("Заявка не найдена")
        return True

    @staticmethod
    def _to_item(apply: FriendApply, applicant: Optional[User] = None) -> FriendApplyItem:
        return FriendApplyItem(
            id=apply.id,
            applicant_id=apply.applicant_id,
            target_id=apply.target_id,
            remark=apply.remark or "",
            status=ApplyStatus(apply.status),
            nickname=applicant.nickname if applicant else None,
            avatar=applicant.avatar if applicant else None,
            created_at=apply.created_at,
            resolved_at=apply.resolved_at,
        )
