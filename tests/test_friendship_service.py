"""
Tests for FriendshipService: friend list, removal, remarks and user search
"""

from unittest.mock import Mock

import pytest

from friendhub.api.chats.models import ChatListItem
from friendhub.api.friends.models import UsersFriend
from friendhub.api.friends.schemas import RelationStatus, UserSearchQuery
from friendhub.api.friends.service import FriendshipService
from friendhub.core.exceptions import InvalidArgument, NotFound


def make_friends(db, a, b, remark_a="", remark_b=""):
    db.add_all([
        UsersFriend(user_id=a, friend_id=b, remark=remark_a),
        UsersFriend(user_id=b, friend_id=a, remark=remark_b),
    ])
    db.commit()


def friend_ids(items):
    return {item.friend_id for item in items}


class TestListFriends:

    @pytest.mark.asyncio
    async def test_lists_own_rows_with_online_flag(self, friendship_service, presence, db, users):
        make_friends(db, 10, 20, remark_a="buddy")
        make_friends(db, 10, 30)
        await presence.register(30, "sid-30")

        items = {item.friend_id: item for item in await friendship_service.list_friends(10)}

        assert set(items) == {20, 30}
        assert items[20].remark == "buddy"
        assert items[20].nickname == "user20"
        assert items[20].online is False
        assert items[30].online is True

    @pytest.mark.asyncio
    async def test_no_friends(self, friendship_service, users):
        assert await friendship_service.list_friends(10) == []

    @pytest.mark.asyncio
    async def test_presence_is_queried_once_per_list(self, db, remark_cache, users):
        make_friends(db, 10, 20)
        make_friends(db, 10, 30)
        presence = Mock()

        async def batch_online_status(user_ids):
            presence.calls.append(list(user_ids))
            return {}

        presence.calls = []
        presence.batch_online_status = batch_online_status
        service = FriendshipService(db, presence=presence, remark_cache=remark_cache)

        items = await service.list_friends(10)

        assert len(presence.calls) == 1
        assert sorted(presence.calls[0]) == [20, 30]
        assert all(item.online is False for item in items)


class TestCreatePair:

    def test_creates_both_rows_inside_callers_transaction(self, friendship_service, db, users):
        friendship_service.create_pair(10, 20, user_remark="mine")
        db.commit()

        rows = {(r.user_id, r.friend_id): r.remark for r in db.query(UsersFriend).all()}
        assert rows == {(10, 20): "mine", (20, 10): ""}

    def test_is_idempotent(self, friendship_service, db, users):
        friendship_service.create_pair(10, 20)
        friendship_service.create_pair(10, 20)
        db.commit()

        assert db.query(UsersFriend).count() == 2

    def test_repairs_missing_direction(self, friendship_service, db, users):
        db.add(UsersFriend(user_id=10, friend_id=20, remark="kept"))
        db.commit()

        friendship_service.create_pair(20, 10)
        db.commit()

        rows = {(r.user_id, r.friend_id): r.remark for r in db.query(UsersFriend).all()}
        assert rows == {(10, 20): "kept", (20, 10): ""}


class TestRemoveFriend:

    @pytest.mark.asyncio
    async def test_removes_both_directions(self, friendship_service, db, users):
        make_friends(db, 10, 20)
        make_friends(db, 10, 30)

        assert await friendship_service.remove_friend(10, 20) is True

        assert friend_ids(await friendship_service.list_friends(10)) == {30}
        assert friend_ids(await friendship_service.list_friends(20)) == set()

    @pytest.mark.asyncio
    async def test_either_side_may_remove(self, friendship_service, db, users):
        make_friends(db, 10, 20)

        assert await friendship_service.remove_friend("20", "10") is True
        assert db.query(UsersFriend).count() == 0

    @pytest.mark.asyncio
    async def test_missing_relationship(self, friendship_service, db, users):
        make_friends(db, 10, 30)

        with pytest.raises(NotFound):
            await friendship_service.remove_friend(10, 20)
        assert db.query(UsersFriend).count() == 2

    @pytest.mark.asyncio
    async def test_second_remove_reports_not_found(self, friendship_service, db, users):
        make_friends(db, 10, 20)
        await friendship_service.remove_friend(10, 20)

        with pytest.raises(NotFound):
            await friendship_service.remove_friend(20, 10)

    @pytest.mark.asyncio
    async def test_one_sided_row_is_cleaned_up(self, friendship_service, db, users):
        db.add(UsersFriend(user_id=20, friend_id=10))
        db.commit()

        assert await friendship_service.remove_friend(10, 20) is True
        assert db.query(UsersFriend).count() == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id,friend_id", [(10, 10), (10, "x"), (10, 0), (10, None)])
    async def test_invalid_ids(self, friendship_service, users, user_id, friend_id):
        with pytest.raises(InvalidArgument):
            await friendship_service.remove_friend(user_id, friend_id)

    @pytest.mark.asyncio
    async def test_hides_private_chats_of_both_sides(self, friendship_service, db, users):
        make_friends(db, 10, 20)
        db.add_all([
            ChatListItem(uid=10, friend_id=20, type=1, status=1),
            ChatListItem(uid=20, friend_id=10, type=1, status=1),
            ChatListItem(uid=10, friend_id=30, type=1, status=1),
        ])
        db.commit()

        await friendship_service.remove_friend(10, 20)

        statuses = {(c.uid, c.friend_id): c.status for c in db.query(ChatListItem).all()}
        assert statuses == {(10, 20): 0, (20, 10): 0, (10, 30): 1}

    @pytest.mark.asyncio
    async def test_chat_cleanup_failure_is_not_fatal(self, db, presence, remark_cache, users):
        make_friends(db, 10, 20)
        chat_list = Mock()
        chat_list.remove_item.side_effect = RuntimeError("chat service down")
        service = FriendshipService(db, presence=presence, remark_cache=remark_cache, chat_list=chat_list)

        assert await service.remove_friend(10, 20) is True
        assert db.query(UsersFriend).count() == 0
        assert chat_list.remove_item.call_count == 2

    @pytest.mark.asyncio
    async def test_drops_cached_remarks(self, friendship_service, remark_cache, db, users):
        make_friends(db, 10, 20)
        await remark_cache.set(10, 20, "old")

        await friendship_service.remove_friend(10, 20)

        assert await remark_cache.get(10, 20) is None


class TestRemarks:

    @pytest.mark.asyncio
    async def test_remark_is_directional(self, friendship_service, db, users):
        make_friends(db, 10, 20)

        assert await friendship_service.edit_remark(10, 20, "bestie") is True

        mine = {i.friend_id: i.remark for i in await friendship_service.list_friends(10)}
        theirs = {i.friend_id: i.remark for i in await friendship_service.list_friends(20)}
        assert mine == {20: "bestie"}
        assert theirs == {10: ""}

    @pytest.mark.asyncio
    async def test_edit_writes_through_to_cache(self, friendship_service, remark_cache, db, users):
        make_friends(db, 10, 20)
        await friendship_service.edit_remark(10, "20", "  bestie ")

        assert await remark_cache.get(10, 20) == "bestie"
        assert await friendship_service.get_remark(10, 20) == "bestie"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("remark", ["", "   ", "x" * 51])
    async def test_invalid_remark(self, friendship_service, db, users, remark):
        make_friends(db, 10, 20)

        with pytest.raises(InvalidArgument):
            await friendship_service.edit_remark(10, 20, remark)

    @pytest.mark.asyncio
    async def test_edit_for_stranger(self, friendship_service, users):
        with pytest.raises(NotFound):
            await friendship_service.edit_remark(10, 30, "who")

    @pytest.mark.asyncio
    async def test_get_remark_reads_database_on_cache_miss(self, friendship_service, db, users):
        make_friends(db, 10, 20, remark_a="from db")

        assert await friendship_service.get_remark(10, 20) == "from db"

    @pytest.mark.asyncio
    async def test_get_remark_for_stranger(self, friendship_service, users):
        with pytest.raises(NotFound):
            await friendship_service.get_remark(10, 30)


class TestSearchUser:

    def test_by_id(self, friendship_service, users):
        summary = friendship_service.search_user(UserSearchQuery(user_id=20), 10)

        assert summary.id == 20
        assert summary.nickname == "user20"
        assert summary.friend_status == RelationStatus.NONE

    def test_by_mobile(self, friendship_service, users):
        summary = friendship_service.search_user(UserSearchQuery(mobile="13800000030"), 10)
        assert summary.id == 30

    def test_no_match(self, friendship_service, users):
        assert friendship_service.search_user(UserSearchQuery(user_id=999), 10) is None
        assert friendship_service.search_user(UserSearchQuery(mobile="13999999999"), 10) is None

    @pytest.mark.parametrize("criteria", [
        UserSearchQuery(),
        UserSearchQuery(mobile="12345"),
        UserSearchQuery(user_id=20, mobile="13800000020"),
    ])
    def test_invalid_criteria(self, friendship_service, users, criteria):
        with pytest.raises(InvalidArgument):
            friendship_service.search_user(criteria, 10)

    def test_self(self, friendship_service, users):
        summary = friendship_service.search_user(UserSearchQuery(user_id=10), 10)
        assert summary.friend_status == RelationStatus.SELF

    def test_friend_with_remark(self, friendship_service, db, users):
        make_friends(db, 10, 20, remark_a="bestie")

        summary = friendship_service.search_user(UserSearchQuery(user_id=20), 10)

        assert summary.friend_status == RelationStatus.FRIEND
        assert summary.remark == "bestie"

    @pytest.mark.asyncio
    async def test_pending_in_both_directions(self, friendship_service, apply_service, users):
        await apply_service.send_apply(10, 20)

        sent = friendship_service.search_user(UserSearchQuery(user_id=20), 10)
        received = friendship_service.search_user(UserSearchQuery(user_id=10), 20)

        assert sent.friend_status == RelationStatus.PENDING_SENT
        assert received.friend_status == RelationStatus.PENDING_RECEIVED


class TestScenarios:

    @pytest.mark.asyncio
    async def test_apply_accept_and_remove(self, apply_service, friendship_service, counter, users):
        apply = await apply_service.send_apply(10, 20, "classmate")
        assert await counter.get(20) == 1

        page = await apply_service.list_applies(20, 1, 10)
        assert await counter.get(20) == 0
        assert [(r.applicant_id, r.target_id, r.status.value) for r in page.rows] == [(10, 20, "pending")]

        assert await apply_service.resolve_apply(20, apply.id, "") is True
        assert 20 in friend_ids(await friendship_service.list_friends(10))
        assert 10 in friend_ids(await friendship_service.list_friends(20))

        assert await friendship_service.remove_friend(10, 20) is True
        assert 20 not in friend_ids(await friendship_service.list_friends(10))
        assert 10 not in friend_ids(await friendship_service.list_friends(20))

    @pytest.mark.asyncio
    async def test_refriending_after_removal(self, apply_service, friendship_service, users):
        first = await apply_service.send_apply(10, 20)
        await apply_service.resolve_apply(20, first.id)
        await friendship_service.remove_friend(20, 10)

        again = await apply_service.send_apply(20, 10)
        await apply_service.resolve_apply(10, again.id, "back again")

        items = await friendship_service.list_friends(10)
        assert [(i.friend_id, i.remark) for i in items] == [(20, "back again")]
