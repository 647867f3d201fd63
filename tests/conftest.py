import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from friendhub.api.chats.models import ChatListItem  # noqa: F401
from friendhub.api.friends.apply_service import FriendApplyService
from friendhub.api.friends.models import FriendApply, UsersFriend  # noqa: F401
from friendhub.api.friends.service import FriendshipService
from friendhub.api.users.models import User
from friendhub.cache.apply_num import UnreadApplyCounter
from friendhub.cache.friend_remark import FriendRemarkCache
from friendhub.cache.store import KeyValueStore
from friendhub.database.database import Base
from friendhub.websocket.presence import PresenceRegistry


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


def seed_users(session, *user_ids):
    for user_id in user_ids:
        session.add(User(
            id=user_id,
            mobile=f"138{user_id:08d}",
            nickname=f"user{user_id}",
            avatar=f"/avatars/{user_id}.png",
            motto="",
            gender=0,
            is_active=True,
        ))
    session.commit()


@pytest.fixture
def users(db):
    seed_users(db, 10, 20, 30)
    return 10, 20, 30


@pytest.fixture
def store():
    return KeyValueStore()


@pytest.fixture
def presence(store):
    return PresenceRegistry(store, timeout=0.2)


@pytest.fixture
def counter(store):
    return UnreadApplyCounter(store)


@pytest.fixture
def remark_cache(store):
    return FriendRemarkCache(store)


@pytest.fixture
def dispatcher():
    return Mock()


def build_services(session, presence, counter, remark_cache, dispatcher):
    friendships = FriendshipService(session, presence=presence, remark_cache=remark_cache)
    applies = FriendApplyService(
        session,
        friendships=friendships,
        counter=counter,
        remark_cache=remark_cache,
        presence=presence,
        dispatcher=dispatcher,
    )
    return friendships, applies


@pytest.fixture
def friendship_service(db, presence, counter, remark_cache, dispatcher):
    return build_services(db, presence, counter, remark_cache, dispatcher)[0]


@pytest.fixture
def apply_service(db, presence, counter, remark_cache, dispatcher):
    return build_services(db, presence, counter, remark_cache, dispatcher)[1]
