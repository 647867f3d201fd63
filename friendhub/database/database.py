import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from friendhub.core.config import settings
from friendhub.core.exceptions import Conflict, FriendhubError, Unavailable

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL
if not DATABASE_URL:
    raise ValueError("❌ DATABASE_URL не найден в .env файле!")


def build_engine(url: str, **kwargs):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        pool_pre_ping=True,
        echo=settings.DEBUG,
        future=True,
        connect_args=connect_args,
        **kwargs
    )


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

Base = declarative_base()


def get_db():
    """
    Создаёт сессию БД для каждого запроса.
    После использования - закрывает её.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def write_transaction(db: Session):
    """
    Запись в хранилище истины: либо commit целиком, либо rollback.
    Ошибки SQLAlchemy переводятся в ошибки сервиса.
    """
    try:
        yield db
        db.commit()
    except FriendhubError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.warning(f"Integrity error, transaction rolled back: {exc}")
        raise Conflict() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Database write failed, transaction rolled back: {exc}")
        raise Unavailable() from exc
