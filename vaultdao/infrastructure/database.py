"""
Database configuration - SQLAlchemy 2.x (sync)
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from vaultdao.core.common.errors import ConstraintViolation
from vaultdao.infrastructure.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite test database)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
    }


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models - SQLAlchemy 2.x style"""
    pass


def get_db():
    """
    Dependency to get database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def constraint_name_from(exc: IntegrityError) -> str:
    """Best-effort extraction of the violated constraint name from a driver error"""
    diag = getattr(exc.orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name
    return str(exc.orig)


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run one logical operation as a single atomic unit.

    Commits on success. Any exception rolls the whole unit back; an
    IntegrityError raised at commit time surfaces as ConstraintViolation.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        constraint = constraint_name_from(e)
        logger.warning(
            "Constraint violation at commit",
            extra={"constraint": constraint},
        )
        raise ConstraintViolation(constraint=constraint) from e
    except Exception:
        db.rollback()
        raise
