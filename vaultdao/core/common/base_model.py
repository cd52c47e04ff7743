"""
Base model with common fields
"""

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.sql import func
import uuid
from vaultdao.infrastructure.database import Base


class BaseModel(Base):
    """
    Base model with common fields

    All models inherit from this base class and get:
    - id: UUID primary key
    - created_at: Timezone-aware timestamp
    - updated_at: Timezone-aware timestamp (nullable)

    Note: VoteOption and Vote declare their own columns (no updated_at).
    """
    __abstract__ = True

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)


def enum_values(enum_cls):
    """Persist enum members by value ('pending'), not by name ('PENDING')"""
    return [member.value for member in enum_cls]
