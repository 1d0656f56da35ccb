"""
Profile model
"""
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime
import uuid

from taskflow.core.database import Base
from taskflow.core.db_types import UUID


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Profile(id={self.id}, email={self.email})>"
