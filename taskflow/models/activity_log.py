"""
Activity log model
"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
import uuid

from taskflow.core.database import Base
from taskflow.core.db_types import UUID, JSON
from taskflow.models.profile import utcnow


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    board_id = Column(UUID(), ForeignKey('boards.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = Column(UUID(), ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)
    action = Column(String(50), nullable=False)
    entity_type = Column(String(20), nullable=False)
    entity_id = Column(UUID(), nullable=True)
    activity_metadata = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    profile = relationship("Profile")

    def __repr__(self):
        return f"<ActivityLog(id={self.id}, action={self.action}, entity_type={self.entity_type})>"
