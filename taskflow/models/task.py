"""
Task model
"""
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
import uuid

from taskflow.core.database import Base
from taskflow.core.db_types import UUID, JSON
from taskflow.core.enums import Priority
from taskflow.models.profile import utcnow


class Task(Base):
    __tablename__ = "tasks"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    board_id = Column(UUID(), ForeignKey('boards.id', ondelete='CASCADE'), nullable=False, index=True)
    column_id = Column(UUID(), ForeignKey('columns.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    position = Column(Integer, nullable=False)
    priority = Column(String(20), default=Priority.NONE.value, nullable=False)
    labels = Column(JSON, nullable=False, default=list)  # List of label strings
    due_date = Column(DateTime(timezone=True), nullable=True)
    assignee_id = Column(UUID(), ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True)
    created_by = Column(UUID(), ForeignKey('profiles.id'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    column = relationship("Column", back_populates="tasks")
    assignee = relationship("Profile", foreign_keys=[assignee_id])
    creator = relationship("Profile", foreign_keys=[created_by])

    def __repr__(self):
        return f"<Task(id={self.id}, title={self.title}, position={self.position})>"
