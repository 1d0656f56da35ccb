"""
Column model
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
import uuid

from taskflow.core.database import Base
from taskflow.core.db_types import UUID
from taskflow.models.profile import utcnow


class Column(Base):
    __tablename__ = "columns"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    board_id = Column(UUID(), ForeignKey('boards.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    position = Column(Integer, nullable=False)
    color = Column(String(7), nullable=True)  # Hex color code
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    board = relationship("Board", back_populates="columns")
    tasks = relationship("Task", back_populates="column", cascade="all, delete-orphan", order_by="Task.position")

    def __repr__(self):
        return f"<Column(id={self.id}, title={self.title}, position={self.position})>"
