"""
Board and board membership models
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid

from taskflow.core.database import Base
from taskflow.core.db_types import UUID
from taskflow.core.enums import Role
from taskflow.models.profile import utcnow


class Board(Base):
    __tablename__ = "boards"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(UUID(), ForeignKey('profiles.id'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    creator = relationship("Profile", foreign_keys=[created_by])
    columns = relationship("Column", back_populates="board", cascade="all, delete-orphan", order_by="Column.position")
    members = relationship("BoardMember", back_populates="board", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Board(id={self.id}, title={self.title})>"


class BoardMember(Base):
    __tablename__ = "board_members"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    board_id = Column(UUID(), ForeignKey('boards.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(UUID(), ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)
    role = Column(String(20), default=Role.VIEWER.value, nullable=False)
    joined_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('board_id', 'user_id', name='unique_board_member'),
    )

    # Relationships
    board = relationship("Board", back_populates="members")
    profile = relationship("Profile", foreign_keys=[user_id])

    def __repr__(self):
        return f"<BoardMember(board_id={self.board_id}, user_id={self.user_id}, role={self.role})>"
