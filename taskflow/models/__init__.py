# Database models
from taskflow.core.enums import Role, Priority, ActivityAction
from .profile import Profile
from .board import Board, BoardMember
from .column import Column
from .task import Task
from .activity_log import ActivityLog

__all__ = [
    "Profile",
    "Board", "BoardMember", "Role",
    "Column",
    "Task", "Priority",
    "ActivityLog", "ActivityAction",
]
