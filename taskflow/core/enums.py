"""
Enumerations shared by the models, the API schemas and the sync client
"""
import enum


class Role(str, enum.Enum):
    OWNER = "OWNER"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"


# Roles allowed to change columns and tasks
EDIT_ROLES = (Role.OWNER, Role.EDITOR)


class Priority(str, enum.Enum):
    """Display urgency, lowest first"""
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class ActivityAction(str, enum.Enum):
    TASK_CREATED = "TASK_CREATED"
    TASK_UPDATED = "TASK_UPDATED"
    TASK_MOVED = "TASK_MOVED"
    TASK_DELETED = "TASK_DELETED"
    COLUMN_CREATED = "COLUMN_CREATED"
    COLUMN_UPDATED = "COLUMN_UPDATED"
    COLUMN_DELETED = "COLUMN_DELETED"
    COLUMN_REORDERED = "COLUMN_REORDERED"
    BOARD_CREATED = "BOARD_CREATED"
    BOARD_UPDATED = "BOARD_UPDATED"
    MEMBER_ADDED = "MEMBER_ADDED"
    MEMBER_REMOVED = "MEMBER_REMOVED"
