"""
Results returned by board store clients

Clients never raise for expected failures; they hand back a StoreResult
carrying either the data or a StoreError.
"""
import asyncio
import enum
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Protocol, TypeVar
from uuid import UUID

import aiohttp
import pydantic
from sqlalchemy.exc import DBAPIError, OperationalError

from taskflow.core.exceptions import APIException
from taskflow.sync.actions import BoardPatch, ColumnPatch, TaskPatch
from taskflow.sync.state import BoardMember, BoardState, Column, Task

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"
    TRANSIENT = "TRANSIENT"


@dataclass
class StoreError:
    kind: ErrorKind
    message: str
    status_code: Optional[int] = None
    details: Optional[Dict[str, Any]] = None


@dataclass
class StoreResult(Generic[T]):
    data: Optional[T] = None
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T = None) -> "StoreResult[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, status_code: Optional[int] = None,
                details: Optional[Dict[str, Any]] = None) -> "StoreResult[T]":
        return cls(error=StoreError(kind, message, status_code, details))


def kind_for_status(status_code: int) -> ErrorKind:
    if status_code == 401:
        return ErrorKind.UNAUTHORIZED
    if status_code == 403:
        return ErrorKind.FORBIDDEN
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 409:
        return ErrorKind.CONFLICT
    if status_code in (400, 422):
        return ErrorKind.VALIDATION
    return ErrorKind.TRANSIENT


def error_from_exception(exc: BaseException) -> StoreError:
    """Classify an exception raised while talking to the board store"""
    if isinstance(exc, APIException):
        return StoreError(kind_for_status(exc.status_code), exc.message, exc.status_code, exc.details)
    if isinstance(exc, pydantic.ValidationError):
        return StoreError(ErrorKind.VALIDATION, "Validation failed", details={"errors": exc.errors()})
    if isinstance(exc, (aiohttp.ClientError, asyncio.TimeoutError, OperationalError, DBAPIError, OSError)):
        return StoreError(ErrorKind.TRANSIENT, str(exc) or type(exc).__name__)
    return StoreError(ErrorKind.TRANSIENT, f"Unexpected error: {type(exc).__name__}")


class BoardStoreClient(Protocol):
    """Persistence collaborator used by the board controller and reconciler.

    Every call is authorization-checked by the server; failures come back as
    error results instead of exceptions.
    """

    async def fetch_board_aggregate(self, board_id: UUID) -> StoreResult[BoardState]:
        ...

    async def create_task(self, column_id: UUID, board_id: UUID, title: str,
                          task_id: Optional[UUID] = None, position: Optional[int] = None) -> StoreResult[Task]:
        ...

    async def update_task(self, task_id: UUID, patch: TaskPatch) -> StoreResult[Task]:
        ...

    async def move_task(self, task_id: UUID, target_column_id: UUID, new_position: int) -> StoreResult[bool]:
        ...

    async def delete_task(self, task_id: UUID) -> StoreResult[bool]:
        ...

    async def create_column(self, board_id: UUID, title: str, column_id: Optional[UUID] = None,
                            color: Optional[str] = None) -> StoreResult[Column]:
        ...

    async def update_column(self, column_id: UUID, patch: ColumnPatch) -> StoreResult[Column]:
        ...

    async def delete_column(self, column_id: UUID) -> StoreResult[bool]:
        ...

    async def reorder_columns(self, board_id: UUID, column_ids: List[UUID]) -> StoreResult[bool]:
        ...

    async def update_board(self, board_id: UUID, patch: BoardPatch) -> StoreResult[dict]:
        ...

    async def add_member(self, board_id: UUID, email: str, role: str) -> StoreResult[BoardMember]:
        ...

    async def remove_member(self, board_id: UUID, user_id: UUID) -> StoreResult[bool]:
        ...
