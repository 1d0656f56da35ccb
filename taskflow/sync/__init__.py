# Client-side board synchronization
from .state import BoardState, Task, Column, BoardMember
from .actions import (
    Action, SyncState, AddTask, UpdateTask, DeleteTask, MoveTask,
    AddColumn, UpdateColumn, DeleteColumn, ReorderColumn, UpdateBoard,
    AddMember, RemoveMember, TaskPatch, ColumnPatch, BoardPatch,
    invert_move, invert_column_reorder,
)
from .reducer import apply
from .store import BoardStateStore
from .results import ErrorKind, StoreError, StoreResult, BoardStoreClient
from .executor import OptimisticExecutor
from .reconciler import ChangeReconciler
from .controller import BoardController
from .view import BoardView, BoardViewError

__all__ = [
    "BoardState", "Task", "Column", "BoardMember",
    "Action", "SyncState", "AddTask", "UpdateTask", "DeleteTask", "MoveTask",
    "AddColumn", "UpdateColumn", "DeleteColumn", "ReorderColumn", "UpdateBoard",
    "AddMember", "RemoveMember", "TaskPatch", "ColumnPatch", "BoardPatch",
    "invert_move", "invert_column_reorder",
    "apply",
    "BoardStateStore",
    "ErrorKind", "StoreError", "StoreResult", "BoardStoreClient",
    "OptimisticExecutor",
    "ChangeReconciler",
    "BoardController",
    "BoardView", "BoardViewError",
]
