"""
Board state transitions

``apply`` is pure and total: it never raises and never mutates its input.
Actions whose preconditions do not hold (ghost ids, stale or out of range
indices, missing columns) return the input state unchanged, because the next
reconciliation will bring the authoritative state anyway.
"""
import logging
from typing import List

from taskflow.schemas.task import dedupe_labels
from taskflow.sync.actions import (
    AddColumn, AddMember, AddTask, DeleteColumn, DeleteTask, MoveTask,
    RemoveMember, ReorderColumn, SyncState, UpdateBoard, UpdateColumn, UpdateTask,
)
from taskflow.sync.state import BoardState, Column, Task

logger = logging.getLogger(__name__)


def renumbered(tasks: List[Task], column_id=None) -> List[Task]:
    """Copies of ``tasks`` with positions 0..n-1 (and optionally a new column_id)"""
    result = []
    for index, task in enumerate(tasks):
        update = {}
        if task.position != index:
            update["position"] = index
        if column_id is not None and task.column_id != column_id:
            update["column_id"] = column_id
        result.append(task.model_copy(update=update) if update else task)
    return result


def clamp(index: int, upper: int) -> int:
    return max(0, min(index, upper))


def replace_columns(state: BoardState, replacements: dict) -> BoardState:
    columns = [replacements.get(column.id, column) for column in state.columns]
    return state.model_copy(update={"columns": columns})


def _sync_state(state: BoardState, action: SyncState) -> BoardState:
    return action.state


def _add_task(state: BoardState, action: AddTask) -> BoardState:
    column = state.get_column(action.task.column_id)
    if column is None or state.locate_task(action.task.id) is not None:
        return state
    tasks = list(column.tasks)
    tasks.insert(clamp(action.task.position, len(tasks)), action.task)
    return replace_columns(state, {column.id: column.model_copy(update={"tasks": renumbered(tasks)})})


def task_changes(patch) -> dict:
    """Patch fields as the server stores them"""
    changes = patch.changes()
    if "title" in changes:
        title = (changes["title"] or "").strip()
        if title:
            changes["title"] = title
        else:
            del changes["title"]
    if "priority" in changes and changes["priority"] is None:
        del changes["priority"]
    if "labels" in changes:
        changes["labels"] = dedupe_labels(changes["labels"]) or []
    return changes


def _update_task(state: BoardState, action: UpdateTask) -> BoardState:
    changes = task_changes(action.patch)
    if "assignee_id" in changes:
        member = state.get_member(changes["assignee_id"]) if changes["assignee_id"] else None
        changes["assignee"] = member.profile if member else None

    replacements = {}
    for column in state.columns:
        if any(task.id == action.patch.id for task in column.tasks):
            tasks = [
                task.model_copy(update=changes) if task.id == action.patch.id else task
                for task in column.tasks
            ]
            replacements[column.id] = column.model_copy(update={"tasks": tasks})
    if not replacements:
        return state
    return replace_columns(state, replacements)


def _delete_task(state: BoardState, action: DeleteTask) -> BoardState:
    column = state.get_column(action.column_id)
    if column is None:
        return state
    tasks = [task for task in column.tasks if task.id != action.task_id]
    if len(tasks) == len(column.tasks):
        return state
    return replace_columns(state, {column.id: column.model_copy(update={"tasks": renumbered(tasks)})})


def _move_task(state: BoardState, action: MoveTask) -> BoardState:
    source = state.get_column(action.from_column_id)
    if source is None:
        return state

    if action.from_column_id == action.to_column_id:
        if not 0 <= action.from_index < len(source.tasks):
            return state
        tasks = list(source.tasks)
        index = action.from_index
        if tasks[index].id != action.task_id:
            # stale index; fall back to locating by id
            index = next((i for i, task in enumerate(tasks) if task.id == action.task_id), None)
            if index is None:
                return state
        task = tasks.pop(index)
        tasks.insert(clamp(action.to_index, len(tasks)), task)
        return replace_columns(state, {source.id: source.model_copy(update={"tasks": renumbered(tasks)})})

    destination = state.get_column(action.to_column_id)
    if destination is None:
        return state
    task = next((task for task in source.tasks if task.id == action.task_id), None)
    if task is None:
        return state

    remaining = [t for t in source.tasks if t.id != action.task_id]
    incoming = list(destination.tasks)
    incoming.insert(clamp(action.to_index, len(incoming)), task)
    return replace_columns(state, {
        source.id: source.model_copy(update={"tasks": renumbered(remaining)}),
        destination.id: destination.model_copy(update={"tasks": renumbered(incoming, destination.id)}),
    })


def _add_column(state: BoardState, action: AddColumn) -> BoardState:
    if state.get_column(action.column.id) is not None:
        return state
    return state.model_copy(update={"columns": state.columns + [action.column]})


def _update_column(state: BoardState, action: UpdateColumn) -> BoardState:
    column = state.get_column(action.patch.id)
    if column is None:
        return state
    changes = action.patch.changes()
    if "title" in changes and changes["title"] is None:
        del changes["title"]
    return replace_columns(state, {column.id: column.model_copy(update=changes)})


def _delete_column(state: BoardState, action: DeleteColumn) -> BoardState:
    # positions of the remaining columns are left alone until the next sync
    columns = [column for column in state.columns if column.id != action.column_id]
    if len(columns) == len(state.columns):
        return state
    return state.model_copy(update={"columns": columns})


def _reorder_column(state: BoardState, action: ReorderColumn) -> BoardState:
    count = len(state.columns)
    if not (0 <= action.from_index < count and 0 <= action.to_index < count):
        return state
    columns: List[Column] = list(state.columns)
    column = columns.pop(action.from_index)
    columns.insert(action.to_index, column)
    columns = [
        c.model_copy(update={"position": index}) if c.position != index else c
        for index, c in enumerate(columns)
    ]
    return state.model_copy(update={"columns": columns})


def _update_board(state: BoardState, action: UpdateBoard) -> BoardState:
    # board fields are not part of the column/member state
    return state


def _add_member(state: BoardState, action: AddMember) -> BoardState:
    members = [m for m in state.members if m.user_id != action.member.user_id]
    members.append(action.member)
    return state.model_copy(update={"members": members})


def _remove_member(state: BoardState, action: RemoveMember) -> BoardState:
    members = [m for m in state.members if m.user_id != action.user_id]
    if len(members) == len(state.members):
        return state
    return state.model_copy(update={"members": members})


HANDLERS = {
    SyncState: _sync_state,
    AddTask: _add_task,
    UpdateTask: _update_task,
    DeleteTask: _delete_task,
    MoveTask: _move_task,
    AddColumn: _add_column,
    UpdateColumn: _update_column,
    DeleteColumn: _delete_column,
    ReorderColumn: _reorder_column,
    UpdateBoard: _update_board,
    AddMember: _add_member,
    RemoveMember: _remove_member,
}


def apply(state: BoardState, action) -> BoardState:
    """Next state after ``action``; unknown actions leave the state unchanged"""
    handler = HANDLERS.get(type(action))
    if handler is None:
        logger.debug(f"Ignoring unknown action {type(action).__name__}")
        return state
    return handler(state, action)
