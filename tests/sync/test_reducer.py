"""
Board state transition tests
"""
import random
import uuid
import pytest

from taskflow.core.enums import Priority, Role
from taskflow.sync import (
    AddColumn, AddMember, AddTask, BoardMember, BoardPatch, BoardState, Column, ColumnPatch,
    DeleteColumn, DeleteTask, MoveTask, RemoveMember, ReorderColumn, SyncState, TaskPatch,
    UpdateBoard, UpdateColumn, UpdateTask, apply, invert_column_reorder, invert_move,
)
from taskflow.sync.actions import invert_column_patch, invert_task_patch


def titles(state: BoardState, column_id):
    return [task.title for task in state.get_column(column_id).tasks]


def assert_dense(state: BoardState):
    for column in state.columns:
        assert [task.position for task in column.tasks] == list(range(len(column.tasks)))
        assert all(task.column_id == column.id for task in column.tasks)
    task_ids = [task.id for column in state.columns for task in column.tasks]
    assert len(task_ids) == len(set(task_ids))


def test_move_across_columns_updates_both_and_stays_dense(board):
    move = MoveTask(task_id=board['t1'].id, from_column_id=board['todo'], to_column_id=board['doing'],
                    from_index=0, to_index=0)

    state = apply(board['state'], move)

    assert titles(state, board['todo']) == ["T2"]
    assert titles(state, board['doing']) == ["T1", "T3"]
    assert state.get_task(board['t1'].id).column_id == board['doing']
    assert_dense(state)


def test_move_within_column(board):
    move = MoveTask(task_id=board['t2'].id, from_column_id=board['todo'], to_column_id=board['todo'],
                    from_index=1, to_index=0)

    state = apply(board['state'], move)

    assert titles(state, board['todo']) == ["T2", "T1"]
    assert_dense(state)


def test_move_to_empty_column_clamps_index(board):
    move = MoveTask(task_id=board['t3'].id, from_column_id=board['doing'], to_column_id=board['done'],
                    from_index=0, to_index=7)

    state = apply(board['state'], move)

    assert titles(state, board['doing']) == []
    assert titles(state, board['done']) == ["T3"]
    assert_dense(state)


@pytest.mark.parametrize("to_column, from_index, to_index", [
    ("doing", 0, 1),
    ("todo", 1, 0),
    ("done", 0, 0),
])
def test_move_followed_by_inverse_restores_state(board, to_column, from_index, to_index):
    task = board['t1'] if from_index == 0 else board['t2']
    move = MoveTask(task_id=task.id, from_column_id=board['todo'], to_column_id=board[to_column],
                    from_index=from_index, to_index=to_index)

    state = apply(apply(board['state'], move), invert_move(move))

    assert state == board['state']


def test_stale_same_column_index_falls_back_to_task_id(board):
    move = MoveTask(task_id=board['t1'].id, from_column_id=board['todo'], to_column_id=board['todo'],
                    from_index=1, to_index=1)

    state = apply(board['state'], move)

    assert titles(state, board['todo']) == ["T2", "T1"]


def test_moves_with_unknown_ids_or_bad_indices_are_no_ops(board):
    original = board['state']
    ghost = uuid.uuid4()

    assert apply(original, MoveTask(task_id=ghost, from_column_id=board['todo'], to_column_id=board['doing'],
                                    from_index=0, to_index=0)) is original
    assert apply(original, MoveTask(task_id=board['t1'].id, from_column_id=board['todo'], to_column_id=ghost,
                                    from_index=0, to_index=0)) is original
    assert apply(original, MoveTask(task_id=board['t1'].id, from_column_id=ghost, to_column_id=board['doing'],
                                    from_index=0, to_index=0)) is original
    assert apply(original, MoveTask(task_id=board['t1'].id, from_column_id=board['todo'],
                                    to_column_id=board['todo'], from_index=5, to_index=0)) is original


def test_apply_never_mutates_its_input(board):
    original = board['state']
    snapshot = original.model_copy(deep=True)

    apply(original, MoveTask(task_id=board['t1'].id, from_column_id=board['todo'], to_column_id=board['doing'],
                             from_index=0, to_index=0))
    apply(original, DeleteTask(task_id=board['t2'].id, column_id=board['todo']))

    assert original == snapshot


def test_add_task_inserts_at_position_and_renumbers(board, make_task):
    task = make_task(board['board_id'], board['todo'], "New", 1)

    state = apply(board['state'], AddTask(task=task))

    assert titles(state, board['todo']) == ["T1", "New", "T2"]
    assert_dense(state)


def test_add_task_clamps_position_and_ignores_duplicates(board, make_task):
    task = make_task(board['board_id'], board['todo'], "Tail", 40)

    state = apply(board['state'], AddTask(task=task))
    assert titles(state, board['todo']) == ["T1", "T2", "Tail"]

    assert apply(state, AddTask(task=task)) is state
    orphan = make_task(board['board_id'], uuid.uuid4(), "Orphan", 0)
    assert apply(state, AddTask(task=orphan)) is state


def test_delete_task_closes_gap(board):
    state = apply(board['state'], DeleteTask(task_id=board['t1'].id, column_id=board['todo']))

    assert titles(state, board['todo']) == ["T2"]
    assert_dense(state)
    assert apply(state, DeleteTask(task_id=board['t1'].id, column_id=board['todo'])) is state


def test_update_task_merges_only_sent_fields(board):
    patch = TaskPatch(id=board['t3'].id, priority=Priority.HIGH, labels=["ops"])

    state = apply(board['state'], UpdateTask(patch=patch))

    task = state.get_task(board['t3'].id)
    assert task.priority == Priority.HIGH
    assert task.labels == ["ops"]
    assert task.title == "T3"
    assert task.position == 0


def test_update_task_resolves_assignee_profile_from_members(board):
    member = board['member']
    patch = TaskPatch(id=board['t1'].id, assignee_id=member.user_id)

    state = apply(board['state'], UpdateTask(patch=patch))

    assert state.get_task(board['t1'].id).assignee.email == "member@example.com"


def test_task_patch_inverse_restores_previous_values(board):
    task = board['t1']
    patch = TaskPatch(id=task.id, title="Renamed", assignee_id=board['member'].user_id)

    inverse = invert_task_patch(task, patch)
    state = apply(apply(board['state'], UpdateTask(patch=patch)), inverse)

    assert state == board['state']


def test_update_task_with_unknown_id_is_a_no_op(board):
    original = board['state']
    assert apply(original, UpdateTask(patch=TaskPatch(id=uuid.uuid4(), title="Ghost"))) is original


def test_sync_state_replaces_wholesale_and_is_idempotent(board):
    replacement = BoardState(columns=[board['state'].columns[1]])

    once = apply(board['state'], SyncState(state=replacement))
    twice = apply(once, SyncState(state=replacement))

    assert once == replacement
    assert twice == replacement


def test_add_and_update_column(board):
    column = Column(id=uuid.uuid4(), board_id=board['board_id'], title="Review", position=3)

    state = apply(board['state'], AddColumn(column=column))
    assert [c.title for c in state.columns] == ["To Do", "Doing", "Done", "Review"]
    assert apply(state, AddColumn(column=column)) is state

    patch = ColumnPatch(id=column.id, title="QA", color="#10b981")
    renamed = apply(state, UpdateColumn(patch=patch))
    assert renamed.get_column(column.id).title == "QA"
    assert renamed.get_column(column.id).color == "#10b981"

    restored = apply(renamed, invert_column_patch(state.get_column(column.id), patch))
    assert restored == state


def test_delete_column_removes_its_tasks(board):
    state = apply(board['state'], DeleteColumn(column_id=board['todo']))

    assert [c.title for c in state.columns] == ["Doing", "Done"]
    assert state.get_task(board['t1'].id) is None
    assert apply(state, DeleteColumn(column_id=board['todo'])) is state


def test_reorder_column_and_inverse(board):
    reorder = ReorderColumn(column_id=board['done'], from_index=2, to_index=0)

    state = apply(board['state'], reorder)
    assert [c.title for c in state.columns] == ["Done", "To Do", "Doing"]
    assert [c.position for c in state.columns] == [0, 1, 2]

    assert apply(state, invert_column_reorder(reorder)) == board['state']


def test_reorder_column_with_out_of_range_index_is_a_no_op(board):
    original = board['state']
    assert apply(original, ReorderColumn(column_id=board['todo'], from_index=0, to_index=3)) is original
    assert apply(original, ReorderColumn(column_id=board['todo'], from_index=-1, to_index=0)) is original


def test_members_upsert_and_remove(board):
    member = board['member']
    promoted = member.model_copy(update={"role": Role.OWNER})

    state = apply(board['state'], AddMember(member=promoted))
    assert len(state.members) == 1
    assert state.get_member(member.user_id).role == Role.OWNER

    newcomer = BoardMember(id=uuid.uuid4(), board_id=board['board_id'], user_id=uuid.uuid4(), role=Role.VIEWER)
    state = apply(state, AddMember(member=newcomer))
    assert len(state.members) == 2

    state = apply(state, RemoveMember(user_id=newcomer.user_id))
    assert [m.user_id for m in state.members] == [member.user_id]
    assert apply(state, RemoveMember(user_id=newcomer.user_id)) is state


def test_board_updates_and_unknown_actions_leave_state_alone(board):
    original = board['state']
    assert apply(original, UpdateBoard(patch=BoardPatch(title="Renamed"))) is original
    assert apply(original, object()) is original


def test_update_task_stores_fields_the_way_the_server_does(board):
    patch = TaskPatch(id=board['t1'].id, title="  Tidy ", labels=["a", " a", "b", ""], priority=None)

    state = apply(board['state'], UpdateTask(patch=patch))

    task = state.get_task(board['t1'].id)
    assert task.title == "Tidy"
    assert task.labels == ["a", "b"]
    assert task.priority == board['t1'].priority

    cleared = apply(state, UpdateTask(patch=TaskPatch(id=board['t1'].id, labels=None, title="   ")))
    assert cleared.get_task(board['t1'].id).labels == []
    assert cleared.get_task(board['t1'].id).title == "Tidy"


def random_action(rng, state, board, make_task):
    """Any action, with ids and indices that may or may not be valid"""
    columns = state.columns
    column = rng.choice(columns) if columns else None
    tasks = [task for c in columns for task in c.tasks]
    task = rng.choice(tasks) if tasks else None
    column_id = column.id if column else uuid.uuid4()
    task_id = task.id if task else uuid.uuid4()
    index = rng.randint(-1, 4)

    kind = rng.randrange(9)
    if kind == 0:
        return AddTask(task=make_task(board['board_id'], column_id, "Added", rng.randint(0, 5)))
    if kind == 1:
        target = rng.choice(columns).id if columns else uuid.uuid4()
        from_column = task.column_id if task and rng.random() < 0.8 else column_id
        return MoveTask(task_id=task_id, from_column_id=from_column, to_column_id=target,
                        from_index=index, to_index=rng.randint(0, 4))
    if kind == 2:
        return DeleteTask(task_id=task_id, column_id=task.column_id if task else column_id)
    if kind == 3:
        return UpdateTask(patch=TaskPatch(id=task_id, labels=["x", "x"], priority=Priority.LOW))
    if kind == 4:
        return ReorderColumn(column_id=column_id, from_index=index, to_index=rng.randint(0, 3))
    if kind == 5:
        return SyncState(state=board['state'])
    if kind == 6:
        return AddColumn(column=Column(id=uuid.uuid4(), board_id=board['board_id'], title="Extra",
                                       position=len(columns)))
    if kind == 7:
        return DeleteColumn(column_id=column_id)
    return UpdateColumn(patch=ColumnPatch(id=column_id, title="Renamed"))


@pytest.mark.parametrize("seed", range(5))
def test_every_reachable_state_keeps_positions_dense(board, make_task, seed):
    rng = random.Random(seed)
    state = board['state']

    for _ in range(200):
        state = apply(state, random_action(rng, state, board, make_task))
        assert_dense(state)
