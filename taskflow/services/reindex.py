"""
Position reindexing for ordered containers (tasks in a column, columns in a board)

Positions are dense 0-based ranks. Every helper here only stages changes on
the session; the calling service commits once, so all position rewrites of a
logical operation land together or not at all. Sibling rows are selected
FOR UPDATE so two requests reordering the same container serialize on
databases that support row locks.
"""
from typing import Any, List, Optional, Sequence
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession


def splice(items: Sequence[Any], item: Any, index: int) -> List[Any]:
    """Return a copy of ``items`` with ``item`` inserted at ``index`` (clamped)."""
    result = list(items)
    index = max(0, min(index, len(result)))
    result.insert(index, item)
    return result


def renumber(items: Sequence[Any], **changes) -> None:
    """Assign positions 0..n-1 in list order, plus any extra attribute changes."""
    for index, item in enumerate(items):
        if item.position != index:
            item.position = index
        for attr, value in changes.items():
            if getattr(item, attr) != value:
                setattr(item, attr, value)


async def next_position(db: AsyncSession, model, parent_field: str, parent_id) -> int:
    """Position for a new entity appended to the container: max + 1, or 0 when empty."""
    result = await db.execute(
        select(func.max(model.position)).where(getattr(model, parent_field) == parent_id)
    )
    max_position = result.scalar_one_or_none()
    return 0 if max_position is None else max_position + 1


async def load_siblings(
    db: AsyncSession,
    model,
    parent_field: str,
    parent_id,
    exclude_id: Optional[Any] = None,
) -> List[Any]:
    """All entities of a container ordered by position, locked for the transaction."""
    stmt = (
        select(model)
        .where(getattr(model, parent_field) == parent_id)
        .order_by(model.position, model.created_at)
        .with_for_update()
    )
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def reorder_within(db: AsyncSession, model, parent_field: str, entity, index: int) -> List[Any]:
    """Move ``entity`` to ``index`` inside its own container and rewrite every sibling."""
    parent_id = getattr(entity, parent_field)
    siblings = await load_siblings(db, model, parent_field, parent_id, exclude_id=entity.id)
    ordered = splice(siblings, entity, index)
    renumber(ordered)
    return ordered


async def move_between(
    db: AsyncSession,
    model,
    parent_field: str,
    entity,
    target_parent_id,
    index: int,
) -> List[Any]:
    """Move ``entity`` into another container at ``index``.

    The source container is closed up as-is; the destination gets the entity
    spliced in and every member rewritten, including the moved entity's
    container reference.
    """
    source_parent_id = getattr(entity, parent_field)
    source = await load_siblings(db, model, parent_field, source_parent_id, exclude_id=entity.id)
    target = await load_siblings(db, model, parent_field, target_parent_id, exclude_id=entity.id)

    renumber(source)
    ordered = splice(target, entity, index)
    renumber(ordered, **{parent_field: target_parent_id})
    return ordered


async def close_gap(db: AsyncSession, model, parent_field: str, parent_id) -> List[Any]:
    """Rewrite remaining siblings 0..n-1 after a removal."""
    siblings = await load_siblings(db, model, parent_field, parent_id)
    renumber(siblings)
    return siblings


async def apply_order(db: AsyncSession, model, parent_field: str, parent_id, ordered_ids: Sequence[Any]) -> List[Any]:
    """Rewrite positions to follow ``ordered_ids``.

    The ids must be exactly the container's members; anything else would
    leave the container non-dense, so it is rejected with ValueError.
    """
    siblings = await load_siblings(db, model, parent_field, parent_id)
    by_id = {item.id: item for item in siblings}
    if len(ordered_ids) != len(by_id) or set(ordered_ids) != set(by_id):
        raise ValueError("Order must list every member of the container exactly once")
    ordered = [by_id[item_id] for item_id in ordered_ids]
    renumber(ordered)
    return ordered
