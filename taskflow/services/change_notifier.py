"""
Board change notifications

Services publish a ChangeEvent after every committed write. Subscribers are
scoped to one board and receive "something changed" signals; the event body
is informational only, consumers must not rely on it for state.

With REDIS_URL configured, events are fanned out through redis pub/sub so
every worker process delivers them to its own local subscribers.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
from uuid import UUID

import redis.asyncio as aioredis
from pydantic import BaseModel, Field

from taskflow.core.enums import ActivityAction
from taskflow.core.exceptions import TransientFailureError

logger = logging.getLogger(__name__)


class ChangeEvent(BaseModel):
    board_id: UUID
    action: ActivityAction
    entity_type: str
    entity_id: Optional[UUID] = None
    actor_id: Optional[UUID] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription:
    """Handle returned by ``subscribe``; ``unsubscribe`` is idempotent."""

    def __init__(self, notifier: "ChangeNotifier", board_id: UUID, callback: ChangeCallback):
        self.notifier = notifier
        self.board_id = board_id
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self.notifier._remove(self)


class ChangeNotifier:
    """In-process hub of per-board change subscriptions."""

    def __init__(self):
        self.subscriptions: Dict[UUID, List[Subscription]] = {}
        self.relay: Optional["RedisChangeRelay"] = None

    def subscribe(self, board_id: UUID, callback: ChangeCallback) -> Subscription:
        """Register a callback for changes to one board"""
        subscription = Subscription(self, board_id, callback)
        self.subscriptions.setdefault(board_id, []).append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        subs = self.subscriptions.get(subscription.board_id, [])
        if subscription in subs:
            subs.remove(subscription)
        if not subs:
            self.subscriptions.pop(subscription.board_id, None)

    def subscriber_count(self, board_id: UUID) -> int:
        return len(self.subscriptions.get(board_id, []))

    async def publish(self, event: ChangeEvent) -> None:
        """Announce a committed change; goes through the relay when one is attached."""
        if self.relay is not None:
            try:
                await self.relay.publish(event)
                return
            except Exception as e:
                logger.warning(f"Redis relay publish failed, delivering locally: {e}")
        self.deliver(event)

    def deliver(self, event: ChangeEvent) -> int:
        """Invoke local subscribers of the event's board; returns how many were called."""
        delivered = 0
        for subscription in list(self.subscriptions.get(event.board_id, [])):
            if not subscription.active:
                continue
            try:
                subscription.callback(event)
                delivered += 1
            except Exception:
                logger.exception(f"Change subscriber failed for board {event.board_id}")
        return delivered


class RedisChangeRelay:
    """Redis pub/sub bridge so events reach subscribers in every worker process."""

    def __init__(self, notifier: ChangeNotifier, redis_url: str, channel_prefix: str = "taskflow:board"):
        self.notifier = notifier
        self.redis_url = redis_url
        self.channel_prefix = channel_prefix
        self.client = None
        self.pubsub = None
        self.listener: Optional[asyncio.Task] = None

    def channel(self, board_id: UUID) -> str:
        return f"{self.channel_prefix}:{board_id}"

    async def start(self) -> None:
        self.client = aioredis.from_url(self.redis_url, decode_responses=True)
        self.pubsub = self.client.pubsub()
        await self.pubsub.psubscribe(f"{self.channel_prefix}:*")
        self.listener = asyncio.create_task(self._listen())
        self.notifier.relay = self
        logger.info(f"Change relay subscribed to {self.channel_prefix}:*")

    async def publish(self, event: ChangeEvent) -> None:
        if self.client is None:
            raise TransientFailureError("Change relay is not connected")
        await self.client.publish(self.channel(event.board_id), event.model_dump_json())

    async def _listen(self) -> None:
        async for message in self.pubsub.listen():
            if message.get("type") != "pmessage":
                continue
            try:
                event = ChangeEvent.model_validate_json(message["data"])
            except ValueError:
                logger.warning(f"Dropping malformed change event on {message.get('channel')}")
                continue
            self.notifier.deliver(event)

    async def stop(self) -> None:
        if self.notifier.relay is self:
            self.notifier.relay = None
        if self.listener is not None:
            self.listener.cancel()
            try:
                await self.listener
            except asyncio.CancelledError:
                pass
        if self.pubsub is not None:
            await self.pubsub.close()
        if self.client is not None:
            await self.client.close()


# Global notifier instance
notifier = ChangeNotifier()
