"""
Change reconciliation

Change events are treated as "something changed" signals only. Bursts are
debounced into one authoritative fetch whose snapshot replaces local state.
"""
import asyncio
import logging
from typing import Optional, Set
from uuid import UUID

from taskflow.config import settings
from taskflow.sync.actions import SyncState
from taskflow.sync.results import BoardStoreClient
from taskflow.sync.store import BoardStateStore

logger = logging.getLogger(__name__)


class ChangeReconciler:
    """Keeps one board view's store in step with the server"""

    def __init__(
        self,
        board_id: UUID,
        notifier,
        client: BoardStoreClient,
        store: BoardStateStore,
        debounce_seconds: Optional[float] = None,
    ):
        self.board_id = board_id
        self.notifier = notifier
        self.client = client
        self.store = store
        self.debounce_seconds = (
            settings.reconcile_debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self.subscription = None
        self.timer: Optional[asyncio.TimerHandle] = None
        self.fetches: Set[asyncio.Task] = set()
        self.closed = False
        self._issued = 0
        self._applied = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def start(self) -> None:
        """Subscribe to the board's change events (call from the running loop)"""
        self._loop = asyncio.get_running_loop()
        self.subscription = self.notifier.subscribe(self.board_id, self.on_change)
        logger.debug(f"Reconciler started for board {self.board_id}")

    def on_change(self, event=None) -> None:
        """Restart the debounce window"""
        if self.closed:
            return
        if self.timer is not None:
            self.timer.cancel()
        self.timer = self._loop.call_later(self.debounce_seconds, self._fire)

    def _fire(self) -> None:
        self.timer = None
        if self.closed:
            return
        task = self._loop.create_task(self.reconcile())
        self.fetches.add(task)
        task.add_done_callback(self.fetches.discard)

    async def reconcile(self) -> bool:
        """Fetch the board and replace local state; failures are logged, not raised.

        Fetches may overlap. A snapshot is dropped when one from a later fetch
        has already been applied.
        """
        self._issued += 1
        ticket = self._issued
        try:
            result = await self.client.fetch_board_aggregate(self.board_id)
        except Exception as e:
            logger.warning(f"Reconciliation fetch failed for board {self.board_id}: {e}")
            return False

        if self.closed:
            return False
        if not result.ok:
            logger.debug(f"Reconciliation skipped for board {self.board_id}: {result.error.message}")
            return False
        if ticket < self._applied:
            logger.debug(f"Dropping stale snapshot {ticket} for board {self.board_id}, {self._applied} already applied")
            return False

        self._applied = ticket
        self.store.dispatch(SyncState(state=result.data))
        return True

    def close(self) -> None:
        """Cancel the pending timer and in-flight fetches, and unsubscribe"""
        self.closed = True
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None
        for task in list(self.fetches):
            task.cancel()
        if self.subscription is not None:
            self.subscription.unsubscribe()
            self.subscription = None

    async def aclose(self) -> None:
        """``close()`` and wait for cancelled fetches to finish unwinding"""
        pending = list(self.fetches)
        self.close()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
