"""
Board view lifecycle: seed, reconcile, act, close
"""
import logging
from typing import Optional
from uuid import UUID

from taskflow.sync.controller import BoardController
from taskflow.sync.executor import ErrorNotice
from taskflow.sync.reconciler import ChangeReconciler
from taskflow.sync.results import BoardStoreClient, StoreError
from taskflow.sync.store import BoardStateStore

logger = logging.getLogger(__name__)


class BoardViewError(Exception):
    """The initial board fetch failed, so there is nothing to show"""

    def __init__(self, error: StoreError):
        self.error = error
        super().__init__(error.message)


class BoardView:
    """Owns the store, reconciler and controller of one open board"""

    def __init__(self, board_id: UUID, store: BoardStateStore, controller: BoardController,
                 reconciler: ChangeReconciler):
        self.board_id = board_id
        self.store = store
        self.controller = controller
        self.reconciler = reconciler

    @classmethod
    async def open(
        cls,
        board_id: UUID,
        user_id: UUID,
        client: BoardStoreClient,
        notifier,
        on_error: Optional[ErrorNotice] = None,
        debounce_seconds: Optional[float] = None,
    ) -> "BoardView":
        """Seed the store from an authoritative fetch and start reconciling"""
        result = await client.fetch_board_aggregate(board_id)
        if not result.ok:
            raise BoardViewError(result.error)

        store = BoardStateStore(result.data)
        controller = BoardController(board_id, user_id, store, client, on_error)
        reconciler = ChangeReconciler(board_id, notifier, client, store, debounce_seconds)
        reconciler.start()
        logger.debug(f"Board view opened for {board_id}")
        return cls(board_id, store, controller, reconciler)

    @property
    def state(self):
        return self.store.state

    async def close(self) -> None:
        await self.reconciler.aclose()
        self.store.close()
