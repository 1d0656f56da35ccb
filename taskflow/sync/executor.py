"""
Optimistic action execution
"""
import logging
from typing import Awaitable, Callable, Optional

from taskflow.sync.actions import SyncState
from taskflow.sync.results import StoreResult, error_from_exception
from taskflow.sync.store import BoardStateStore

logger = logging.getLogger(__name__)

ErrorNotice = Callable[[str], None]


def log_notice(message: str) -> None:
    logger.warning(message)


class OptimisticExecutor:
    """Applies an action locally, confirms it with the board store, and
    applies the inverse when confirmation fails.

    With no inverse given, the snapshot taken just before the local action
    is restored through SyncState.
    """

    def __init__(self, store: BoardStateStore, on_error: Optional[ErrorNotice] = None):
        self.store = store
        self.on_error = on_error or log_notice

    async def execute(
        self,
        local_action,
        inverse_action,
        confirm: Callable[[], Awaitable[StoreResult]],
        error_message: str,
    ) -> bool:
        """Returns True when the board store confirmed the action"""
        snapshot = self.store.state
        self.store.dispatch(local_action)

        try:
            result = await confirm()
            error = result.error
        except Exception as e:
            error = error_from_exception(e)

        if error is None:
            return True

        logger.info(f"{error_message}: {error.kind.value} {error.message}")
        self.store.dispatch(inverse_action if inverse_action is not None else SyncState(state=snapshot))
        self.on_error(error_message)
        return False
