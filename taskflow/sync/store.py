"""
Board state container owned by one board view
"""
import logging
from typing import Callable, List, Optional

from taskflow.sync.reducer import apply
from taskflow.sync.state import BoardState

logger = logging.getLogger(__name__)

Listener = Callable[[BoardState], None]


class BoardStateStore:
    """Holds the current BoardState and applies actions to it.

    One instance per open board view. After ``close()`` dispatches are
    ignored, so late confirmations or fetches cannot touch a closed view.
    """

    def __init__(self, initial: Optional[BoardState] = None):
        self._state = initial if initial is not None else BoardState()
        self._listeners: List[Listener] = []
        self.closed = False

    @property
    def state(self) -> BoardState:
        return self._state

    def dispatch(self, action) -> BoardState:
        if self.closed:
            logger.debug(f"Dropping {type(action).__name__} dispatched to a closed store")
            return self._state

        next_state = apply(self._state, action)
        if next_state is self._state:
            return next_state

        self._state = next_state
        for listener in list(self._listeners):
            try:
                listener(next_state)
            except Exception:
                logger.exception("Board state listener failed")
        return next_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with each new state; returns an unsubscribe callable"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        self.closed = True
        self._listeners.clear()
