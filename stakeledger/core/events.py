"""
Ledger event bus.

StakingToken publishes one event per submitted operation, after the
outcome is final:
- 'transfer', 'stake_created', 'stake_removed', 'rewards_distributed',
  'reward_withdrawn': the operation committed, payload `receipt`
- 'operation_failed': the operation was rejected, payload `receipt`, `error`
"""
from collections import defaultdict
from typing import Callable, DefaultDict, List
import logging
import threading

logger = logging.getLogger(__name__)

Listener = Callable[..., None]


class EventBus:
    """
    Delivers ledger events to listeners in the emitting thread.

    `emit` runs while the ledger lock is held, so listeners see operations
    in sequence order. A listener that raises is logged and skipped; the
    operation it was notified about stays committed.
    """

    def __init__(self):
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)
        self._guard = threading.Lock()

    def subscribe(self, event_type: str, callback: Listener) -> Callable[[], None]:
        """Registers `callback` and returns a function that removes it again."""
        with self._guard:
            self._listeners[event_type].append(callback)
        logger.debug(f"Listener added for {event_type}")

        def cancel():
            with self._guard:
                if callback in self._listeners[event_type]:
                    self._listeners[event_type].remove(callback)

        return cancel

    def emit(self, event_type: str, **payload) -> int:
        """Calls every listener of `event_type`; returns how many succeeded."""
        with self._guard:
            listeners = list(self._listeners.get(event_type, ()))

        delivered = 0
        for callback in listeners:
            try:
                callback(**payload)
                delivered += 1
            except Exception as e:
                logger.error(f"Listener for {event_type} failed: {e}", exc_info=True)
        return delivered


# Process-wide bus used when a ledger is created without one
event_bus = EventBus()
