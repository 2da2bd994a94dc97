"""Connectivity signal: online/offline state plus transition notifications."""

from collections.abc import Awaitable, Callable
from enum import Enum

import structlog

logger = structlog.get_logger()


class Connectivity(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"

    @classmethod
    def from_flag(cls, online: bool) -> "Connectivity":
        return cls.ONLINE if online else cls.OFFLINE


TransitionHandler = Callable[[Connectivity], Awaitable[None]]


class ConnectivityMonitor:
    """Holds the current connectivity and notifies subscribers on change.

    Handlers run only on real transitions; reporting the state the monitor is
    already in is ignored. Handlers are awaited in subscription order;
    a handler that raises is logged and the remaining handlers still run.
    """

    def __init__(self, online: bool = True):
        self._state = Connectivity.from_flag(online)
        self._handlers: list[TransitionHandler] = []
        self._log = logger.bind(component="connectivity")

    @property
    def connectivity(self) -> Connectivity:
        return self._state

    @property
    def is_online(self) -> bool:
        return self._state == Connectivity.ONLINE

    def subscribe(self, handler: TransitionHandler) -> Callable[[], None]:
        """Register a transition handler; returns a function that unsubscribes it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    async def set_online(self, online: bool) -> bool:
        """Report the current state. Returns True if it was a transition."""
        new_state = Connectivity.from_flag(online)
        if new_state == self._state:
            return False
        self._state = new_state
        self._log.info("connectivity_changed", state=new_state.value)
        for handler in list(self._handlers):
            try:
                await handler(new_state)
            except Exception as e:
                self._log.error("connectivity_handler_failed", state=new_state.value, error=str(e))
        return True
