"""Explicit signals between the host and the core.

The host publishes on these channels when something changes; the core
never polls for changes itself.
"""

import logging
from typing import Callable, List


logger = logging.getLogger(__name__)


class Signal:
    """Synchronous publish/subscribe channel."""

    def __init__(self, name: str):
        self.name = name
        self._handlers: List[Callable] = []

    def connect(self, handler: Callable) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def disconnect(self, handler: Callable) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, *args, **kwargs) -> int:
        """Call every handler in connection order; returns how many ran."""
        handlers = list(self._handlers)
        logger.debug("Signal %s -> %d handler(s)", self.name, len(handlers))
        for handler in handlers:
            handler(*args, **kwargs)
        return len(handlers)

    def __len__(self) -> int:
        return len(self._handlers)


class DataReadySignal(Signal):
    """Emitted by the host with the new configuration dict whenever it changes."""

    def __init__(self):
        super().__init__('data-ready')
