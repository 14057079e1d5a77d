from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Set

_logger = logging.getLogger(__name__)

Listener = Callable[[Dict[str, Any]], None]


class SessionEvents:
    """Fan-out of session change notifications to in-process listeners."""

    def __init__(self) -> None:
        self._listeners: Set[Listener] = set()

    def subscribe(self, cb: Listener) -> None:
        self._listeners.add(cb)

    def unsubscribe(self, cb: Listener) -> None:
        self._listeners.discard(cb)

    def publish(self, data: Dict[str, Any]) -> None:
        for cb in list(self._listeners):
            try:
                cb(data)
            except Exception:
                # A broken listener must not stop the others or the writer.
                _logger.exception("session listener failed for %s", data.get("type"))
