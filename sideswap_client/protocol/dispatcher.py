"""Fan-out of unsolicited server notifications to registered observers."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Callable

logger = logging.getLogger(__name__)

NotificationHandler = Callable[[Any], None]


class NotificationDispatcher:
    def __init__(self) -> None:
        self._handlers: dict[str, list[NotificationHandler]] = {}

    def on(self, kind: str, handler: NotificationHandler) -> Callable[[], None]:
        """Subscribe `handler` to `kind`; returns a callable that unsubscribes it."""
        self._handlers.setdefault(kind, []).append(handler)

        def _unsubscribe() -> None:
            self.off(kind, handler)

        return _unsubscribe

    def off(self, kind: str, handler: NotificationHandler) -> None:
        handlers = self._handlers.get(kind)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            self._handlers.pop(kind, None)

    def subscriber_count(self, kind: str) -> int:
        return len(self._handlers.get(kind, ()))

    def dispatch(self, kind: str, data: Any) -> int:
        # Snapshot so handlers may (un)subscribe while being called.
        handlers = list(self._handlers.get(kind, ()))
        if not handlers:
            logger.debug("no subscribers for notification %s", kind)
            return 0
        delivered = 0
        for handler in handlers:
            try:
                handler(data)
            except Exception:
                logger.exception("notification handler for %s failed", kind)
                continue
            delivered += 1
        return delivered


__all__ = ["NotificationDispatcher", "NotificationHandler"]
