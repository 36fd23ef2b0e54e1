from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from threading import RLock
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class HookPoint(str, Enum):
    BEFORE_SAVE = "before_save"
    AFTER_SAVE = "after_save"
    BEFORE_LOAD = "before_load"
    AFTER_LOAD = "after_load"


@dataclass(frozen=True)
class LifecycleEvent:
    """Payload passed to lifecycle handlers.

    Attributes:
        point: which transition fired.
        slot_id: sanitized slot id, or None for file-level operations.
        path: target file if already resolved.
        success: outcome for after-* points; always True for before-* points.
    """

    point: HookPoint
    slot_id: Optional[str] = None
    path: Optional[Path] = None
    success: bool = True


Handler = Callable[[LifecycleEvent], None]


class LifecycleHooks:
    """Observer registry for the four save/load notification points.

    Handlers run synchronously on the calling flow, in registration order.
    Exceptions raised by a handler are not caught here: they stop the rest of
    that dispatch and propagate to whoever triggered the save or load.
    Handlers that must not disturb the caller should guard themselves.
    """

    def __init__(self) -> None:
        self._handlers: Dict[HookPoint, List[Handler]] = {point: [] for point in HookPoint}
        self._lock = RLock()

    def subscribe(self, point: HookPoint, handler: Handler) -> Handler:
        """Register ``handler`` for ``point``.

        Each registration is a separate entry: a handler subscribed twice runs
        twice per dispatch, and each ``unsubscribe`` removes one entry.
        """
        point = HookPoint(point)
        with self._lock:
            self._handlers[point].append(handler)
        logger.debug("Subscribed handler %s to '%s'", handler, point.value)
        return handler

    def unsubscribe(self, point: HookPoint, handler: Handler) -> None:
        point = HookPoint(point)
        with self._lock:
            handlers = self._handlers[point]
            if handler in handlers:
                handlers.remove(handler)
                logger.debug("Unsubscribed handler %s from '%s'", handler, point.value)

    def clear(self) -> None:
        """Remove all handlers (useful in tests)."""
        with self._lock:
            for handlers in self._handlers.values():
                handlers.clear()

    def handlers(self, point: HookPoint) -> List[Handler]:
        with self._lock:
            return list(self._handlers[HookPoint(point)])

    def fire(self, event: LifecycleEvent) -> None:
        handlers = self.handlers(event.point)
        if not handlers:
            return
        logger.debug("Firing '%s' to %d handlers (slot=%s)", event.point.value, len(handlers), event.slot_id)
        for handler in handlers:
            handler(event)

    # Decorator-friendly shortcuts

    def on_before_save(self, handler: Handler) -> Handler:
        return self.subscribe(HookPoint.BEFORE_SAVE, handler)

    def on_after_save(self, handler: Handler) -> Handler:
        return self.subscribe(HookPoint.AFTER_SAVE, handler)

    def on_before_load(self, handler: Handler) -> Handler:
        return self.subscribe(HookPoint.BEFORE_LOAD, handler)

    def on_after_load(self, handler: Handler) -> Handler:
        return self.subscribe(HookPoint.AFTER_LOAD, handler)
