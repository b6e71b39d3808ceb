"""Viewport-wide pointer listeners and scoped drag sessions.

A drag listens on the whole viewport so fast pointer movement that leaves the
overlay is not lost. Those listeners exist only while a ``DragSession`` is
active; they are released on drag end, on removal of the overlay, on editor
teardown, and on any exception path.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Callable, DefaultDict, List, Optional

logger = logging.getLogger(__name__)

MOUSE_MOVE = "mousemove"
MOUSE_UP = "mouseup"
TOUCH_MOVE = "touchmove"
TOUCH_END = "touchend"


@dataclass(frozen=True)
class PointerEvent:
    type: str
    x: float = 0.0
    y: float = 0.0
    touches: int = 1


PointerHandler = Callable[[PointerEvent], None]


class PointerHub:
    """Process-local stand-in for the window's pointer event stream."""

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, List[PointerHandler]] = defaultdict(list)

    def add_listener(self, event_type: str, handler: PointerHandler) -> Callable[[], None]:
        self._listeners[event_type].append(handler)

        def _remove() -> None:
            self.remove_listener(event_type, handler)

        return _remove

    def remove_listener(self, event_type: str, handler: PointerHandler) -> None:
        handlers = self._listeners.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def dispatch(self, event: PointerEvent) -> int:
        handlers = list(self._listeners.get(event.type, ()))
        for handler in handlers:
            handler(event)
        return len(handlers)

    def listener_count(self, event_type: Optional[str] = None) -> int:
        if event_type is not None:
            return len(self._listeners.get(event_type, ()))
        return sum(len(handlers) for handlers in self._listeners.values())


class DragSession:
    """Holds the global move/release listeners for one drag gesture."""

    def __init__(
        self,
        hub: PointerHub,
        on_move: Callable[[float, float], None],
        on_end: Callable[[], None],
    ) -> None:
        self._hub = hub
        self._on_move = on_move
        self._on_end = on_end
        self._stack: Optional[ExitStack] = None

    @property
    def active(self) -> bool:
        return self._stack is not None

    def acquire(self) -> "DragSession":
        if self._stack is not None:
            return self
        with ExitStack() as stack:
            for event_type, handler in (
                (MOUSE_MOVE, self._handle_mouse_move),
                (MOUSE_UP, self._handle_release),
                (TOUCH_MOVE, self._handle_touch_move),
                (TOUCH_END, self._handle_release),
            ):
                stack.callback(self._hub.add_listener(event_type, handler))
            self._stack = stack.pop_all()
        logger.debug("drag session acquired")
        return self

    def release(self) -> None:
        stack, self._stack = self._stack, None
        if stack is not None:
            stack.close()
            logger.debug("drag session released")

    def __enter__(self) -> "DragSession":
        return self.acquire()

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def _handle_mouse_move(self, event: PointerEvent) -> None:
        self._on_move(event.x, event.y)

    def _handle_touch_move(self, event: PointerEvent) -> None:
        if event.touches == 1:
            self._on_move(event.x, event.y)

    def _handle_release(self, event: PointerEvent) -> None:
        self._on_end()


__all__ = [
    "MOUSE_MOVE",
    "MOUSE_UP",
    "TOUCH_MOVE",
    "TOUCH_END",
    "PointerEvent",
    "PointerHub",
    "DragSession",
]
