"""Interactive overlay editor: position a scorecard on a photo, then flatten.

State machine::

    NO_OVERLAY --load_overlay--> POSITIONING --remove_overlay--> NO_OVERLAY
    either --apply / skip_or_continue--> COMMITTING --> CLOSED
    COMMITTING --failure--> previous state (layout untouched)
    any --cancel / close--> CLOSED
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .. import telemetry
from ..errors import GENERIC_FAILURE_MESSAGE, PipelineError
from ..io.images import ImageSource
from ..types import Point, Size
from .composite import CompositeImage, OverlaySource, composite_photo
from .drag import DragSession, PointerHub
from .layout import OverlayLayout, PreviewViewport

logger = logging.getLogger(__name__)

AlertSink = Callable[[str], None]


class EditorState(str, Enum):
    NO_OVERLAY = "no_overlay"
    POSITIONING = "positioning"
    COMMITTING = "committing"
    CLOSED = "closed"


class OutcomeStatus(str, Enum):
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    FAILED = "failed"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class CompositeOutcome:
    status: OutcomeStatus
    image: Optional[CompositeImage] = None
    message: Optional[str] = None


class EditorStateError(RuntimeError):
    pass


def _log_alert(message: str) -> None:
    logger.warning("user alert: %s", message)


class OverlayEditor:
    def __init__(
        self,
        base_image: ImageSource,
        *,
        viewport: PreviewViewport,
        hub: Optional[PointerHub] = None,
        overlay: Optional[OverlaySource] = None,
        base_size: Optional[Size] = None,
        alert: Optional[AlertSink] = None,
        load_timeout: Optional[float] = None,
    ) -> None:
        self._base_image = base_image
        self._viewport = viewport
        self._hub = hub or PointerHub()
        self._alert = alert or _log_alert
        self._load_timeout = load_timeout
        self._layout = OverlayLayout.for_base(base_size.width) if base_size else OverlayLayout()
        self._overlay: Optional[OverlaySource] = overlay
        self._state = EditorState.POSITIONING if overlay is not None else EditorState.NO_OVERLAY
        self._drag: Optional[DragSession] = None
        self._grab_offset = Point(0.0, 0.0)

    # -- read-only view -------------------------------------------------
    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def layout(self) -> OverlayLayout:
        return self._layout

    @property
    def overlay(self) -> Optional[OverlaySource]:
        return self._overlay

    @property
    def hub(self) -> PointerHub:
        return self._hub

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None and self._drag.active

    def preview(self) -> Dict[str, Any]:
        rect = self._layout.rect if self._overlay is not None else None
        return {
            "state": self._state.value,
            "filter": f"brightness({self._layout.brightness}%)",
            "overlay": (
                {"x": rect.x, "y": rect.y, "width": rect.width, "height": rect.height}
                if rect
                else None
            ),
            "dragging": self.is_dragging,
        }

    # -- overlay selection ----------------------------------------------
    def load_overlay(self, source: OverlaySource) -> None:
        self._require_editable()
        self._overlay = source
        self._state = EditorState.POSITIONING

    def remove_overlay(self) -> None:
        self._require_editable()
        self._end_drag()
        self._overlay = None
        self._state = EditorState.NO_OVERLAY

    # -- dragging -------------------------------------------------------
    def pointer_down(self, client_x: float, client_y: float, *, touches: int = 1) -> bool:
        """Start a drag if the point hits the overlay; otherwise let it pass."""

        if self._state is not EditorState.POSITIONING or self._overlay is None:
            return False
        if touches != 1:
            return False
        point = self._viewport.to_local(client_x, client_y)
        if not self._layout.contains(point):
            return False
        self._end_drag()
        self._grab_offset = Point(point.x - self._layout.position.x, point.y - self._layout.position.y)
        self._drag = DragSession(self._hub, self._on_drag_move, self._end_drag).acquire()
        return True

    def _on_drag_move(self, client_x: float, client_y: float) -> None:
        if not self.is_dragging:
            return
        local = self._viewport.to_local(client_x, client_y)
        self._layout = self._layout.moved_to(
            local.x - self._grab_offset.x, local.y - self._grab_offset.y
        )

    def _end_drag(self) -> None:
        drag, self._drag = self._drag, None
        if drag is not None:
            drag.release()

    # -- sizing and brightness ------------------------------------------
    def grow(self) -> OverlayLayout:
        self._require_editable()
        self._layout = self._layout.grown()
        return self._layout

    def shrink(self) -> OverlayLayout:
        self._require_editable()
        self._layout = self._layout.shrunk()
        return self._layout

    def set_brightness(self, value: int) -> OverlayLayout:
        self._require_editable()
        self._layout = self._layout.with_brightness(value)
        return self._layout

    # -- committing -----------------------------------------------------
    async def skip_or_continue(self) -> CompositeOutcome:
        """Pass through untouched when there is nothing to bake in."""

        self._require_editable()
        if self._layout.is_neutral and self._overlay is None:
            self.close()
            telemetry.record_composite_skipped()
            return CompositeOutcome(OutcomeStatus.UNCHANGED)
        return await self.apply()

    async def apply(self) -> CompositeOutcome:
        self._require_editable()
        previous = self._state
        self._end_drag()
        self._state = EditorState.COMMITTING
        layout = self._layout
        overlay = self._overlay
        started = time.perf_counter()
        try:
            image = await composite_photo(
                self._base_image,
                brightness=layout.brightness,
                overlay=overlay,
                overlay_rect=layout.rect if overlay is not None else None,
                container=self._viewport.size,
                timeout=self._load_timeout,
            )
        except Exception as exc:
            logger.exception("error saving composite")
            telemetry.record_composite_failed(str(exc))
            message = exc.user_message if isinstance(exc, PipelineError) else GENERIC_FAILURE_MESSAGE
            if self._state is EditorState.CLOSED:
                return CompositeOutcome(OutcomeStatus.DISCARDED, message=message)
            self._state = previous
            self._alert(message)
            return CompositeOutcome(OutcomeStatus.FAILED, message=message)

        if self._state is EditorState.CLOSED:
            logger.debug("editor closed while compositing; result discarded")
            return CompositeOutcome(OutcomeStatus.DISCARDED)
        self._state = EditorState.CLOSED
        telemetry.record_composite_applied(
            width=image.width,
            height=image.height,
            brightness=layout.brightness,
            has_overlay=overlay is not None,
            duration_ms=(time.perf_counter() - started) * 1000.0,
        )
        return CompositeOutcome(OutcomeStatus.APPLIED, image=image)

    # -- teardown -------------------------------------------------------
    def cancel(self) -> None:
        self.close()

    def close(self) -> None:
        self._end_drag()
        self._state = EditorState.CLOSED

    def __enter__(self) -> "OverlayEditor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _require_editable(self) -> None:
        if self._state in (EditorState.CLOSED, EditorState.COMMITTING):
            raise EditorStateError(f"editor is {self._state.value}")


__all__ = [
    "EditorState",
    "OutcomeStatus",
    "CompositeOutcome",
    "EditorStateError",
    "OverlayEditor",
]
