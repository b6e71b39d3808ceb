from .composite import CompositeImage, OverlaySource, apply_brightness, composite_photo, draw_overlay
from .drag import DragSession, PointerEvent, PointerHub
from .editor import CompositeOutcome, EditorState, EditorStateError, OutcomeStatus, OverlayEditor
from .layout import OverlayLayout, PreviewViewport

__all__ = [
    "CompositeImage",
    "OverlaySource",
    "apply_brightness",
    "composite_photo",
    "draw_overlay",
    "DragSession",
    "PointerEvent",
    "PointerHub",
    "CompositeOutcome",
    "EditorState",
    "EditorStateError",
    "OutcomeStatus",
    "OverlayEditor",
    "OverlayLayout",
    "PreviewViewport",
]
