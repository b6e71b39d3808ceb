"""Authoring state for a new feed post.

A draft holds up to ten photos, the scorecard being typed in, and the post
metadata. The first photo can be flattened with the scorecard overlay; the
flattened copy replaces it in the outgoing set until the photo selection
changes. ``submit`` publishes everything and locks the draft.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from scorecard_engine.compositor import (
    CompositeOutcome,
    OutcomeStatus,
    OverlayEditor,
    PointerHub,
    PreviewViewport,
)
from scorecard_engine.grid import ScoreGrid, is_valid_score_input
from scorecard_engine.render import RenderOptions, ScorecardGraphic, TextColor, maybe_render
from scorecard_engine.types import Size

from feed_server.baas import AuthService, EntityStore, FileUploader

logger = logging.getLogger(__name__)

MAX_IMAGES = 10


class DraftError(ValueError):
    pass


class DraftLockedError(RuntimeError):
    pass


@dataclass(frozen=True)
class DraftImage:
    filename: str
    data: bytes
    content_type: str = "image/jpeg"


@dataclass(frozen=True)
class TaggedUser:
    email: str
    full_name: Optional[str] = None


@dataclass(frozen=True)
class SubmittedPost:
    post: Dict[str, Any]
    image_urls: Tuple[str, ...]
    notified: Tuple[str, ...] = ()


@dataclass
class PostDetails:
    caption: str = ""
    description: str = ""
    course_name: str = ""
    course_location: str = ""
    hole_number: Optional[int] = None
    score: str = ""
    tagged_users: List[TaggedUser] = field(default_factory=list)


def _image_size(data: bytes) -> Optional[Size]:
    try:
        with Image.open(BytesIO(data)) as img:
            return Size(*img.size)
    except (UnidentifiedImageError, OSError):
        return None


class PostDraft:
    def __init__(
        self,
        *,
        entities: EntityStore,
        auth: AuthService,
        uploader: FileUploader,
    ) -> None:
        self._entities = entities
        self._auth = auth
        self._uploader = uploader
        self._originals: List[DraftImage] = []
        self._outgoing: List[DraftImage] = []
        self._grid = ScoreGrid.empty()
        self._text_color = TextColor.BLACK
        self.details = PostDetails()
        self._locked = False

    # -- photos ---------------------------------------------------------
    @property
    def images(self) -> Tuple[DraftImage, ...]:
        """What ``submit`` will upload, composite included."""

        return tuple(self._outgoing)

    @property
    def originals(self) -> Tuple[DraftImage, ...]:
        return tuple(self._originals)

    @property
    def has_composite(self) -> bool:
        return bool(self._outgoing) and self._outgoing[0] is not self._originals[0]

    def add_images(self, files: Iterable[DraftImage]) -> int:
        """Append photos up to the cap; returns how many were kept."""

        self._require_open()
        incoming = list(files)
        room = MAX_IMAGES - len(self._originals)
        kept = incoming[: max(0, room)]
        if len(kept) < len(incoming):
            logger.info("draft holds at most %d images; dropped %d", MAX_IMAGES, len(incoming) - len(kept))
        self._set_images(self._originals + kept)
        return len(kept)

    def replace_images(self, files: Iterable[DraftImage]) -> None:
        self._require_open()
        self._set_images(list(files)[:MAX_IMAGES])

    def remove_image(self, index: int) -> None:
        self._require_open()
        images = list(self._originals)
        del images[index]
        self._set_images(images)

    def _set_images(self, images: List[DraftImage]) -> None:
        # any change to the selection drops a previously applied composite
        self._originals = list(images)
        self._outgoing = list(images)

    # -- scorecard ------------------------------------------------------
    @property
    def grid(self) -> ScoreGrid:
        return self._grid

    def set_score(self, hole_index: int, raw_input: str) -> bool:
        """Edit one cell; returns ``False`` when the input was rejected."""

        self._require_open()
        self._grid = self._grid.set_score(hole_index, raw_input)
        return is_valid_score_input(raw_input)

    @property
    def text_color(self) -> TextColor:
        return self._text_color

    def set_text_color(self, value: str) -> None:
        self._require_open()
        self._text_color = TextColor(value)

    def set_course_name(self, name: str) -> None:
        self._require_open()
        self.details.course_name = name

    def scorecard_graphic(self) -> Optional[ScorecardGraphic]:
        options = RenderOptions.build(self._text_color.value, self.details.course_name)
        return maybe_render(self._grid, options)

    # -- overlay --------------------------------------------------------
    def open_overlay_editor(
        self,
        viewport: PreviewViewport,
        *,
        hub: Optional[PointerHub] = None,
        alert=None,
        load_timeout: Optional[float] = None,
    ) -> OverlayEditor:
        self._require_open()
        if not self._outgoing:
            raise DraftError("add a photo before placing the scorecard")
        graphic = self.scorecard_graphic()
        if graphic is None:
            raise DraftError("enter at least one score to generate the scorecard")
        base = self._outgoing[0]
        return OverlayEditor(
            base.data,
            viewport=viewport,
            hub=hub,
            overlay=graphic,
            base_size=_image_size(base.data),
            alert=alert,
            load_timeout=load_timeout,
        )

    def apply_composite(self, outcome: CompositeOutcome) -> bool:
        """Swap the first photo for the flattened one when one was produced."""

        self._require_open()
        if outcome.status is not OutcomeStatus.APPLIED or outcome.image is None or not self._outgoing:
            return False
        composite = outcome.image
        self._outgoing[0] = DraftImage(composite.filename, composite.data, composite.media_type)
        return True

    # -- tagging --------------------------------------------------------
    def tag_user(self, user: TaggedUser) -> None:
        self._require_open()
        if all(t.email != user.email for t in self.details.tagged_users):
            self.details.tagged_users.append(user)

    def untag_user(self, email: str) -> None:
        self._require_open()
        self.details.tagged_users = [t for t in self.details.tagged_users if t.email != email]

    # -- publishing -----------------------------------------------------
    @property
    def locked(self) -> bool:
        return self._locked

    def post_payload(self, image_urls: List[str]) -> Dict[str, Any]:
        d = self.details
        return {
            "image_url": image_urls[0],
            "image_urls": list(image_urls),
            "caption": d.caption,
            "description": d.description,
            "course_name": d.course_name,
            "course_location": d.course_location,
            "hole_number": d.hole_number,
            "score": d.score or str(self._grid.total),
            "scorecard": self._grid.to_list(),
            "tagged_users": [t.email for t in d.tagged_users],
            "likes": 0,
            "liked_by": [],
            "comments_count": 0,
        }

    def submit(self) -> SubmittedPost:
        """Upload photos, create the post, notify tagged users, bump the count.

        Raises ``DraftError`` without photos and ``BackendError`` when the
        backend fails; the draft stays editable in both cases.
        """

        self._require_open()
        if not self._outgoing:
            raise DraftError("Please upload at least one image.")

        urls = [
            self._uploader.upload(image.filename, image.data, image.content_type)
            for image in self._outgoing
        ]
        post = self._entities.create("Post", self.post_payload(urls))

        me = self._auth.me()
        sender = me.get("email")
        notified: List[str] = []
        for user in self.details.tagged_users:
            if user.email == sender:
                continue
            self._entities.create(
                "Notification",
                {
                    "recipient_email": user.email,
                    "sender_email": sender,
                    "type": "tag",
                    "post_id": post.get("id"),
                    "is_read": False,
                },
            )
            notified.append(user.email)

        self._auth.update_me({"posts_count": int(me.get("posts_count") or 0) + 1})
        self._locked = True
        logger.info("published post %s with %d image(s)", post.get("id"), len(urls))
        return SubmittedPost(post=post, image_urls=tuple(urls), notified=tuple(notified))

    def _require_open(self) -> None:
        if self._locked:
            raise DraftLockedError("draft already submitted")


__all__ = [
    "MAX_IMAGES",
    "DraftError",
    "DraftLockedError",
    "DraftImage",
    "TaggedUser",
    "SubmittedPost",
    "PostDetails",
    "PostDraft",
]
