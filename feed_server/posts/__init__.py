from .draft import (
    MAX_IMAGES,
    DraftError,
    DraftImage,
    DraftLockedError,
    PostDetails,
    PostDraft,
    SubmittedPost,
    TaggedUser,
)

__all__ = [
    "MAX_IMAGES",
    "DraftError",
    "DraftImage",
    "DraftLockedError",
    "PostDetails",
    "PostDraft",
    "SubmittedPost",
    "TaggedUser",
]
