"""Publish a post with photos and a scorecard to the feed backend."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from feed_server.api.deps import get_baas_clients, read_upload
from feed_server.baas import BaasClients, BackendError
from feed_server.posts import MAX_IMAGES, DraftError, DraftImage, PostDraft, TaggedUser
from feed_server.security import require_api_key
from scorecard_engine.grid import HOLES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["posts"], dependencies=[Depends(require_api_key)])


class PublishedPostOut(BaseModel):
    post: Dict[str, Any]
    image_urls: List[str] = Field(serialization_alias="imageUrls")
    notified: List[str] = Field(default_factory=list)


def _split(raw: Optional[str]) -> List[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


@router.post("/posts", status_code=status.HTTP_201_CREATED, response_model=PublishedPostOut)
async def create_post(
    images: List[UploadFile] = File(...),
    caption: str = Form(default=""),
    description: str = Form(default=""),
    course_name: str = Form(default="", alias="courseName"),
    course_location: str = Form(default="", alias="courseLocation"),
    hole_number: Optional[int] = Form(default=None, alias="holeNumber"),
    score: str = Form(default=""),
    scores: str = Form(default="", description="comma separated cell inputs, hole 1 first"),
    tagged: str = Form(default="", description="comma separated e-mails"),
    clients: BaasClients = Depends(get_baas_clients),
) -> PublishedPostOut:
    if len(images) > MAX_IMAGES:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"at most {MAX_IMAGES} images",
        )
    cells = scores.split(",") if scores else []
    if len(cells) > HOLES:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"at most {HOLES} scores")

    draft = PostDraft(entities=clients.entities, auth=clients.auth, uploader=clients.files)
    draft.add_images(
        [
            DraftImage(
                filename=upload.filename or f"image-{index}.jpg",
                data=await read_upload(upload, field="images"),
                content_type=upload.content_type or "application/octet-stream",
            )
            for index, upload in enumerate(images)
        ]
    )
    for index, cell in enumerate(cells):
        if not draft.set_score(index, cell.strip()):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"invalid score for hole {index + 1}",
            )
    details = draft.details
    details.caption = caption
    details.description = description
    details.course_name = course_name
    details.course_location = course_location
    details.hole_number = hole_number
    details.score = score
    for email in _split(tagged):
        draft.tag_user(TaggedUser(email=email))

    try:
        published = await run_in_threadpool(draft.submit)
    except DraftError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except BackendError as exc:
        logger.exception("error creating post")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to create post. Please try again.",
        ) from exc

    return PublishedPostOut(
        post=published.post,
        image_urls=list(published.image_urls),
        notified=list(published.notified),
    )


__all__ = ["router"]
