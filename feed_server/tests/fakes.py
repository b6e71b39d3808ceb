from __future__ import annotations

import json
from io import BytesIO
from typing import Any, Dict, List, Optional, Tuple

import httpx
from PIL import Image


def png_bytes(color=(0, 0, 255, 255), size=(4, 2)) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def decode(data: bytes) -> Image.Image:
    with Image.open(BytesIO(data)) as img:
        img.load()
        return img.copy()


class FakeBackend:
    """In-memory stand-in for the feed backend, served through MockTransport."""

    def __init__(self, *, user: Optional[Dict[str, Any]] = None, fail_on: Optional[str] = None):
        self.user = user or {"id": "u1", "email": "me@example.com", "posts_count": 2}
        self.fail_on = fail_on
        self.requests: List[httpx.Request] = []
        self.created: List[Tuple[str, Dict[str, Any]]] = []
        self.uploaded: List[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if self.fail_on and self.fail_on in path:
            return httpx.Response(500, json={"error": "boom"})
        if path.endswith("/integration-endpoints/Core/UploadFile"):
            self.uploaded.append(path)
            return httpx.Response(
                200, json={"file_url": f"https://files.example.com/{len(self.uploaded)}.jpg"}
            )
        if path.endswith("/entities/User/me"):
            if request.method == "PUT":
                self.user.update(json.loads(request.content))
            return httpx.Response(200, json=self.user)
        if path.endswith("/auth/logout"):
            return httpx.Response(204)
        entity = path.split("/entities/", 1)[-1].split("/")[0]
        if request.method == "POST":
            body = json.loads(request.content)
            record = {"id": f"{entity.lower()}-{len(self.created) + 1}", **body}
            self.created.append((entity, record))
            return httpx.Response(201, json=record)
        if request.method == "GET":
            return httpx.Response(200, json=[r for e, r in self.created if e == entity])
        if request.method == "PUT":
            return httpx.Response(200, json={"id": path.rsplit("/", 1)[-1], **json.loads(request.content)})
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(405)

    def created_of(self, entity: str) -> List[Dict[str, Any]]:
        return [record for e, record in self.created if e == entity]
