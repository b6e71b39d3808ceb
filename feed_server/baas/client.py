"""Thin clients for the backend-as-a-service that stores the social feed.

Three collaborators share one transport: ``EntityStore`` for records,
``AuthService`` for the signed-in user and ``FileUploader`` for media.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)

ENTITIES = frozenset({"Post", "Comment", "Follow", "Notification", "GolfCourse", "User"})


class BackendError(RuntimeError):
    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _http_client_factory(**kwargs: Any) -> httpx.Client:
    timeout = kwargs.pop("timeout", 10.0)
    return httpx.Client(timeout=timeout, **kwargs)


@dataclass(frozen=True)
class BaasConfig:
    base_url: str
    app_id: str
    api_key: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Any) -> "BaasConfig":
        return cls(
            base_url=settings.baas_base_url,
            app_id=settings.baas_app_id,
            api_key=settings.baas_api_key,
        )

    def url(self, *parts: str) -> str:
        return "/".join([self.base_url.rstrip("/"), "apps", self.app_id, *parts])

    def headers(self) -> Dict[str, str]:
        headers = {"X-App-Id": self.app_id}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


class _BaasResource:
    def __init__(self, config: BaasConfig):
        self._config = config

    def _request(self, method: str, *parts: str, **kwargs: Any) -> Any:
        url = self._config.url(*parts)
        try:
            with _http_client_factory() as client:
                response = client.request(method, url, headers=self._config.headers(), **kwargs)
        except httpx.RequestError as exc:
            raise BackendError(f"{method} {url} failed: {exc}") from exc
        if response.status_code >= 400:
            raise BackendError(
                f"{method} {url} failed: {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError(f"{method} {url} returned invalid JSON") from exc


def _query_params(sort: Optional[str], limit: Optional[int]) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    if sort:
        params["sort"] = sort
    if limit is not None:
        params["limit"] = int(limit)
    return params


class EntityStore(_BaasResource):
    """CRUD over the named feed entities (Post, Comment, Follow, ...)."""

    def _entity(self, entity: str) -> str:
        if entity not in ENTITIES:
            raise ValueError(f"unknown entity {entity!r}")
        return entity

    def list(
        self, entity: str, sort: Optional[str] = None, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        return self._request("GET", "entities", self._entity(entity), params=_query_params(sort, limit)) or []

    def filter(
        self,
        entity: str,
        query: Mapping[str, Any],
        sort: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params = _query_params(sort, limit)
        params["q"] = json.dumps(dict(query), sort_keys=True)
        return self._request("GET", "entities", self._entity(entity), params=params) or []

    def create(self, entity: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        record = self._request("POST", "entities", self._entity(entity), json=dict(data))
        logger.info("created %s %s", entity, (record or {}).get("id"))
        return record or {}

    def update(self, entity: str, record_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", "entities", self._entity(entity), record_id, json=dict(data)) or {}

    def delete(self, entity: str, record_id: str) -> None:
        self._request("DELETE", "entities", self._entity(entity), record_id)


class AuthService(_BaasResource):
    def me(self) -> Dict[str, Any]:
        user = self._request("GET", "entities", "User", "me")
        if not isinstance(user, dict):
            raise BackendError("no signed-in user")
        return user

    def update_me(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", "entities", "User", "me", json=dict(fields)) or {}

    def logout(self) -> None:
        self._request("POST", "auth", "logout")


class FileUploader(_BaasResource):
    def upload(self, filename: str, data: bytes, content_type: str) -> str:
        payload = self._request(
            "POST",
            "integration-endpoints",
            "Core",
            "UploadFile",
            files={"file": (filename, data, content_type)},
        )
        url = (payload or {}).get("file_url")
        if not url:
            raise BackendError(f"upload of {filename} returned no file_url")
        return str(url)


@dataclass(frozen=True)
class BaasClients:
    entities: EntityStore
    auth: AuthService
    files: FileUploader

    @classmethod
    def from_config(cls, config: BaasConfig) -> "BaasClients":
        return cls(EntityStore(config), AuthService(config), FileUploader(config))


__all__ = [
    "ENTITIES",
    "BackendError",
    "BaasConfig",
    "EntityStore",
    "AuthService",
    "FileUploader",
    "BaasClients",
]
