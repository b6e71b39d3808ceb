from .client import (
    ENTITIES,
    AuthService,
    BaasClients,
    BaasConfig,
    BackendError,
    EntityStore,
    FileUploader,
)

__all__ = [
    "ENTITIES",
    "AuthService",
    "BaasClients",
    "BaasConfig",
    "BackendError",
    "EntityStore",
    "FileUploader",
]
