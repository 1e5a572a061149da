"""
Storage facade service.

Exposes an ObjectStore over HTTP with the endpoints the sync client uses:
GET /api/list, POST /api/sync, GET|PUT|DELETE /files/{path},
DELETE /api/delete-all and GET /health.
"""

from __future__ import annotations

from typing import Any

from aiohttp import web

from vaultsync.service.api import setup_storage_routes
from vaultsync.service.api.middleware import error_middleware
from vaultsync.storage.base import DEFAULT_LIST_LIMIT, ObjectStore
from vaultsync.utils.logging import get_logger

logger = get_logger("vaultsync.service")

# Batch uploads carry base64 payloads for up to 50 files of 10 MiB
DEFAULT_MAX_BODY_SIZE = 1024 * 1024 * 1024


class StorageService:
    def __init__(
        self,
        store: ObjectStore,
        *,
        delete_concurrency: int = 8,
        list_limit: int = DEFAULT_LIST_LIMIT,
    ):
        self.store = store
        self.delete_concurrency = delete_concurrency
        self.list_limit = list_limit

    def status_info(self) -> dict[str, Any]:
        return {"store": repr(self.store)}


def create_storage_app(
    store: ObjectStore,
    *,
    delete_concurrency: int = 8,
    list_limit: int = DEFAULT_LIST_LIMIT,
    client_max_size: int = DEFAULT_MAX_BODY_SIZE,
) -> web.Application:
    """
    Build the aiohttp application serving ``store``.

    Args:
        store: Object store backend
        delete_concurrency: Worker pool size for DELETE /api/delete-all
        list_limit: Default page size for GET /api/list
        client_max_size: Maximum request body size in bytes
    """
    svc = StorageService(store, delete_concurrency=delete_concurrency, list_limit=list_limit)
    app = web.Application(middlewares=[error_middleware], client_max_size=client_max_size)
    app["service"] = svc
    setup_storage_routes(app, svc)
    return app


def run_storage_service(store: ObjectStore, *, host: str, port: int, delete_concurrency: int = 8) -> None:
    """Run the storage facade (blocking)."""
    app = create_storage_app(store, delete_concurrency=delete_concurrency)
    logger.info(f"Serving {store!r} on http://{host}:{port}")
    web.run_app(app, host=host, port=port, print=None)
