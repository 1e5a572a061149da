"""
API route registration.
"""

from typing import TYPE_CHECKING

from aiohttp import web

from vaultsync.service.api.handlers.files import FilesHandler
from vaultsync.service.api.handlers.health import HealthHandler
from vaultsync.service.api.handlers.webhook import WebhookHandler

if TYPE_CHECKING:
    from vaultsync.service.server import StorageService
    from vaultsync.service.webhook import WebhookService


def setup_storage_routes(app: web.Application, service: "StorageService") -> None:
    """
    Register the storage facade routes.

    Args:
        app: aiohttp Application
        service: StorageService instance for handler access
    """
    files = FilesHandler(service)
    health = HealthHandler(service)

    app.router.add_routes(
        [
            web.get("/health", health.health),
            # Inventory and batch upload
            web.get("/api/list", files.list),
            web.post("/api/sync", files.bulk_sync),
            web.delete("/api/delete-all", files.delete_all),
            # Per-file access; other methods get 405 from aiohttp
            web.get("/files/{key:.+}", files.get_file, allow_head=False),
            web.put("/files/{key:.+}", files.put_file),
            web.delete("/files/{key:.+}", files.delete_file),
        ]
    )


def setup_webhook_routes(app: web.Application, service: "WebhookService") -> None:
    """Register the webhook trigger and health routes."""
    webhook = WebhookHandler(service)
    health = HealthHandler(service)

    app.router.add_routes(
        [
            web.get("/health", health.health),
            web.post("/webhook/sync", webhook.trigger),
        ]
    )
