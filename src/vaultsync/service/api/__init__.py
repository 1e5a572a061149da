"""
HTTP API for the storage facade and the webhook trigger.
"""

from vaultsync.service.api.routes import setup_storage_routes, setup_webhook_routes

__all__ = ["setup_storage_routes", "setup_webhook_routes"]
