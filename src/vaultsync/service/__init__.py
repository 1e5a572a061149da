"""
Long-running HTTP services: the storage facade and the webhook trigger.
"""

from vaultsync.service.server import create_storage_app, run_storage_service
from vaultsync.service.webhook import create_webhook_app, run_webhook_service

__all__ = ["create_storage_app", "create_webhook_app", "run_storage_service", "run_webhook_service"]
