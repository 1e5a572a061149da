"""
Webhook trigger service.

POST /webhook/sync starts a sync run in the background of this process.
Runs are serialized: a trigger that arrives while a run is in progress is
rejected with 409 rather than started concurrently.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from aiohttp import web

from vaultsync.config.loader import SyncConfig
from vaultsync.exceptions import VaultSyncError
from vaultsync.service.api import setup_webhook_routes
from vaultsync.service.api.middleware import error_middleware
from vaultsync.sync.runner import run_sync
from vaultsync.sync.types import SyncReport
from vaultsync.utils.logging import get_logger

logger = get_logger("vaultsync.service.webhook")

SyncRunner = Callable[[SyncConfig], Awaitable[SyncReport]]


class WebhookService:
    def __init__(self, config: SyncConfig, runner: SyncRunner | None = None, port: int | None = None):
        self.config = config
        self.runner = runner or run_sync
        self.port = port

        self._task: asyncio.Task | None = None
        self.last_trigger: str | None = None
        self.last_started_at: datetime | None = None
        self.last_finished_at: datetime | None = None
        self.last_report: SyncReport | None = None
        self.last_error: str | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start_run(self, trigger: str) -> bool:
        """Start a background run; returns False if one is already running."""
        if self.running:
            return False
        self.last_trigger = trigger
        self.last_started_at = datetime.now(UTC)
        self._task = asyncio.create_task(self._run(trigger))
        return True

    async def _run(self, trigger: str) -> None:
        logger.info(f"Starting vault sync (trigger: {trigger})...")
        try:
            report = await self.runner(self.config)
        except VaultSyncError as e:
            self.last_error = e.message
            logger.error(f"Sync failed: {e.message}")
            return
        except Exception as e:
            self.last_error = str(e)
            logger.error(f"Sync failed: {e}", exc_info=True)
            return
        finally:
            self.last_finished_at = datetime.now(UTC)

        self.last_report = report
        self.last_error = None
        if report.ok:
            logger.info("Sync completed successfully")
        else:
            logger.warning(
                f"Sync completed with {len(report.upload_failures)} upload and "
                f"{len(report.deletion_failures)} deletion failure(s)"
            )

    async def wait(self) -> None:
        """Wait for the current run, if any."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def stop(self) -> None:
        if self.running and self._task is not None:
            self._task.cancel()
        await self.wait()

    def status_info(self) -> dict[str, Any]:
        info: dict[str, Any] = {
            "port": self.port,
            "running": self.running,
            "last_trigger": self.last_trigger,
            "last_started_at": self.last_started_at.isoformat() if self.last_started_at else None,
            "last_finished_at": self.last_finished_at.isoformat() if self.last_finished_at else None,
            "last_error": self.last_error,
        }
        if self.last_report is not None:
            info["last_report"] = {
                "uploaded": self.last_report.uploaded,
                "deleted": self.last_report.deleted,
                "upload_failures": len(self.last_report.upload_failures),
                "deletion_failures": len(self.last_report.deletion_failures),
            }
        return info


def create_webhook_app(config: SyncConfig, *, runner: SyncRunner | None = None, port: int | None = None) -> web.Application:
    """Build the aiohttp application for the webhook trigger."""
    svc = WebhookService(config, runner=runner, port=port)
    app = web.Application(middlewares=[error_middleware])
    app["service"] = svc
    setup_webhook_routes(app, svc)

    async def on_cleanup(app: web.Application) -> None:
        await svc.stop()

    app.on_cleanup.append(on_cleanup)
    return app


def run_webhook_service(config: SyncConfig, *, host: str, port: int) -> None:
    """Run the webhook trigger service (blocking)."""
    app = create_webhook_app(config, port=port)
    logger.info(f"Webhook server listening on http://{host}:{port}")
    logger.info(f"Health check: http://{host}:{port}/health")
    logger.info(f"Webhook endpoint: http://{host}:{port}/webhook/sync")
    web.run_app(app, host=host, port=port, print=None)
