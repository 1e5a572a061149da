"""
Webhook trigger endpoint.
"""

import hmac
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from aiohttp import web

from vaultsync.service.api.errors import ConflictError, UnauthorizedError, ValidationError
from vaultsync.service.api.handlers import BaseHandler
from vaultsync.utils.logging import get_logger

if TYPE_CHECKING:
    from vaultsync.service.webhook import WebhookService

logger = get_logger("vaultsync.api.webhook")


class WebhookHandler(BaseHandler):
    service: "WebhookService"

    def _check_token(self, request: web.Request) -> None:
        token = self.service.config.sync_token
        if not token:
            return
        # "Bearer <token>" or the bare token
        header = request.headers.get("Authorization", "").strip()
        scheme, _, credentials = header.partition(" ")
        credentials = credentials.strip() or scheme
        if not credentials or not hmac.compare_digest(credentials.encode(), token.encode()):
            raise UnauthorizedError()

    async def trigger(self, request: web.Request) -> web.Response:
        """
        POST /webhook/sync

        Body: ``{"trigger": "cron", "timestamp": "..."}``. Starts a sync run in
        the background and answers immediately; 409 while a run is in progress.
        """
        self._check_token(request)

        data = await request.json()
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        trigger = str(data.get("trigger") or "webhook")
        logger.info(f"Webhook triggered by {trigger} at {data.get('timestamp', 'unknown time')}")

        if not self.service.start_run(trigger):
            raise ConflictError("A sync run is already in progress")

        return await self.json_response(
            {"message": "Sync triggered successfully", "timestamp": datetime.now(UTC).isoformat()},
            request=request,
        )
