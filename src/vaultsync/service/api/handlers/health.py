"""
GET /health for both services.
"""

import time
from datetime import UTC, datetime

from aiohttp import web

from vaultsync.service.api.handlers import BaseHandler


class HealthHandler(BaseHandler):
    def __init__(self, service):
        super().__init__(service)
        self.started = time.monotonic()

    async def health(self, request: web.Request) -> web.Response:
        """Report liveness plus whatever the owning service adds via ``status_info()``."""
        from vaultsync import __version__

        data = {
            "status": "ok",
            "version": __version__,
            "timestamp": datetime.now(UTC).isoformat(),
            "uptime_seconds": round(time.monotonic() - self.started, 2),
        }
        status_info = getattr(self.service, "status_info", None)
        if callable(status_info):
            data.update(status_info())
        return await self.json_response(data, request=request)
