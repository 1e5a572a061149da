"""
Request handlers for the storage facade and the webhook service.
"""

from typing import Any

from aiohttp import web


class BaseHandler:
    """Handlers reach shared state (store, config, run state) through ``service``."""

    def __init__(self, service: Any):
        self.service = service

    @staticmethod
    def request_id(request: web.Request) -> str | None:
        return request.get("request_id")

    async def json_response(self, data: Any, status: int = 200, request: web.Request | None = None) -> web.Response:
        headers = {}
        request_id = self.request_id(request) if request is not None else None
        if request_id:
            headers["X-Request-ID"] = request_id
        return web.json_response(data, status=status, headers=headers)
