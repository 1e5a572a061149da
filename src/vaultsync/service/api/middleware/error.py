"""
Error middleware.

Tags every request with an id and converts exceptions into JSON error bodies.
"""

import json
import uuid
from collections.abc import Awaitable, Callable

from aiohttp import web

from vaultsync.exceptions import InvalidKeyError, StorageError
from vaultsync.service.api.errors import APIError, ErrorCode
from vaultsync.utils.logging import get_logger

logger = get_logger("vaultsync.api.middleware.error")

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _error(request_id: str, status: int, code: ErrorCode, message: str) -> web.Response:
    body = {"error": {"code": code.value, "message": message, "request_id": request_id}}
    return web.json_response(body, status=status, headers={"X-Request-ID": request_id})


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """
    Map exceptions raised by handlers to responses.

    APIError keeps its own status; malformed JSON and bad keys are 400;
    other storage failures and anything unexpected are 500. aiohttp's own
    HTTP exceptions (404 route, 405 method) pass through untouched.
    """
    request_id = f"req_{uuid.uuid4().hex[:12]}"
    request["request_id"] = request_id
    where = f"{request.method} {request.path}"

    try:
        response = await handler(request)
    except APIError as e:
        logger.warning(f"{where}: {e.code.value} {e.message}")
        return web.json_response(e.to_dict(request_id), status=e.status, headers={"X-Request-ID": request_id})
    except json.JSONDecodeError as e:
        logger.warning(f"{where}: invalid JSON body ({e})")
        return _error(request_id, 400, ErrorCode.INVALID_REQUEST, "Invalid JSON in request body")
    except InvalidKeyError as e:
        logger.warning(f"{where}: {e.message}")
        return _error(request_id, 400, ErrorCode.INVALID_KEY, e.message)
    except StorageError as e:
        logger.error(f"{where}: storage error: {e.message}")
        return _error(request_id, 500, ErrorCode.STORAGE_ERROR, e.message)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.error(f"{where}: unexpected error: {e}", exc_info=True)
        return _error(request_id, 500, ErrorCode.INTERNAL_ERROR, "An internal error occurred")

    response.headers["X-Request-ID"] = request_id
    return response
