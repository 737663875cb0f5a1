from __future__ import annotations

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.context import set_request_id, set_wallet_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        """
        Sets request_id into contextvars for the lifetime of the request.

        The id comes from the X-Request-Id header when the caller sends one,
        otherwise a fresh one is generated. It is echoed on the response.
        """
        request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex

        try:
            set_request_id(request_id)
            response = await call_next(request)
            response.headers["X-Request-Id"] = request_id
            return response
        finally:
            # always clear context
            set_request_id(None)
            set_wallet_id(None)
