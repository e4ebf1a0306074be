"""ASGI middleware"""
import asyncio
import logging

from fastapi import Request, status
from starlette.types import ASGIApp, Receive, Scope, Send
from urllib.parse import parse_qs

from app.core.responses import error_page, error_response, wants_json

logger = logging.getLogger(__name__)

OVERRIDABLE_METHODS = {"PUT", "PATCH", "DELETE"}


class MethodOverrideMiddleware:
    """
    Let HTML forms send PUT/DELETE as POST with ``?_method=DELETE`` or an
    ``X-HTTP-Method-Override`` header.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] == "http" and scope["method"] == "POST":
            override = None
            for name, value in scope.get("headers", []):
                if name == b"x-http-method-override":
                    override = value.decode("latin-1")
                    break
            if override is None:
                query = parse_qs(scope.get("query_string", b"").decode("latin-1"))
                override = (query.get("_method") or [None])[0]

            if override and override.upper() in OVERRIDABLE_METHODS:
                scope = dict(scope, method=override.upper())

        await self.app(scope, receive, send)


def request_timeout_middleware(timeout_seconds: float):
    """Build an http middleware that fails requests running past the timeout"""

    async def middleware(request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"Request timed out after {timeout_seconds}s: {request.method} {request.url.path}")
            message = "Request timed out"
            if wants_json(request):
                return error_response(message, status.HTTP_504_GATEWAY_TIMEOUT)
            return error_page(message, status.HTTP_504_GATEWAY_TIMEOUT)

    return middleware
