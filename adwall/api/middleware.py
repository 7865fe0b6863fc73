"""
ASGI middleware for the ad wall API.

Both classes are plain ASGI apps rather than ``BaseHTTPMiddleware`` so
they can see the raw ``receive``/``send`` channels: the body limit has
to count bytes as they arrive, and the error guard has to know whether
a response was already started.
"""

import email.message
import logging
from typing import Optional

from fastapi import status
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .responses import error_response

logger = logging.getLogger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def is_json_content_type(content_type: Optional[str]) -> bool:
    """
    True when FastAPI would parse a body with this content type as JSON.

    A missing content type counts as JSON, as do ``application/json``
    and any ``application/*+json`` subtype.
    """
    if not content_type:
        return True
    message = email.message.Message()
    message["content-type"] = content_type
    if message.get_content_maintype() != "application":
        return False
    subtype = message.get_content_subtype()
    return subtype == "json" or subtype.endswith("+json")


class JsonBodyLimitMiddleware:
    """
    Reject JSON request bodies larger than ``limit`` bytes with a 413.

    A declared ``Content-Length`` above the limit is refused before
    anything is read. Otherwise the body is read up to the limit and
    replayed to the application, so chunked bodies without a length
    are bounded too.
    """

    def __init__(self, app: ASGIApp, limit: int) -> None:
        self.app = app
        self.limit = limit

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in BODY_METHODS:
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        if not is_json_content_type(headers.get("content-type")):
            await self.app(scope, receive, send)
            return

        length = headers.get("content-length", "")
        if length.isdigit() and int(length) > self.limit:
            await self._reject(scope, receive, send, length)
            return

        chunks: list[bytes] = []
        received = 0
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            body = message.get("body", b"")
            received += len(body)
            if received > self.limit:
                await self._reject(scope, receive, send, f"more than {self.limit}")
                return
            chunks.append(body)
            if not message.get("more_body", False):
                break

        buffered = b"".join(chunks)
        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": buffered, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: str) -> None:
        logger.warning(f"Rejected {size} byte JSON body on {scope.get('path')}")
        response = error_response(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            "Request body too large",
            error=f"limit is {self.limit} bytes"
        )
        await response(scope, receive, send)


class ErrorEnvelopeMiddleware:
    """
    Turn exceptions no handler caught into the 500 failure envelope.

    Installed inside the CORS middleware, so even these responses carry
    the CORS headers a browser needs to read them. Errors raised after
    the response has started cannot be rewritten and are re-raised.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, tracking_send)
        except Exception as exc:
            if response_started:
                raise
            logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
            response = error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Internal server error",
                error="An unexpected error occurred. Please try again."
            )
            await response(scope, receive, send)
