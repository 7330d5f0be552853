import logging

from fastapi import HTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from socialfeed.core.errors import ErrorKind, error_response

logger = logging.getLogger("socialfeed")

TOO_LARGE_MESSAGE = "Request entity too large"

class RequestSizeLimitMiddleware:
    """
    Rejects request bodies larger than max_size bytes.
    A declared Content-Length is checked up front; bodies without one
    (chunked uploads) are counted as they are read.
    """

    def __init__(self, app: ASGIApp, max_size: int):
        self.app = app
        self.max_size = max_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers") or [])
        content_length = headers.get(b"content-length")
        if content_length is not None:
            try:
                size = int(content_length)
            except ValueError:
                response = error_response(ErrorKind.VALIDATION.status_code, "Invalid Content-Length header")
                await response(scope, receive, send)
                return
            if size > self.max_size:
                logger.warning(f"Rejected {scope['method']} {scope['path']}: body of {size} bytes")
                response = error_response(ErrorKind.PAYLOAD_TOO_LARGE.status_code, TOO_LARGE_MESSAGE)
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_size:
                    logger.warning(f"Rejected {scope['method']} {scope['path']}: streamed body over {self.max_size} bytes")
                    # Raised inside body parsing, so the app's handlers render it
                    raise HTTPException(status_code=ErrorKind.PAYLOAD_TOO_LARGE.status_code, detail=TOO_LARGE_MESSAGE)
            return message

        await self.app(scope, limited_receive, send)
