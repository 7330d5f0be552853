from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("socialfeed")

class AuthLoggingMiddleware(BaseHTTPMiddleware):
    """Logs auth failures; never blocks a request itself."""

    async def dispatch(self, request: Request, call_next):
        auth_header = request.headers.get("Authorization")
        path = request.url.path

        if auth_header and not auth_header.lower().startswith("bearer "):
            logger.warning(f"Non-bearer Authorization header on {path}")

        response = await call_next(request)

        if response.status_code in [401, 403]:
            state = "with" if auth_header else "without"
            logger.warning(f"Auth error: {response.status_code} on {request.method} {path} ({state} auth header)")

        return response
