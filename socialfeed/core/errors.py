# Error taxonomy and the single boundary that renders every failure as the
# {"success": false, "error": ...} envelope.
# Handlers raise AppError; store-layer errors (SQLAlchemy) and framework
# errors (validation, unknown routes) are translated here as well.

import enum
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, InterfaceError, NoResultFound, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("socialfeed")


class ErrorKind(enum.Enum):
    VALIDATION = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    PAYLOAD_TOO_LARGE = 413
    RATE_LIMITED = 429
    INTERNAL = 500
    UNAVAILABLE = 503

    @property
    def status_code(self) -> int:
        return self.value


class AppError(Exception):
    """Application error carrying the kind (and so the HTTP status) to report."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        headers: Optional[Dict[str, str]] = None,
        data: Any = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.headers = headers
        self.data = data

    @property
    def status_code(self) -> int:
        return self.kind.status_code


def error_response(
    status_code: int,
    message: str,
    data: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "error": message}
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=status_code, content=content, headers=headers)


_SQLITE_UNIQUE = re.compile(r"unique constraint failed: ([\w.]+)")
_POSTGRES_KEY = re.compile(r"key \((\w+)")


def _constraint_field(message: str) -> str:
    match = _SQLITE_UNIQUE.search(message)
    if match:
        return match.group(1).split(".")[-1]
    match = _POSTGRES_KEY.search(message)
    if match:
        return match.group(1)
    return "Resource"


def classify_integrity_error(exc: IntegrityError) -> Tuple[ErrorKind, str]:
    """Map a constraint violation to an error kind and a client-facing message."""
    orig = exc.orig
    pgcode = getattr(orig, "pgcode", None)
    message = str(orig).lower()

    if pgcode == "23505" or "unique constraint" in message or "duplicate key" in message:
        return ErrorKind.CONFLICT, f"{_constraint_field(message)} already exists"
    if pgcode == "23503" or "foreign key" in message:
        return ErrorKind.VALIDATION, "Referenced record does not exist"
    if pgcode == "23514" or "check constraint" in message:
        return ErrorKind.VALIDATION, "Request violates a data constraint"
    return ErrorKind.CONFLICT, "Resource conflict"


def _validation_messages(exc: RequestValidationError) -> List[str]:
    messages = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        msg = error.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return messages


def _is_production(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return settings is None or settings.is_production


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{exc.kind.name} on {request.method} {request.url.path}: {exc.message}")
        else:
            logger.warning(f"{exc.kind.name} on {request.method} {request.url.path}: {exc.message}")
        return error_response(exc.status_code, exc.message, data=exc.data, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        if any(error.get("type") == "json_invalid" for error in exc.errors()):
            message = "Invalid JSON in request body"
        else:
            message = "Validation failed"
        messages = _validation_messages(exc)
        logger.warning(f"Validation failed on {request.method} {request.url.path}: {messages}")
        return error_response(ErrorKind.VALIDATION.status_code, message, data=messages)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404 and message == "Not Found":
            message = f"Route {request.url.path} not found"
        logger.warning(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {message}")
        return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        kind, message = classify_integrity_error(exc)
        logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
        return error_response(kind.status_code, message)

    @app.exception_handler(NoResultFound)
    async def no_result_handler(request: Request, exc: NoResultFound):
        logger.warning(f"No result on {request.method} {request.url.path}: {exc}")
        return error_response(ErrorKind.NOT_FOUND.status_code, "Record not found")

    @app.exception_handler(OperationalError)
    @app.exception_handler(InterfaceError)
    async def database_unavailable_handler(request: Request, exc: Exception):
        logger.error(f"Database unavailable on {request.method} {request.url.path}: {exc}")
        return error_response(ErrorKind.UNAVAILABLE.status_code, "Database connection failed")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        message = "Internal server error" if _is_production(request) else str(exc)
        return error_response(ErrorKind.INTERNAL.status_code, message)
