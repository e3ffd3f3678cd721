"""Error taxonomy mapping for the HTTP surface.

Every error response is produced here, from a Failure, so all call sites
share one shape: ``{"message": str}`` plus ``errors`` for validation failures.
"""

import uuid
from typing import TypeVar

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.domain.errors import ERROR_STATUS, ErrorKind, Failure, Outcome, TaskboardError
from taskboard.middleware.correlation import get_correlation_id

T = TypeVar("T")

logger = structlog.get_logger(__name__)

# Framework-level HTTP errors (unknown route, wrong method) mapped onto the taxonomy
_STATUS_KINDS = {
    401: ErrorKind.UNAUTHENTICATED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    422: ErrorKind.VALIDATION_FAILED,
}


def error_body(failure: Failure) -> dict:
    body: dict = {"message": failure.message}
    if failure.kind == ErrorKind.VALIDATION_FAILED:
        body["errors"] = failure.errors or {}
    return body


def error_response(failure: Failure, *, debug_id: str | None = None) -> JSONResponse:
    body = error_body(failure)
    if debug_id is not None:
        body["debug_id"] = debug_id
    return JSONResponse(status_code=ERROR_STATUS[failure.kind], content=body)


def unwrap(outcome: Outcome[T]) -> T:
    """Return the value of an Ok outcome, or raise its Failure for the handler."""
    if isinstance(outcome, Failure):
        raise TaskboardError(outcome)
    return outcome.value


def validation_failure(exc: RequestValidationError) -> Failure:
    """Collapse pydantic errors into ``{field: [messages]}``."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
        field = ".".join(location) or "body"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return Failure(ErrorKind.VALIDATION_FAILED, errors=errors)


async def taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    failure = exc.failure
    log = logger.error if ERROR_STATUS[failure.kind] >= 500 else logger.info
    log(
        "request_failed",
        kind=failure.kind.value,
        status_code=ERROR_STATUS[failure.kind],
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=getattr(request.state, "user_id", None),
    )
    return error_response(failure)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    failure = validation_failure(exc)
    logger.info("validation_failed", path=request.url.path, fields=sorted(failure.errors or {}))
    return error_response(failure)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = _STATUS_KINDS.get(exc.status_code)
    if kind is None:
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})
    return error_response(Failure(kind, str(exc.detail) if exc.detail else ""))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unclassified faults: log with traceback, return a generic 500."""
    debug_id = str(uuid.uuid4())
    logger.error(
        "unhandled_exception",
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=getattr(request.state, "user_id", None),
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )
    return error_response(Failure(ErrorKind.UNHANDLED), debug_id=debug_id)


def register_exception_handlers(app: FastAPI) -> None:
    app.exception_handler(TaskboardError)(taskboard_error_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)
