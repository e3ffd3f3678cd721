"""Request tracing: correlation ids and per-request log context."""

import uuid

import structlog
from asgi_correlation_id import CorrelationIdMiddleware
from asgi_correlation_id.context import correlation_id
from fastapi import FastAPI, Request

REQUEST_ID_HEADER = "X-Request-ID"


def setup_correlation_middleware(app: FastAPI) -> None:
    """Add correlation ID handling to a FastAPI app.

    Every response carries X-Request-ID: echoed when the client sent one,
    otherwise a fresh UUID. structlog context bound during a request (the
    acting user, for instance) is dropped before the next request starts.
    """

    @app.middleware("http")
    async def reset_log_context(request: Request, call_next):
        structlog.contextvars.clear_contextvars()
        return await call_next(request)

    # Added last so it wraps the log-context middleware and the id is set first
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name=REQUEST_ID_HEADER,
        generator=lambda: str(uuid.uuid4()),
        validator=None,
        transformer=lambda a: a,
    )


def get_correlation_id() -> str | None:
    """Return the current request's correlation ID, or None outside a request."""
    try:
        return correlation_id.get()
    except LookupError:
        return None


def bind_actor(user_id: int) -> None:
    """Attach the acting user to every log event for the rest of the request."""
    structlog.contextvars.bind_contextvars(user_id=user_id)


__all__ = ["bind_actor", "get_correlation_id", "setup_correlation_middleware"]
