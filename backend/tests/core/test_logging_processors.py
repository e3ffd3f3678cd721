"""Tests for the structlog processors and log context helpers."""

import pytest
import structlog
from asgi_correlation_id.context import correlation_id

from taskboard.core.logging import add_correlation_id, service_tagger
from taskboard.middleware.correlation import bind_actor

pytestmark = pytest.mark.unit


def test_correlation_id_added_inside_request():
    token = correlation_id.set("req-42")
    try:
        event = add_correlation_id(None, "info", {"event": "project_restored"})
    finally:
        correlation_id.reset(token)
    assert event["correlation_id"] == "req-42"


def test_correlation_id_absent_outside_request():
    event = add_correlation_id(None, "info", {"event": "startup_begin"})
    assert "correlation_id" not in event


def test_service_tag_does_not_override_explicit_value():
    add_service = service_tagger("taskboard")
    assert add_service(None, "info", {})["service"] == "taskboard"
    assert add_service(None, "info", {"service": "worker"})["service"] == "worker"


def test_bind_actor_reaches_log_events():
    structlog.contextvars.clear_contextvars()
    bind_actor(7)
    try:
        event = structlog.contextvars.merge_contextvars(None, "info", {"event": "task_created"})
    finally:
        structlog.contextvars.clear_contextvars()
    assert event == {"event": "task_created", "user_id": 7}
