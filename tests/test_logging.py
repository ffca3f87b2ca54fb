from __future__ import annotations

import io
import json
import logging
import uuid

import pytest

from consul_registration.observability.logging import (
    LOG_FORMAT_CONSOLE,
    LOG_FORMAT_ENV,
    LOG_FORMAT_JSON,
    LogContext,
    get_logger,
)


@pytest.fixture(autouse=True)
def fresh_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def make_logger():
    loggers: list[logging.Logger] = []

    def make(name: str | None = None, **kwargs) -> logging.Logger:
        logger = get_logger(name or f"consul_registration.test.{uuid.uuid4().hex}", **kwargs)
        loggers.append(logger)
        return logger

    yield make
    for logger in loggers:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)


def last_json_line(stream: io.StringIO) -> dict:
    return json.loads(stream.getvalue().strip().splitlines()[-1])


def test_json_is_the_default_format(make_logger, stream, monkeypatch):
    monkeypatch.delenv(LOG_FORMAT_ENV, raising=False)
    logger = make_logger(stream=stream)

    logger.info("registered %s", "orders-1")
    line = last_json_line(stream)

    assert line["message"] == "registered orders-1"
    assert line["level"] == "INFO"
    assert line["logger"] == logger.name
    assert line["timestamp"].endswith("Z")


def test_env_selects_console_format(make_logger, stream, monkeypatch):
    monkeypatch.setenv(LOG_FORMAT_ENV, LOG_FORMAT_CONSOLE)
    make_logger(stream=stream).warning("heartbeat late")

    output = stream.getvalue()
    assert "WARNING" in output
    assert "heartbeat late service_id=- check_id=-" in output


def test_explicit_format_wins_over_env(make_logger, stream, monkeypatch):
    monkeypatch.setenv(LOG_FORMAT_ENV, LOG_FORMAT_CONSOLE)
    make_logger(stream=stream, log_format=LOG_FORMAT_JSON).info("as json")

    assert last_json_line(stream)["message"] == "as json"


def test_log_context_binds_service_and_check(make_logger, stream):
    logger = make_logger(stream=stream, log_format=LOG_FORMAT_JSON)

    with LogContext(service_id="orders-1", check_id="service:orders-1"):
        logger.info("beat")
        inside = last_json_line(stream)
    logger.info("done")
    outside = last_json_line(stream)

    assert (inside["service_id"], inside["check_id"]) == ("orders-1", "service:orders-1")
    assert (outside["service_id"], outside["check_id"]) == ("-", "-")


def test_nested_context_keeps_outer_fields():
    with LogContext(service_id="orders-1"):
        with LogContext(check_id="service:orders-1"):
            assert LogContext.snapshot() == {"service_id": "orders-1", "check_id": "service:orders-1"}
        assert LogContext.snapshot() == {"service_id": "orders-1"}
    assert LogContext.snapshot() == {}


def test_extra_fields_are_serialized(make_logger, stream):
    make_logger(stream=stream, log_format=LOG_FORMAT_JSON).info("payload", extra={"port": 8080})

    assert last_json_line(stream)["port"] == 8080


def test_handler_is_not_added_twice(make_logger, stream):
    name = f"consul_registration.test.{uuid.uuid4().hex}"

    first = make_logger(name, stream=stream)
    second = make_logger(name, stream=stream)

    assert first is second
    assert len(first.handlers) == 1
    assert first.propagate is False


def test_switching_format_replaces_the_handler(make_logger, stream):
    name = f"consul_registration.test.{uuid.uuid4().hex}"
    json_stream = io.StringIO()

    make_logger(name, stream=json_stream, log_format=LOG_FORMAT_JSON)
    logger = make_logger(name, stream=stream, log_format=LOG_FORMAT_CONSOLE)
    logger.info("switched")

    assert len(logger.handlers) == 1
    assert json_stream.getvalue() == ""
    assert stream.getvalue().count("switched") == 1
    assert "INFO" in stream.getvalue()
    assert not stream.getvalue().lstrip().startswith("{")


def test_level_filters_lower_records(make_logger, stream):
    logger = make_logger(stream=stream, level=logging.WARNING, log_format=LOG_FORMAT_JSON)

    logger.info("dropped")
    logger.error("kept")

    assert "dropped" not in stream.getvalue()
    assert last_json_line(stream)["message"] == "kept"
