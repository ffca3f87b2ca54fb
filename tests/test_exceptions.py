from __future__ import annotations

from dataclasses import FrozenInstanceError

import httpx
import pytest

from consul_registration.exceptions import (
    InvalidIdentifierError,
    MissingPortError,
    RegistrationException,
    TransportError,
)


@pytest.mark.parametrize(
    "exc_cls, code",
    [
        (InvalidIdentifierError, 2001),
        (MissingPortError, 2002),
        (TransportError, 5002),
    ],
)
def test_error_codes(exc_cls, code):
    exc = exc_cls()

    assert isinstance(exc, RegistrationException)
    assert exc.code == code
    assert str(exc) == exc.message
    assert exc.to_error_dict() == {"code": code, "message": exc.message, "data": None}


def test_missing_port_message():
    assert str(MissingPortError()) == "service.port has not been set"


def test_cause_is_chained():
    cause = httpx.ConnectError("refused")
    exc = TransportError(message="agent down", cause=cause)

    assert exc.__cause__ is cause


def test_transport_error_status_code():
    assert TransportError(data={"status_code": 503}).status_code == 503
    assert TransportError().status_code is None


def test_exceptions_are_frozen():
    exc = TransportError()

    with pytest.raises(FrozenInstanceError):
        exc.code = 1  # type: ignore[misc]
