from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RegistrationException(Exception):
    """Base class for registration errors with a canonical error shape."""

    code: int
    message: str
    data: Any | None = None
    cause: Exception | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", (self.message,))
        if self.cause is not None:
            object.__setattr__(self, "__cause__", self.cause)
            object.__setattr__(self, "__suppress_context__", True)

    def to_error_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "data": self.data}


@dataclass(frozen=True)
class InvalidIdentifierError(RegistrationException):
    """Raised when a name cannot be turned into a registry-safe identifier."""

    code: int = 2001
    message: str = (
        "Consul service ids must not be empty, must start with a letter, end with a "
        "letter or digit, and have as interior characters only letters, digits, and hyphen"
    )


@dataclass(frozen=True)
class MissingPortError(RegistrationException):
    """Raised when a descriptor is built before its port is known."""

    code: int = 2002
    message: str = "service.port has not been set"


@dataclass(frozen=True)
class TransportError(RegistrationException):
    """Raised when the registry agent is unreachable or rejects a call."""

    code: int = 5002
    message: str = "Registry agent unavailable"

    @property
    def status_code(self) -> int | None:
        if isinstance(self.data, dict):
            return self.data.get("status_code")
        return None


__all__ = [
    "RegistrationException",
    "InvalidIdentifierError",
    "MissingPortError",
    "TransportError",
]
