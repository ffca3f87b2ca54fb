"""Backoff retries around the registration start operation."""

from __future__ import annotations

import asyncio
import enum
import inspect
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol, TypeVar

from consul_registration.exceptions import RegistrationException, TransportError

T = TypeVar("T")
Operation = Callable[..., T | Awaitable[T]]

logger = logging.getLogger(__name__)

__all__ = ["Retrier", "RetryExecutor", "RetryPolicy", "RetryStrategy"]


class RetryStrategy(str, enum.Enum):
    """How the wait between attempts grows."""

    FIXED = "fixed"
    EXPONENTIAL = "exponential"
    LINEAR = "linear"


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Attempt budget and backoff between attempts.

    Without ``retryable_codes`` only :class:`TransportError` is retried. With
    them, any :class:`RegistrationException` whose code is listed is retried
    and nothing else is.
    """

    max_attempts: int = 3
    strategy: RetryStrategy = RetryStrategy.EXPONENTIAL
    initial_delay_ms: int = 100
    max_delay_ms: int = 10000
    backoff_multiplier: float = 2.0
    jitter: float = 0.1
    retryable_codes: frozenset[int] | None = None

    def is_retryable(self, error: BaseException) -> bool:
        if self.retryable_codes is None:
            return isinstance(error, TransportError)
        return isinstance(error, RegistrationException) and error.code in self.retryable_codes

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        initial = max(0, self.initial_delay_ms)
        if self.strategy is RetryStrategy.EXPONENTIAL:
            delay_ms = initial * max(1.0, self.backoff_multiplier) ** (attempt - 1)
        elif self.strategy is RetryStrategy.LINEAR:
            delay_ms = initial * attempt
        else:
            delay_ms = initial
        delay_ms = min(delay_ms, max(initial, self.max_delay_ms))

        jitter = min(max(self.jitter, 0.0), 1.0)
        if jitter and delay_ms:
            delay_ms += delay_ms * jitter * random.uniform(-1.0, 1.0)
        return max(0.0, delay_ms) / 1000.0


class Retrier(Protocol):
    async def execute(self, func: Operation[T], *args: Any, **kwargs: Any) -> T: ...


class RetryExecutor:
    """Runs a sync or async callable until it succeeds or the policy gives up."""

    def __init__(self, policy: RetryPolicy | None = None) -> None:
        self.policy = policy or RetryPolicy()

    async def execute(self, func: Operation[T], *args: Any, **kwargs: Any) -> T:
        attempts = max(1, self.policy.max_attempts)
        attempt = 1
        while True:
            try:
                result = func(*args, **kwargs)
                if inspect.isawaitable(result):
                    result = await result
                return result
            except Exception as exc:
                if attempt >= attempts or not self.policy.is_retryable(exc):
                    raise
                delay = self.policy.delay_for(attempt)
                logger.warning("Attempt %d/%d failed: %s; retrying in %.3fs", attempt, attempts, exc, delay)
                if delay > 0:
                    await asyncio.sleep(delay)
                attempt += 1
