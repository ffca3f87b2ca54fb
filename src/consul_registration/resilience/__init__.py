from __future__ import annotations

from consul_registration.resilience.retry_policy import (
    Retrier,
    RetryExecutor,
    RetryPolicy,
    RetryStrategy,
)

__all__ = [
    "Retrier",
    "RetryExecutor",
    "RetryPolicy",
    "RetryStrategy",
]
