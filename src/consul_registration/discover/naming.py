"""Registry-safe identifier normalization."""

from __future__ import annotations

from consul_registration.exceptions import InvalidIdentifierError
from consul_registration.utils.constant import SEPARATOR

__all__ = ["normalize_for_dns"]


def normalize_for_dns(value: str | None) -> str:
    """Normalize ``value`` into an identifier Consul accepts as a service id.

    Letters and digits are kept as they are; every run of other characters
    collapses into a single ``-``.

    Raises:
        InvalidIdentifierError: if ``value`` is empty, does not start with a
            letter, or does not end with a letter or digit.
    """
    if not value or not value[0].isalpha() or not value[-1].isalnum():
        raise InvalidIdentifierError(data={"value": value})

    normalized: list[str] = []
    prev: str | None = None
    for curr in value:
        to_append: str | None = None
        if curr.isalnum():
            to_append = curr
        elif prev != SEPARATOR:
            to_append = SEPARATOR
        if to_append is not None:
            normalized.append(to_append)
            prev = to_append
    return "".join(normalized)
