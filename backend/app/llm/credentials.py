"""Credential pool and retry classification for the generation provider.

The pool is immutable configuration: every generation call walks it from the
first credential. Whether a failure advances to the next credential is decided
by ``classify_failure``, which only looks at the status code and message so it
can be tested without a network call.
"""

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from pydantic import SecretStr

from backend.app.llm.errors import ConfigurationError

# 429 plus the whole 5xx range are transient; see classify_failure
TRANSIENT_STATUS_CODES = frozenset({429})
SERVER_ERROR_RANGE = range(500, 600)

TRANSIENT_KEYWORDS = ("overloaded", "unavailable", "quota", "timeout")
_TRANSIENT_PATTERN = re.compile("|".join(TRANSIENT_KEYWORDS), re.IGNORECASE)

_REDACTED = "***"


class FailureKind(str, Enum):
    """Outcome class of a failed remote call."""

    TRANSIENT = "transient"
    FATAL = "fatal"


@dataclass(frozen=True)
class CredentialPool:
    """Ordered, non-empty set of generation API credentials."""

    credentials: tuple[SecretStr, ...]

    def __post_init__(self) -> None:
        if not self.credentials:
            raise ConfigurationError("At least one generation API credential is required")
        if any(not c.get_secret_value().strip() for c in self.credentials):
            raise ConfigurationError("Generation API credentials must not be blank")

    @classmethod
    def from_values(cls, values: Iterable[str]) -> "CredentialPool":
        """Build a pool from plain strings, preserving order."""
        return cls(credentials=tuple(SecretStr(v) for v in values))

    def __iter__(self) -> Iterator[SecretStr]:
        return iter(self.credentials)

    def __len__(self) -> int:
        return len(self.credentials)


def classify_failure(status_code: int | None, message: str) -> FailureKind:
    """Decide whether a failed call may be retried with the next credential.

    Args:
        status_code: HTTP-like status reported by the provider, if any
        message: Error message reported by the provider

    Returns:
        FailureKind.TRANSIENT for rate limits, server errors and messages
        matching TRANSIENT_KEYWORDS; FailureKind.FATAL otherwise
    """
    if status_code is not None:
        if status_code in TRANSIENT_STATUS_CODES or status_code in SERVER_ERROR_RANGE:
            return FailureKind.TRANSIENT
    if message and _TRANSIENT_PATTERN.search(message):
        return FailureKind.TRANSIENT
    return FailureKind.FATAL


def failure_status(exc: BaseException) -> int | None:
    """Read an HTTP-like status code off an exception, if it carries one."""
    for attr in ("status_code", "status", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int):
        return value
    return None


def redact(message: str, credential: SecretStr) -> str:
    """Remove a credential value from a diagnostic message."""
    secret = credential.get_secret_value()
    if secret and secret in message:
        return message.replace(secret, _REDACTED)
    return message
