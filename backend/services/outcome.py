"""Tagged results for remote calls.

Services never raise to their callers: every remote call is wrapped in
`capture`, which turns exceptions into an `Outcome` carrying the failure
reason. The public service functions then log the reason and fall back to an
empty or absent value.
"""

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic
from typing import TypeVar

import httpx

from backend.clients.errors import MalformedPayloadError
from backend.clients.errors import MissingCredentialError

T = TypeVar("T")

logger = logging.getLogger(__name__)


class FailureReason(StrEnum):
    MISSING_CREDENTIAL = "missing_credential"
    TRANSPORT = "transport"
    STATUS = "status"
    MALFORMED_PAYLOAD = "malformed_payload"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: T | None = None
    failure: FailureReason | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failed(cls, reason: FailureReason, detail: str) -> "Outcome[T]":
        return cls(failure=reason, detail=detail)

    def unwrap_or(self, default: T) -> T:
        if self.ok and self.value is not None:
            return self.value
        return default


def classify(exc: Exception) -> FailureReason:
    """Map an exception raised by a client call to a failure reason."""

    if isinstance(exc, MissingCredentialError):
        return FailureReason.MISSING_CREDENTIAL
    if isinstance(exc, httpx.HTTPStatusError):
        return FailureReason.STATUS
    if isinstance(exc, httpx.RequestError):
        return FailureReason.TRANSPORT
    if isinstance(exc, MalformedPayloadError | ValueError | KeyError | TypeError):
        return FailureReason.MALFORMED_PAYLOAD
    return FailureReason.UNEXPECTED


def describe(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"{exc.request.method} {exc.request.url} returned {exc.response.status_code}"
    return str(exc) or type(exc).__name__


async def capture(call: Awaitable[T]) -> Outcome[T]:
    """Await a client call and return its result as an `Outcome`."""

    try:
        return Outcome.success(await call)
    except Exception as exc:
        reason = classify(exc)
        if reason is FailureReason.UNEXPECTED:
            logger.exception("Unexpected error during remote call")
        return Outcome.failed(reason, describe(exc))


def log_failure(log: logging.Logger, context: str, outcome: Outcome) -> None:
    """Log a failed outcome; missing credentials are a warning, the rest errors."""

    if outcome.ok:
        return
    level = (
        logging.WARNING
        if outcome.failure is FailureReason.MISSING_CREDENTIAL
        else logging.ERROR
    )
    log.log(level, "%s failed (%s): %s", context, outcome.failure, outcome.detail)
