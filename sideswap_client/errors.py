"""Shared error types for the SideSwap client."""

from __future__ import annotations

from typing import Any
from dataclasses import dataclass

QUOTE_ERROR_MARKER = "Quote error"


@dataclass(frozen=True, slots=True)
class ProtocolError(Exception):
    """Raised to the awaiter of a request the server answered with an Error frame."""

    request_id: int | None
    text: str
    code: str
    details: Any = None

    def __str__(self) -> str:
        return f"{self.code}: {self.text}" if self.code else self.text

    @property
    def is_quote_error(self) -> bool:
        return QUOTE_ERROR_MARKER in (self.text or "")


@dataclass(frozen=True, slots=True)
class RequestCancelledError(Exception):
    """Raised when a pending request is abandoned before any answer arrived."""

    request_id: int
    reason: str

    def __str__(self) -> str:
        return f"request {self.request_id} abandoned: {self.reason}"


@dataclass(frozen=True, slots=True)
class RequestTimeoutError(Exception):
    """Raised when a request got no answer within its per-request bound."""

    request_id: int
    tag: str
    timeout_s: float

    def __str__(self) -> str:
        return f"{self.tag} request {self.request_id} timed out after {self.timeout_s:.1f}s"


@dataclass(frozen=True, slots=True)
class UnmatchedResponseError(Exception):
    """Recorded (never raised) when a response id has no pending request."""

    request_id: int | None
    reason: str

    def __str__(self) -> str:
        return f"unmatched response for id {self.request_id}: {self.reason}"


@dataclass(frozen=True, slots=True)
class TransportClosedError(Exception):
    """Raised when sending on a transport that is not connected."""

    reason: str

    def __str__(self) -> str:
        return f"transport closed: {self.reason}"


__all__ = [
    "QUOTE_ERROR_MARKER",
    "ProtocolError",
    "RequestCancelledError",
    "RequestTimeoutError",
    "TransportClosedError",
    "UnmatchedResponseError",
]
