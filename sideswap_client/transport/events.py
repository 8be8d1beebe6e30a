"""Transport lifecycle and frame events (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TransportConnected:
    url: str


@dataclass(frozen=True, slots=True)
class TransportFrame:
    data: bytes | str


@dataclass(frozen=True, slots=True)
class TransportDisconnected:
    reason: str


@dataclass(frozen=True, slots=True)
class TransportFailed:
    detail: str


TransportEvent = TransportConnected | TransportFrame | TransportDisconnected | TransportFailed

__all__ = [
    "TransportConnected",
    "TransportDisconnected",
    "TransportEvent",
    "TransportFailed",
    "TransportFrame",
]
