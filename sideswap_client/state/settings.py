"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConnectionSettings:
    url: str
    ping_interval_s: float
    ping_timeout_s: float
    open_timeout_s: float
    max_message_bytes: int


@dataclass(frozen=True, slots=True)
class SwapSettings:
    send_asset: str
    send_amount: int | float
    recv_asset: str
    poll_interval_s: float
    max_poll_attempts: int
    request_timeout_s: float
    balance_timeout_s: float
    max_balance_refetches: int


@dataclass(frozen=True, slots=True)
class AppSettings:
    connection: ConnectionSettings
    swap: SwapSettings


__all__ = [
    "AppSettings",
    "ConnectionSettings",
    "SwapSettings",
]
