"""Environment parsing for runtime settings."""

from __future__ import annotations

import os
import math

from sideswap_client.state.settings import AppSettings, SwapSettings, ConnectionSettings
from sideswap_client.config.websocket import (
    ENV_WS_URL,
    DEFAULT_WS_URL,
    ENV_WS_PING_TIMEOUT_S,
    ENV_WS_OPEN_TIMEOUT_S,
    ENV_WS_PING_INTERVAL_S,
    ENV_WS_MAX_MESSAGE_BYTES,
    DEFAULT_WS_PING_TIMEOUT_S,
    DEFAULT_WS_OPEN_TIMEOUT_S,
    DEFAULT_WS_PING_INTERVAL_S,
    DEFAULT_WS_MAX_MESSAGE_BYTES,
)
from sideswap_client.config.swap import (
    ENV_RECV_ASSET,
    ENV_SEND_ASSET,
    ENV_SEND_AMOUNT,
    DEFAULT_RECV_ASSET,
    DEFAULT_SEND_ASSET,
    ENV_POLL_INTERVAL_S,
    DEFAULT_SEND_AMOUNT,
    ENV_BALANCE_TIMEOUT_S,
    ENV_MAX_POLL_ATTEMPTS,
    ENV_REQUEST_TIMEOUT_S,
    DEFAULT_POLL_INTERVAL_S,
    DEFAULT_BALANCE_TIMEOUT_S,
    DEFAULT_MAX_POLL_ATTEMPTS,
    DEFAULT_REQUEST_TIMEOUT_S,
    ENV_MAX_BALANCE_REFETCHES,
    DEFAULT_MAX_BALANCE_REFETCHES,
)


def _str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except Exception:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except Exception:
        return default


def parse_amount(raw: str | int | float) -> int | float:
    """Keep integral amounts as ints so they serialize exactly as typed."""
    if isinstance(raw, int | float) and not isinstance(raw, bool):
        value = raw
    else:
        text = str(raw).strip()
        try:
            value = int(text)
        except ValueError:
            value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"amount must be finite, got {raw!r}")
    if value < 0:
        raise ValueError(f"amount must be non-negative, got {raw!r}")
    return value


def _amount_env(name: str, default: int | float) -> int | float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return parse_amount(raw)
    except ValueError:
        return default


def _load_connection_settings() -> ConnectionSettings:
    return ConnectionSettings(
        url=_str_env(ENV_WS_URL, DEFAULT_WS_URL),
        ping_interval_s=_float_env(ENV_WS_PING_INTERVAL_S, DEFAULT_WS_PING_INTERVAL_S),
        ping_timeout_s=_float_env(ENV_WS_PING_TIMEOUT_S, DEFAULT_WS_PING_TIMEOUT_S),
        open_timeout_s=_float_env(ENV_WS_OPEN_TIMEOUT_S, DEFAULT_WS_OPEN_TIMEOUT_S),
        max_message_bytes=max(1024, _int_env(ENV_WS_MAX_MESSAGE_BYTES, DEFAULT_WS_MAX_MESSAGE_BYTES)),
    )


def _load_swap_settings() -> SwapSettings:
    poll_interval = _float_env(ENV_POLL_INTERVAL_S, DEFAULT_POLL_INTERVAL_S)
    if poll_interval < 0:
        poll_interval = DEFAULT_POLL_INTERVAL_S
    request_timeout = _float_env(ENV_REQUEST_TIMEOUT_S, DEFAULT_REQUEST_TIMEOUT_S)
    if request_timeout <= 0:
        request_timeout = DEFAULT_REQUEST_TIMEOUT_S
    balance_timeout = _float_env(ENV_BALANCE_TIMEOUT_S, DEFAULT_BALANCE_TIMEOUT_S)
    if balance_timeout <= 0:
        balance_timeout = DEFAULT_BALANCE_TIMEOUT_S

    return SwapSettings(
        send_asset=_str_env(ENV_SEND_ASSET, DEFAULT_SEND_ASSET),
        send_amount=_amount_env(ENV_SEND_AMOUNT, DEFAULT_SEND_AMOUNT),
        recv_asset=_str_env(ENV_RECV_ASSET, DEFAULT_RECV_ASSET),
        poll_interval_s=poll_interval,
        max_poll_attempts=max(1, _int_env(ENV_MAX_POLL_ATTEMPTS, DEFAULT_MAX_POLL_ATTEMPTS)),
        request_timeout_s=request_timeout,
        balance_timeout_s=balance_timeout,
        max_balance_refetches=max(0, _int_env(ENV_MAX_BALANCE_REFETCHES, DEFAULT_MAX_BALANCE_REFETCHES)),
    )


def load_settings() -> AppSettings:
    return AppSettings(
        connection=_load_connection_settings(),
        swap=_load_swap_settings(),
    )


__all__ = ["load_settings", "parse_amount"]
