"""Configuration module exports (env names and defaults only)."""

from .websocket import DEFAULT_WS_URL
from .swap import (
    DEFAULT_RECV_ASSET,
    DEFAULT_SEND_ASSET,
    DEFAULT_SEND_AMOUNT,
    DEFAULT_POLL_INTERVAL_S,
    DEFAULT_MAX_POLL_ATTEMPTS,
)

__all__ = [
    "DEFAULT_MAX_POLL_ATTEMPTS",
    "DEFAULT_POLL_INTERVAL_S",
    "DEFAULT_RECV_ASSET",
    "DEFAULT_SEND_AMOUNT",
    "DEFAULT_SEND_ASSET",
    "DEFAULT_WS_URL",
]
