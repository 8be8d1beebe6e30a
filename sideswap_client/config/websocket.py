"""WebSocket connection configuration (env names and defaults)."""

from __future__ import annotations

ENV_WS_URL = "SIDESWAP_WS_URL"
ENV_WS_PING_INTERVAL_S = "SIDESWAP_WS_PING_INTERVAL_S"
ENV_WS_PING_TIMEOUT_S = "SIDESWAP_WS_PING_TIMEOUT_S"
ENV_WS_OPEN_TIMEOUT_S = "SIDESWAP_WS_OPEN_TIMEOUT_S"
ENV_WS_MAX_MESSAGE_BYTES = "SIDESWAP_WS_MAX_MESSAGE_BYTES"

DEFAULT_WS_URL = "ws://127.0.0.1:3102"
DEFAULT_WS_PING_INTERVAL_S = 20.0
DEFAULT_WS_PING_TIMEOUT_S = 20.0
DEFAULT_WS_OPEN_TIMEOUT_S = 10.0
DEFAULT_WS_MAX_MESSAGE_BYTES = 4 * 1024 * 1024

# Close codes
WS_CLOSE_NORMAL_CODE = 1000
WS_CLOSE_NORMAL_REASON = "client shutdown"

__all__ = [
    "DEFAULT_WS_MAX_MESSAGE_BYTES",
    "DEFAULT_WS_OPEN_TIMEOUT_S",
    "DEFAULT_WS_PING_INTERVAL_S",
    "DEFAULT_WS_PING_TIMEOUT_S",
    "DEFAULT_WS_URL",
    "ENV_WS_MAX_MESSAGE_BYTES",
    "ENV_WS_OPEN_TIMEOUT_S",
    "ENV_WS_PING_INTERVAL_S",
    "ENV_WS_PING_TIMEOUT_S",
    "ENV_WS_URL",
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_NORMAL_REASON",
]
