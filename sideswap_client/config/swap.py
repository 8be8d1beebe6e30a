"""Swap workflow configuration (env names and defaults)."""

from __future__ import annotations

ENV_SEND_ASSET = "SIDESWAP_SEND_ASSET"
ENV_SEND_AMOUNT = "SIDESWAP_SEND_AMOUNT"
ENV_RECV_ASSET = "SIDESWAP_RECV_ASSET"
ENV_POLL_INTERVAL_S = "SIDESWAP_POLL_INTERVAL_S"
ENV_MAX_POLL_ATTEMPTS = "SIDESWAP_MAX_POLL_ATTEMPTS"
ENV_REQUEST_TIMEOUT_S = "SIDESWAP_REQUEST_TIMEOUT_S"
ENV_BALANCE_TIMEOUT_S = "SIDESWAP_BALANCE_TIMEOUT_S"
ENV_MAX_BALANCE_REFETCHES = "SIDESWAP_MAX_BALANCE_REFETCHES"

DEFAULT_SEND_ASSET = "DePix"
DEFAULT_SEND_AMOUNT = 1
DEFAULT_RECV_ASSET = "L-BTC"

# Confirmation polling: one GetSwaps every interval, bounded attempt budget.
DEFAULT_POLL_INTERVAL_S = 5.0
DEFAULT_MAX_POLL_ATTEMPTS = 10

# Bound on a single request/response round-trip, distinct from the poll budget.
DEFAULT_REQUEST_TIMEOUT_S = 15.0

# How long to wait for a balance push after a new address was issued.
DEFAULT_BALANCE_TIMEOUT_S = 30.0
DEFAULT_MAX_BALANCE_REFETCHES = 3

__all__ = [
    "DEFAULT_BALANCE_TIMEOUT_S",
    "DEFAULT_MAX_BALANCE_REFETCHES",
    "DEFAULT_MAX_POLL_ATTEMPTS",
    "DEFAULT_POLL_INTERVAL_S",
    "DEFAULT_RECV_ASSET",
    "DEFAULT_REQUEST_TIMEOUT_S",
    "DEFAULT_SEND_AMOUNT",
    "DEFAULT_SEND_ASSET",
    "ENV_BALANCE_TIMEOUT_S",
    "ENV_MAX_BALANCE_REFETCHES",
    "ENV_MAX_POLL_ATTEMPTS",
    "ENV_POLL_INTERVAL_S",
    "ENV_RECV_ASSET",
    "ENV_REQUEST_TIMEOUT_S",
    "ENV_SEND_AMOUNT",
    "ENV_SEND_ASSET",
]
