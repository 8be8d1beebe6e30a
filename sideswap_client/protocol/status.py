"""Swap confirmation status as reported by GetSwaps."""

from __future__ import annotations

from enum import StrEnum

from sideswap_client.config.protocol import (
    PROTO_SWAP_STATUS_MEMPOOL,
    PROTO_SWAP_STATUS_CONFIRMED,
    PROTO_SWAP_STATUS_NOT_FOUND,
)


class SwapStatus(StrEnum):
    NOT_FOUND = PROTO_SWAP_STATUS_NOT_FOUND
    MEMPOOL = PROTO_SWAP_STATUS_MEMPOOL
    CONFIRMED = PROTO_SWAP_STATUS_CONFIRMED


__all__ = ["SwapStatus"]
