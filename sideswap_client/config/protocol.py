"""SideSwap wire protocol keys and tags."""

from __future__ import annotations

# Envelope discriminants (top level)
PROTO_KEY_REQUEST = "Req"
PROTO_KEY_RESPONSE = "Resp"
PROTO_KEY_NOTIFICATION = "Notif"
PROTO_KEY_ERROR = "Error"

# Envelope body keys
PROTO_KEY_ID = "id"
PROTO_KEY_REQ = "req"
PROTO_KEY_RESP = "resp"
PROTO_KEY_NOTIF = "notif"
PROTO_KEY_ERR = "err"

# Error body keys
PROTO_KEY_ERR_TEXT = "text"
PROTO_KEY_ERR_CODE = "code"
PROTO_KEY_ERR_DETAILS = "details"

# Payload tags (requests and responses share them)
PROTO_TAG_NEW_ADDRESS = "NewAddress"
PROTO_TAG_GET_QUOTE = "GetQuote"
PROTO_TAG_ACCEPT_QUOTE = "AcceptQuote"
PROTO_TAG_GET_SWAPS = "GetSwaps"

# Notification kinds
PROTO_NOTIF_BALANCES = "Balances"

# Swap statuses
PROTO_SWAP_STATUS_NOT_FOUND = "NotFound"
PROTO_SWAP_STATUS_MEMPOOL = "Mempool"
PROTO_SWAP_STATUS_CONFIRMED = "Confirmed"

__all__ = [
    "PROTO_KEY_ERR",
    "PROTO_KEY_ERR_CODE",
    "PROTO_KEY_ERR_DETAILS",
    "PROTO_KEY_ERR_TEXT",
    "PROTO_KEY_ERROR",
    "PROTO_KEY_ID",
    "PROTO_KEY_NOTIF",
    "PROTO_KEY_NOTIFICATION",
    "PROTO_KEY_REQ",
    "PROTO_KEY_REQUEST",
    "PROTO_KEY_RESP",
    "PROTO_KEY_RESPONSE",
    "PROTO_NOTIF_BALANCES",
    "PROTO_SWAP_STATUS_CONFIRMED",
    "PROTO_SWAP_STATUS_MEMPOOL",
    "PROTO_SWAP_STATUS_NOT_FOUND",
    "PROTO_TAG_ACCEPT_QUOTE",
    "PROTO_TAG_GET_QUOTE",
    "PROTO_TAG_GET_SWAPS",
    "PROTO_TAG_NEW_ADDRESS",
]
