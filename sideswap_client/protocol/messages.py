"""Typed SideSwap protocol messages (dataclasses only).

Requests and responses are closed tagged unions keyed by the payload tag
(`NewAddress`, `GetQuote`, `AcceptQuote`, `GetSwaps`). Inbound frames decode
into exactly one of `Response`, `ErrorMessage`, `Notification` or
`DecodeFailure`.
"""

from __future__ import annotations

from typing import Any, ClassVar
from dataclasses import dataclass

from sideswap_client.config.protocol import (
    PROTO_TAG_GET_QUOTE,
    PROTO_TAG_GET_SWAPS,
    PROTO_TAG_NEW_ADDRESS,
    PROTO_TAG_ACCEPT_QUOTE,
)

from .status import SwapStatus

Amount = int | float
BalanceSnapshot = dict[str, Amount]


# ---- requests ----


@dataclass(frozen=True, slots=True)
class NewAddressRequest:
    tag: ClassVar[str] = PROTO_TAG_NEW_ADDRESS

    def fields(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True, slots=True)
class GetQuoteRequest:
    tag: ClassVar[str] = PROTO_TAG_GET_QUOTE

    send_asset: str
    send_amount: Amount
    recv_asset: str
    receive_address: str

    def fields(self) -> dict[str, Any]:
        return {
            "send_asset": self.send_asset,
            "send_amount": self.send_amount,
            "recv_asset": self.recv_asset,
            "receive_address": self.receive_address,
        }


@dataclass(frozen=True, slots=True)
class AcceptQuoteRequest:
    tag: ClassVar[str] = PROTO_TAG_ACCEPT_QUOTE

    quote_id: int

    def fields(self) -> dict[str, Any]:
        return {"quote_id": self.quote_id}


@dataclass(frozen=True, slots=True)
class GetSwapsRequest:
    tag: ClassVar[str] = PROTO_TAG_GET_SWAPS

    def fields(self) -> dict[str, Any]:
        return {}


RequestPayload = NewAddressRequest | GetQuoteRequest | AcceptQuoteRequest | GetSwapsRequest


@dataclass(frozen=True, slots=True)
class RequestEnvelope:
    id: int
    payload: RequestPayload


# ---- responses ----


@dataclass(frozen=True, slots=True)
class Swap:
    txid: str
    status: SwapStatus


@dataclass(frozen=True, slots=True)
class NewAddressResponse:
    tag: ClassVar[str] = PROTO_TAG_NEW_ADDRESS

    address: str


@dataclass(frozen=True, slots=True)
class GetQuoteResponse:
    tag: ClassVar[str] = PROTO_TAG_GET_QUOTE

    quote_id: int
    recv_amount: Amount
    ttl: Amount
    txid: str


@dataclass(frozen=True, slots=True)
class AcceptQuoteResponse:
    tag: ClassVar[str] = PROTO_TAG_ACCEPT_QUOTE

    txid: str


@dataclass(frozen=True, slots=True)
class GetSwapsResponse:
    tag: ClassVar[str] = PROTO_TAG_GET_SWAPS

    swaps: tuple[Swap, ...]

    def find(self, txid: str) -> Swap | None:
        for swap in self.swaps:
            if swap.txid == txid:
                return swap
        return None


ResponsePayload = NewAddressResponse | GetQuoteResponse | AcceptQuoteResponse | GetSwapsResponse


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    id: int | None
    text: str
    code: str
    details: Any = None


# ---- parsed inbound frames ----


@dataclass(frozen=True, slots=True)
class Response:
    id: int
    payload: ResponsePayload


@dataclass(frozen=True, slots=True)
class ErrorMessage:
    id: int | None
    error: ErrorPayload


@dataclass(frozen=True, slots=True)
class Notification:
    kind: str
    data: Any


@dataclass(frozen=True, slots=True)
class DecodeFailure:
    reason: str
    raw: str = ""


ParsedMessage = Response | ErrorMessage | Notification | DecodeFailure

__all__ = [
    "AcceptQuoteRequest",
    "AcceptQuoteResponse",
    "Amount",
    "BalanceSnapshot",
    "DecodeFailure",
    "ErrorMessage",
    "ErrorPayload",
    "GetQuoteRequest",
    "GetQuoteResponse",
    "GetSwapsRequest",
    "GetSwapsResponse",
    "NewAddressRequest",
    "NewAddressResponse",
    "Notification",
    "ParsedMessage",
    "RequestEnvelope",
    "RequestPayload",
    "Response",
    "ResponsePayload",
    "Swap",
    "SwapStatus",
]
