from .codec import decode, encode, render
from .status import SwapStatus
from .registry import PendingRequest, CorrelationRegistry
from .dispatcher import NotificationHandler, NotificationDispatcher
from .messages import (
    Swap,
    Response,
    Notification,
    ErrorMessage,
    ErrorPayload,
    DecodeFailure,
    ParsedMessage,
    BalanceSnapshot,
    GetQuoteRequest,
    GetSwapsRequest,
    RequestEnvelope,
    RequestPayload,
    GetQuoteResponse,
    GetSwapsResponse,
    ResponsePayload,
    NewAddressRequest,
    AcceptQuoteRequest,
    NewAddressResponse,
    AcceptQuoteResponse,
)

__all__ = [
    "AcceptQuoteRequest",
    "AcceptQuoteResponse",
    "BalanceSnapshot",
    "CorrelationRegistry",
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
    "NotificationDispatcher",
    "NotificationHandler",
    "ParsedMessage",
    "PendingRequest",
    "RequestEnvelope",
    "RequestPayload",
    "Response",
    "ResponsePayload",
    "Swap",
    "SwapStatus",
    "decode",
    "encode",
    "render",
]
