"""Wire codec for the SideSwap JSON envelope.

Outgoing requests serialize as ``{"Req": {"id": n, "req": {"<Tag>": {...}}}}``.
Inbound frames are classified by their top-level discriminant and then by the
payload tag or notification kind. Decoding never raises: anything malformed or
unrecognized comes back as a `DecodeFailure` so the listener can log it and
keep draining frames.
"""

from __future__ import annotations

from typing import Any
from collections.abc import Callable

import orjson

from sideswap_client.config.protocol import (
    PROTO_KEY_ID,
    PROTO_KEY_ERR,
    PROTO_KEY_REQ,
    PROTO_KEY_RESP,
    PROTO_KEY_ERROR,
    PROTO_KEY_NOTIF,
    PROTO_KEY_REQUEST,
    PROTO_KEY_ERR_CODE,
    PROTO_KEY_ERR_TEXT,
    PROTO_KEY_RESPONSE,
    PROTO_TAG_GET_QUOTE,
    PROTO_TAG_GET_SWAPS,
    PROTO_KEY_ERR_DETAILS,
    PROTO_NOTIF_BALANCES,
    PROTO_TAG_NEW_ADDRESS,
    PROTO_KEY_NOTIFICATION,
    PROTO_TAG_ACCEPT_QUOTE,
)

from .status import SwapStatus
from .messages import (
    Swap,
    Response,
    Notification,
    ErrorMessage,
    ErrorPayload,
    DecodeFailure,
    ParsedMessage,
    BalanceSnapshot,
    GetQuoteResponse,
    GetSwapsResponse,
    RequestEnvelope,
    ResponsePayload,
    NewAddressResponse,
    AcceptQuoteResponse,
)

_RAW_PREVIEW_CHARS = 512


class _FieldError(ValueError):
    pass


def encode(envelope: RequestEnvelope) -> bytes:
    payload = envelope.payload
    message = {
        PROTO_KEY_REQUEST: {
            PROTO_KEY_ID: envelope.id,
            PROTO_KEY_REQ: {payload.tag: payload.fields()},
        }
    }
    return orjson.dumps(message)


def render(raw: bytes | str | Any) -> str:
    """Readable (indented) form of a frame or JSON-able object for echoing."""
    obj = raw
    if isinstance(raw, bytes | bytearray | str):
        try:
            obj = orjson.loads(raw)
        except orjson.JSONDecodeError:
            return raw.decode("utf-8", errors="replace") if isinstance(raw, bytes | bytearray) else raw
    try:
        return orjson.dumps(obj, option=orjson.OPT_INDENT_2).decode("utf-8")
    except TypeError:
        return repr(obj)


# ---- field helpers ----


def _require_dict(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise _FieldError(f"{what} must be an object")
    return value


def _require_str(fields: dict[str, Any], key: str) -> str:
    value = fields.get(key)
    if not isinstance(value, str):
        raise _FieldError(f"field '{key}' must be a string")
    return value


def _require_int(fields: dict[str, Any], key: str) -> int:
    value = fields.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise _FieldError(f"field '{key}' must be an integer")
    return value


def _require_number(fields: dict[str, Any], key: str) -> int | float:
    value = fields.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise _FieldError(f"field '{key}' must be a number")
    return value


def _single_entry(value: Any, what: str) -> tuple[str, Any]:
    body = _require_dict(value, what)
    if len(body) != 1:
        raise _FieldError(f"{what} must hold exactly one tag, got {len(body)}")
    return next(iter(body.items()))


def _optional_id(body: dict[str, Any]) -> int | None:
    value = body.get(PROTO_KEY_ID)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise _FieldError(f"field '{PROTO_KEY_ID}' must be an integer")
    return value


# ---- payload decoders ----


def _decode_new_address(fields: dict[str, Any]) -> NewAddressResponse:
    return NewAddressResponse(address=_require_str(fields, "address"))


def _decode_get_quote(fields: dict[str, Any]) -> GetQuoteResponse:
    return GetQuoteResponse(
        quote_id=_require_int(fields, "quote_id"),
        recv_amount=_require_number(fields, "recv_amount"),
        ttl=_require_number(fields, "ttl"),
        txid=_require_str(fields, "txid"),
    )


def _decode_accept_quote(fields: dict[str, Any]) -> AcceptQuoteResponse:
    return AcceptQuoteResponse(txid=_require_str(fields, "txid"))


def _decode_swap(item: Any) -> Swap:
    fields = _require_dict(item, "swap")
    status_raw = _require_str(fields, "status")
    try:
        status = SwapStatus(status_raw)
    except ValueError as exc:
        raise _FieldError(f"unknown swap status '{status_raw}'") from exc
    return Swap(txid=_require_str(fields, "txid"), status=status)


def _decode_get_swaps(fields: dict[str, Any]) -> GetSwapsResponse:
    swaps = fields.get("swaps")
    if not isinstance(swaps, list):
        raise _FieldError("field 'swaps' must be a list")
    return GetSwapsResponse(swaps=tuple(_decode_swap(item) for item in swaps))


def _decode_balances(fields: dict[str, Any]) -> BalanceSnapshot:
    balances = _require_dict(fields.get("balances"), "field 'balances'")
    snapshot: BalanceSnapshot = {}
    for asset, amount in balances.items():
        if isinstance(amount, bool) or not isinstance(amount, int | float) or amount < 0:
            raise _FieldError(f"balance for '{asset}' must be a non-negative number")
        snapshot[asset] = amount
    return snapshot


RESPONSE_DECODERS: dict[str, Callable[[dict[str, Any]], ResponsePayload]] = {
    PROTO_TAG_NEW_ADDRESS: _decode_new_address,
    PROTO_TAG_GET_QUOTE: _decode_get_quote,
    PROTO_TAG_ACCEPT_QUOTE: _decode_accept_quote,
    PROTO_TAG_GET_SWAPS: _decode_get_swaps,
}

NOTIFICATION_DECODERS: dict[str, Callable[[dict[str, Any]], Any]] = {
    PROTO_NOTIF_BALANCES: _decode_balances,
}


# ---- envelope decoders ----


def _decode_response(body: dict[str, Any]) -> Response:
    request_id = _optional_id(body)
    if request_id is None:
        raise _FieldError("response is missing its id")
    tag, fields = _single_entry(body.get(PROTO_KEY_RESP), f"field '{PROTO_KEY_RESP}'")
    decoder = RESPONSE_DECODERS.get(tag)
    if decoder is None:
        raise _FieldError(f"unknown response tag '{tag}'")
    return Response(id=request_id, payload=decoder(_require_dict(fields, f"response '{tag}'")))


def _decode_notification(body: dict[str, Any]) -> Notification:
    kind, fields = _single_entry(body.get(PROTO_KEY_NOTIF), f"field '{PROTO_KEY_NOTIF}'")
    decoder = NOTIFICATION_DECODERS.get(kind)
    if decoder is None:
        raise _FieldError(f"unknown notification kind '{kind}'")
    return Notification(kind=kind, data=decoder(_require_dict(fields, f"notification '{kind}'")))


def _decode_error(body: dict[str, Any]) -> ErrorMessage:
    request_id = _optional_id(body)
    err = _require_dict(body.get(PROTO_KEY_ERR), f"field '{PROTO_KEY_ERR}'")
    code = err.get(PROTO_KEY_ERR_CODE)
    if code is None:
        code = ""
    elif not isinstance(code, str):
        raise _FieldError(f"field '{PROTO_KEY_ERR_CODE}' must be a string")
    error = ErrorPayload(
        id=request_id,
        text=_require_str(err, PROTO_KEY_ERR_TEXT),
        code=code,
        details=err.get(PROTO_KEY_ERR_DETAILS),
    )
    return ErrorMessage(id=request_id, error=error)


ENVELOPE_DECODERS: dict[str, Callable[[dict[str, Any]], ParsedMessage]] = {
    PROTO_KEY_RESPONSE: _decode_response,
    PROTO_KEY_NOTIFICATION: _decode_notification,
    PROTO_KEY_ERROR: _decode_error,
}


def _preview(raw: bytes | str) -> str:
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes | bytearray) else str(raw)
    return text[:_RAW_PREVIEW_CHARS]


def decode(raw: bytes | str) -> ParsedMessage:
    try:
        msg = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        return DecodeFailure(reason=f"invalid JSON: {exc}", raw=_preview(raw))

    try:
        kind, body = _single_entry(msg, "message")
        decoder = ENVELOPE_DECODERS.get(kind)
        if decoder is None:
            return DecodeFailure(reason=f"unknown envelope '{kind}'", raw=_preview(raw))
        return decoder(_require_dict(body, f"envelope '{kind}'"))
    except _FieldError as exc:
        return DecodeFailure(reason=str(exc), raw=_preview(raw))


__all__ = [
    "ENVELOPE_DECODERS",
    "NOTIFICATION_DECODERS",
    "RESPONSE_DECODERS",
    "decode",
    "encode",
    "render",
]
