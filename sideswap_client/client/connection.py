"""Protocol client: inbound listener, correlated requests, and session state."""

from __future__ import annotations

import asyncio
import logging
import contextlib

from sideswap_client.protocol.codec import decode, encode, render
from sideswap_client.config.swap import DEFAULT_REQUEST_TIMEOUT_S
from sideswap_client.config.protocol import PROTO_NOTIF_BALANCES
from sideswap_client.protocol.registry import CorrelationRegistry
from sideswap_client.protocol.dispatcher import NotificationDispatcher
from sideswap_client.errors import RequestTimeoutError, TransportClosedError
from sideswap_client.transport import (
    Transport,
    TransportFrame,
    TransportEvent,
    TransportFailed,
    TransportConnected,
    TransportDisconnected,
)
from sideswap_client.protocol.messages import (
    Swap,
    Response,
    Notification,
    ErrorMessage,
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

logger = logging.getLogger(__name__)

_LISTENER_STOP_TIMEOUT_S = 2.0


class ProtocolClient:
    """One logical SideSwap session over a single transport.

    The listener task drains transport events and routes each decoded frame:
    responses and errors go to the correlation registry, notifications to the
    dispatcher. Requests suspend only on their own handle, so the listener
    keeps running while a caller awaits.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
        registry: CorrelationRegistry | None = None,
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        self.transport = transport
        self.request_timeout_s = float(request_timeout_s)
        self.registry = registry or CorrelationRegistry()
        self.dispatcher = dispatcher or NotificationDispatcher()

        # Session state, replaced wholesale on each update.
        self.address: str | None = None
        self.balances: BalanceSnapshot = {}
        self.swaps: dict[str, Swap] = {}

        self.decode_failures: int = 0
        self.connected = asyncio.Event()
        self.disconnected = asyncio.Event()
        self.disconnect_reason: str | None = None
        self._listener: asyncio.Task | None = None

        self.dispatcher.on(PROTO_NOTIF_BALANCES, self._on_balances)

    # ---- lifecycle ----

    async def start(self) -> asyncio.Task:
        await self.transport.connect()
        if self._listener is None:
            self._listener = asyncio.create_task(self.run_listener())
        return self._listener

    async def stop(self, reason: str = "client shutdown") -> None:
        await self.transport.close()
        listener = self._listener
        self._listener = None
        if listener is not None and not listener.done():
            try:
                await asyncio.wait_for(asyncio.shield(listener), timeout=_LISTENER_STOP_TIMEOUT_S)
            except TimeoutError:
                listener.cancel()
                with contextlib.suppress(asyncio.CancelledError, Exception):
                    await listener
        self._mark_disconnected(reason)

    async def run_listener(self) -> None:
        try:
            async for event in self.transport.events():
                self.handle_event(event)
        finally:
            self._mark_disconnected(self.disconnect_reason or "event stream ended")

    def handle_event(self, event: TransportEvent) -> None:
        if isinstance(event, TransportFrame):
            self.handle_frame(event.data)
            return
        if isinstance(event, TransportConnected):
            logger.info("Connected to SideSwap at %s", event.url)
            self.connected.set()
            return
        if isinstance(event, TransportFailed):
            logger.error("Transport error: %s", event.detail)
            return
        if isinstance(event, TransportDisconnected):
            logger.warning("Disconnected from SideSwap: %s", event.reason)
            self._mark_disconnected(event.reason)
            return

    def _mark_disconnected(self, reason: str) -> None:
        if self.disconnected.is_set():
            return
        self.disconnect_reason = reason
        self.connected.clear()
        self.disconnected.set()
        self.registry.abandon_all(f"transport disconnected: {reason}")

    # ---- inbound ----

    def handle_frame(self, raw: bytes | str) -> ParsedMessage:
        logger.info("recv:\n%s", render(raw))
        msg = decode(raw)

        if isinstance(msg, DecodeFailure):
            self.decode_failures += 1
            logger.warning("dropping undecodable frame: %s", msg.reason)
            return msg

        if isinstance(msg, Notification):
            self.dispatcher.dispatch(msg.kind, msg.data)
            return msg

        if isinstance(msg, Response):
            if self.registry.resolve(msg.id, msg.payload):
                self._observe_response(msg.payload)
            return msg

        if isinstance(msg, ErrorMessage):
            logger.error(
                "server error (request %s): %s [code=%s]",
                msg.id,
                msg.error.text,
                msg.error.code,
            )
            if msg.error.details:
                logger.error("error details:\n%s", render(msg.error.details))
            self.registry.resolve(msg.id, msg.error)
            return msg

        return msg

    def _observe_response(self, payload: ResponsePayload) -> None:
        if isinstance(payload, NewAddressResponse):
            self.address = payload.address
        elif isinstance(payload, GetSwapsResponse):
            for swap in payload.swaps:
                self.swaps[swap.txid] = swap

    def _on_balances(self, snapshot: BalanceSnapshot) -> None:
        self.balances = dict(snapshot)
        if not self.balances:
            logger.warning("No balances available")
            return
        for asset, amount in self.balances.items():
            logger.info("balance %s: %s", asset, amount)

    # ---- outbound ----

    async def request(self, payload: RequestPayload, *, timeout_s: float | None = None) -> ResponsePayload:
        if self.disconnected.is_set():
            raise TransportClosedError(reason=self.disconnect_reason or "disconnected")

        timeout = self.request_timeout_s if timeout_s is None else float(timeout_s)
        request_id, future = self.registry.register(payload)
        frame = encode(RequestEnvelope(id=request_id, payload=payload))
        logger.info("send:\n%s", render(frame))

        try:
            await self.transport.send(frame)
            return await asyncio.wait_for(future, timeout=timeout)
        except TimeoutError:
            raise RequestTimeoutError(request_id=request_id, tag=payload.tag, timeout_s=timeout) from None
        finally:
            # No-op once resolved; otherwise a late answer becomes an unmatched anomaly.
            self.registry.abandon(request_id, "no longer awaited")

    async def new_address(self, *, timeout_s: float | None = None) -> NewAddressResponse:
        logger.info("Requesting new address...")
        return await self.request(NewAddressRequest(), timeout_s=timeout_s)

    async def get_quote(
        self,
        send_asset: str,
        send_amount: int | float,
        recv_asset: str,
        receive_address: str,
        *,
        timeout_s: float | None = None,
    ) -> GetQuoteResponse:
        logger.info("Requesting quote: %s %s -> %s", send_amount, send_asset, recv_asset)
        payload = GetQuoteRequest(
            send_asset=send_asset,
            send_amount=send_amount,
            recv_asset=recv_asset,
            receive_address=receive_address,
        )
        return await self.request(payload, timeout_s=timeout_s)

    async def accept_quote(self, quote_id: int, *, timeout_s: float | None = None) -> AcceptQuoteResponse:
        logger.info("Accepting quote %s...", quote_id)
        return await self.request(AcceptQuoteRequest(quote_id=quote_id), timeout_s=timeout_s)

    async def get_swaps(self, *, timeout_s: float | None = None) -> GetSwapsResponse:
        logger.info("Checking swaps status...")
        return await self.request(GetSwapsRequest(), timeout_s=timeout_s)


__all__ = ["ProtocolClient"]
