"""WebSocket transport built on the `websockets` client."""

from __future__ import annotations

import logging
import contextlib
from collections.abc import AsyncIterator

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from sideswap_client.errors import TransportClosedError
from sideswap_client.state.settings import ConnectionSettings
from sideswap_client.config.websocket import WS_CLOSE_NORMAL_CODE, WS_CLOSE_NORMAL_REASON

from .base import Transport
from .events import TransportFrame, TransportEvent, TransportFailed, TransportConnected, TransportDisconnected

logger = logging.getLogger(__name__)


def _describe_close(ws) -> str:
    code = getattr(ws, "close_code", None)
    reason = (getattr(ws, "close_reason", None) or "").strip()
    if code is None:
        return "connection closed"
    return f"closed with code {code}: {reason}" if reason else f"closed with code {code}"


class WebSocketTransport(Transport):
    def __init__(self, settings: ConnectionSettings) -> None:
        self._settings = settings
        self._ws = None

    @property
    def url(self) -> str:
        return self._settings.url

    def _get_ws_options(self) -> dict:
        return {
            "ping_interval": self._settings.ping_interval_s,
            "ping_timeout": self._settings.ping_timeout_s,
            "open_timeout": self._settings.open_timeout_s,
            "max_size": self._settings.max_message_bytes,
        }

    async def connect(self) -> None:
        if self._ws is not None:
            return
        logger.info("Connecting to %s...", self.url)
        try:
            self._ws = await websockets.connect(self.url, **self._get_ws_options())
        except (WebSocketException, OSError, TimeoutError) as exc:
            raise TransportClosedError(reason=f"could not connect to {self.url}: {exc}") from exc

    async def send(self, frame: bytes) -> None:
        ws = self._ws
        if ws is None:
            raise TransportClosedError(reason="not connected")
        try:
            # SideSwap expects text frames.
            await ws.send(frame.decode("utf-8"))
        except ConnectionClosed as exc:
            raise TransportClosedError(reason=str(exc)) from exc

    async def events(self) -> AsyncIterator[TransportEvent]:
        ws = self._ws
        if ws is None:
            yield TransportDisconnected(reason="not connected")
            return

        yield TransportConnected(url=self.url)
        try:
            async for raw in ws:
                yield TransportFrame(data=raw)
        except ConnectionClosed:
            yield TransportFailed(detail=_describe_close(ws))
        except (WebSocketException, OSError) as exc:
            yield TransportFailed(detail=f"{type(exc).__name__}: {exc}")
        yield TransportDisconnected(reason=_describe_close(ws))

    async def close(self) -> None:
        ws = self._ws
        if ws is None:
            return
        self._ws = None
        with contextlib.suppress(Exception):
            await ws.close(code=WS_CLOSE_NORMAL_CODE, reason=WS_CLOSE_NORMAL_REASON)


__all__ = ["WebSocketTransport"]
