from __future__ import annotations

import sys
import asyncio
from typing import Any
from pathlib import Path

import orjson
import pytest

from sideswap_client.swap import Decider
from sideswap_client.errors import TransportClosedError
from sideswap_client.transport import (
    Transport,
    TransportFrame,
    TransportConnected,
    TransportDisconnected,
)
from sideswap_client.state.settings import SwapSettings


def pytest_configure() -> None:
    # Keep `import sideswap_client...` and `import linting...` working from the repo root.
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


def request_parts(msg: dict[str, Any]) -> tuple[int, str, dict[str, Any]]:
    req = msg["Req"]
    ((tag, fields),) = req["req"].items()
    return req["id"], tag, fields


class FakeTransport(Transport):
    """In-memory transport: records sent frames, replays pushed frames as events."""

    def __init__(self, responder=None) -> None:
        self.responder = responder
        self.sent: list[dict[str, Any]] = []
        self.connect_calls = 0
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue()

    @property
    def sent_tags(self) -> list[str]:
        return [request_parts(msg)[1] for msg in self.sent]

    async def connect(self) -> None:
        self.connect_calls += 1

    async def send(self, frame: bytes) -> None:
        if self.closed:
            raise TransportClosedError(reason="fake transport closed")
        msg = orjson.loads(frame)
        self.sent.append(msg)
        if self.responder is not None:
            for item in self.responder(msg):
                self.push(item)

    def push(self, item: Any) -> None:
        if isinstance(item, TransportDisconnected | bytes | str):
            self._queue.put_nowait(item)
        else:
            self._queue.put_nowait(orjson.dumps(item))

    def drop(self, reason: str = "server went away") -> None:
        self.push(TransportDisconnected(reason=reason))

    async def wait_sent(self, count: int, timeout: float = 1.0) -> None:
        async with asyncio.timeout(timeout):
            while len(self.sent) < count:
                await asyncio.sleep(0.005)

    async def events(self):
        yield TransportConnected(url="fake://sideswap")
        while True:
            item = await self._queue.get()
            if item is None:
                yield TransportDisconnected(reason="closed by client")
                return
            if isinstance(item, TransportDisconnected):
                yield item
                return
            yield TransportFrame(data=item)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._queue.put_nowait(None)


class FakeSideSwap:
    """Scripted SideSwap API answering requests the way the real service does.

    `balance_pushes[i]` is the Balances snapshot pushed after the i-th
    NewAddress (None = no push; the last entry repeats). `statuses[i]` is the
    status of the accepted swap on the i-th GetSwaps ("absent" = not listed,
    None = no reply at all).
    """

    def __init__(self) -> None:
        self.address = "lq1qqfakeaddress"
        self.balance_pushes: list[dict[str, Any] | None] = [{"DePix": 5, "L-BTC": 0}]
        self.balances_before_address = False
        self.quote = {"quote_id": 42, "recv_amount": 1500, "ttl": 30000, "txid": "quote-txid"}
        self.accept_txid = "swap-txid-1"
        self.statuses: list[str | None] = ["Confirmed"]
        self.errors: dict[str, dict[str, Any]] = {}
        self.silent: set[str] = set()
        self.drop_on: set[str] = set()
        self.calls: dict[str, int] = {}

    def __call__(self, msg: dict[str, Any]) -> list[Any]:
        request_id, tag, fields = request_parts(msg)
        index = self.calls.get(tag, 0)
        self.calls[tag] = index + 1

        if tag in self.drop_on:
            return [TransportDisconnected(reason="server went away")]
        if tag in self.silent:
            return []
        if tag in self.errors:
            return [{"Error": {"id": request_id, "err": self.errors[tag]}}]

        if tag == "NewAddress":
            frames: list[Any] = [self._resp(request_id, tag, {"address": self.address})]
            snapshot = self.balance_pushes[min(index, len(self.balance_pushes) - 1)]
            if snapshot is not None:
                notif = {"Notif": {"notif": {"Balances": {"balances": snapshot}}}}
                if self.balances_before_address:
                    frames.insert(0, notif)
                else:
                    frames.append(notif)
            return frames
        if tag == "GetQuote":
            return [self._resp(request_id, tag, dict(self.quote))]
        if tag == "AcceptQuote":
            return [self._resp(request_id, tag, {"txid": self.accept_txid})]
        if tag == "GetSwaps":
            status = self.statuses[min(index, len(self.statuses) - 1)]
            if status is None:
                return []
            swaps = [] if status == "absent" else [{"txid": self.accept_txid, "status": status}]
            return [self._resp(request_id, tag, {"swaps": swaps})]
        raise AssertionError(f"unexpected request {tag}: {fields}")

    @staticmethod
    def _resp(request_id: int, tag: str, fields: dict[str, Any]) -> dict[str, Any]:
        return {"Resp": {"id": request_id, "resp": {tag: fields}}}


class ScriptedDecider(Decider):
    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.questions: list[str] = []

    async def confirm(self, question: str) -> bool:
        self.questions.append(question)
        return self.answers.pop(0) if self.answers else False


@pytest.fixture
def server() -> FakeSideSwap:
    return FakeSideSwap()


@pytest.fixture
def transport(server: FakeSideSwap) -> FakeTransport:
    return FakeTransport(responder=server)


@pytest.fixture
def bare_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def decider_factory():
    return ScriptedDecider


@pytest.fixture
def swap_settings() -> SwapSettings:
    return SwapSettings(
        send_asset="DePix",
        send_amount=1,
        recv_asset="L-BTC",
        poll_interval_s=0.0,
        max_poll_attempts=10,
        request_timeout_s=1.0,
        balance_timeout_s=0.5,
        max_balance_refetches=3,
    )
