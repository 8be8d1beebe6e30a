"""Swap workflow state machine.

Drives one swap through address → balance → quote → user decision → accept →
confirmation polling. Every suspension point (request round-trip, balance
push, user decision, poll delay) is raced against caller cancellation and
transport loss, so the workflow always ends in a terminal phase instead of
hanging or raising.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from dataclasses import dataclass
from collections.abc import Callable, Awaitable

from sideswap_client.state.settings import SwapSettings
from sideswap_client.client.connection import ProtocolClient
from sideswap_client.protocol.status import SwapStatus
from sideswap_client.config.protocol import PROTO_NOTIF_BALANCES
from sideswap_client.state.session import SwapOutcome, SwapSession
from sideswap_client.state.phase import ALLOWED_TRANSITIONS, SwapPhase
from sideswap_client.protocol.messages import BalanceSnapshot, GetQuoteResponse
from sideswap_client.errors import (
    ProtocolError,
    RequestTimeoutError,
    TransportClosedError,
    RequestCancelledError,
)

from .decisions import Decider

logger = logging.getLogger(__name__)

QUESTION_REFETCH_EMPTY = "No balances available. Would you like to refetch?"
QUESTION_REFETCH_INSUFFICIENT = "Would you like to refetch balances?"
QUESTION_ACCEPT_QUOTE = "Do you want to accept this quote?"


@dataclass(frozen=True, slots=True)
class _Finished(Exception):
    phase: SwapPhase
    reason: str
    code: str | None = None
    text: str | None = None


def _failure(exc: BaseException) -> _Finished:
    if isinstance(exc, ProtocolError):
        if exc.is_quote_error:
            reason = f"Failed to get a valid quote: {exc.text}"
            return _Finished(SwapPhase.FAILED, reason, code="quote_error", text=exc.text)
        return _Finished(SwapPhase.FAILED, f"server error: {exc.text}", code=exc.code or None, text=exc.text)
    if isinstance(exc, RequestTimeoutError):
        return _Finished(SwapPhase.FAILED, str(exc), code="request_timeout")
    if isinstance(exc, RequestCancelledError):
        return _Finished(SwapPhase.FAILED, str(exc), code="request_abandoned")
    if isinstance(exc, TransportClosedError):
        return _Finished(SwapPhase.FAILED, str(exc), code="transport_closed")
    return _Finished(SwapPhase.FAILED, f"unexpected error: {exc}", code="internal_error")


class SwapStateMachine:
    def __init__(
        self,
        client: ProtocolClient,
        decider: Decider,
        settings: SwapSettings,
        *,
        on_balances: Callable[[BalanceSnapshot], None] | None = None,
        on_quote: Callable[[GetQuoteResponse], None] | None = None,
    ) -> None:
        self._client = client
        self._decider = decider
        self._settings = settings
        # Presentation hooks, called before the matching decision point.
        self._on_balances_known = on_balances
        self._on_quote = on_quote
        self.session = SwapSession(
            send_asset=settings.send_asset,
            send_amount=settings.send_amount,
            recv_asset=settings.recv_asset,
        )
        self.history: list[SwapPhase] = [SwapPhase.IDLE]

        self._started = False
        self._cancel_event = asyncio.Event()
        self._cancel_reason = ""

        # Balance pushes buffered since the last NewAddress request.
        self._balance_event = asyncio.Event()
        self._buffered_balances: BalanceSnapshot | None = None

    @property
    def phase(self) -> SwapPhase:
        return self.session.phase

    def cancel(self, reason: str = "cancelled by caller") -> None:
        """Stop the workflow at its next suspension point (ends Rejected)."""
        if self._cancel_event.is_set():
            return
        self._cancel_reason = reason
        self._cancel_event.set()

    async def run(self) -> SwapOutcome:
        if self._started:
            raise RuntimeError("a SwapStateMachine drives a single swap; create a new one")
        self._started = True

        unsubscribe = self._client.dispatcher.on(PROTO_NOTIF_BALANCES, self._on_balances)
        try:
            await self._drive()
        except _Finished as finished:
            self._finish(finished)
        except asyncio.CancelledError:
            self._finish(_Finished(SwapPhase.REJECTED, "workflow task cancelled"))
            raise
        except Exception as exc:
            logger.exception("swap workflow crashed")
            self._finish(_failure(exc))
        finally:
            unsubscribe()
        return SwapOutcome.from_session(self.session)

    # ---- workflow steps ----

    async def _drive(self) -> None:
        await self._acquire_funded_address()
        quote = await self._request_quote()
        await self._await_acceptance(quote)
        txid = await self._accept(quote)
        await self._poll_confirmation(txid)

    async def _acquire_funded_address(self) -> None:
        session = self.session
        while True:
            self._transition(SwapPhase.AWAITING_ADDRESS)
            # Pushes that race ahead of the NewAddress response are kept and applied below.
            self._buffered_balances = None
            self._balance_event.clear()

            response = await self._call(self._client.new_address())
            session.address = response.address
            logger.info("New address generated: %s", response.address)

            self._transition(SwapPhase.AWAITING_BALANCE)
            balances = await self._wait_for_balances()
            session.balances = dict(balances or {})
            if self._on_balances_known is not None:
                self._on_balances_known(dict(session.balances))

            if balances and session.has_sufficient_balance():
                logger.info("Found sufficient balance for %s. Proceeding with swap...", session.send_asset)
                return

            if not balances:
                question = QUESTION_REFETCH_EMPTY
                logger.warning("No %s balance available at address %s", session.send_asset, session.address)
            else:
                question = QUESTION_REFETCH_INSUFFICIENT
                logger.error(
                    "Insufficient balance for %s. Required: %s, Available: %s",
                    session.send_asset,
                    session.send_amount,
                    session.available(),
                )

            shortfall = (
                f"insufficient {session.send_asset} balance "
                f"(required {session.send_amount}, available {session.available()})"
            )
            if session.balance_refetches >= self._settings.max_balance_refetches:
                raise _Finished(SwapPhase.REJECTED, f"{shortfall} after {session.balance_refetches} refetch(es)")
            if not await self._ask(question):
                raise _Finished(SwapPhase.REJECTED, f"{shortfall}; operation cancelled by user")
            session.balance_refetches += 1

    async def _wait_for_balances(self) -> BalanceSnapshot | None:
        if self._buffered_balances is None:
            try:
                await self._guard(self._balance_event.wait(), timeout=self._settings.balance_timeout_s)
            except TimeoutError:
                logger.warning("no balance notification within %.1fs", self._settings.balance_timeout_s)
                return None
        return self._buffered_balances

    async def _request_quote(self) -> GetQuoteResponse:
        session = self.session
        self._transition(SwapPhase.QUOTE_REQUESTED)
        quote = await self._call(
            self._client.get_quote(
                session.send_asset,
                session.send_amount,
                session.recv_asset,
                session.address or "",
            )
        )
        session.quote = quote
        return quote

    async def _await_acceptance(self, quote: GetQuoteResponse) -> None:
        self._transition(SwapPhase.AWAITING_USER_ACCEPTANCE)
        logger.info(
            "Quote %s received: you will get %s %s (ttl %s, txid %s)",
            quote.quote_id,
            quote.recv_amount,
            self.session.recv_asset,
            quote.ttl,
            quote.txid,
        )
        if self._on_quote is not None:
            self._on_quote(quote)
        if not await self._ask(QUESTION_ACCEPT_QUOTE):
            raise _Finished(SwapPhase.REJECTED, "quote rejected by user")

    async def _accept(self, quote: GetQuoteResponse) -> str:
        self._transition(SwapPhase.ACCEPT_REQUESTED)
        accepted = await self._call(self._client.accept_quote(quote.quote_id))
        self.session.txid = accepted.txid
        logger.info("Quote accepted! Transaction ID: %s", accepted.txid)
        self._transition(SwapPhase.POLLING_CONFIRMATION)
        return accepted.txid

    async def _poll_confirmation(self, txid: str) -> None:
        max_attempts = self._settings.max_poll_attempts
        for attempt in range(1, max_attempts + 1):
            self.session.poll_attempts = attempt
            logger.info("Checking swap status (attempt %d/%d)...", attempt, max_attempts)
            await self._guard(asyncio.sleep(self._settings.poll_interval_s))

            try:
                response = await self._guard(self._client.get_swaps(timeout_s=self._settings.request_timeout_s))
            except RequestTimeoutError as exc:
                logger.warning("%s; attempt %d/%d used", exc, attempt, max_attempts)
                continue
            except (ProtocolError, RequestCancelledError, TransportClosedError) as exc:
                raise self._failure_for(exc) from exc

            swap = response.find(txid)
            if swap is None or swap.status is SwapStatus.NOT_FOUND:
                logger.warning("Swap not found. It might take some time to appear in the system.")
                continue
            logger.info("Swap status: %s", swap.status)
            if swap.status is SwapStatus.CONFIRMED:
                raise _Finished(SwapPhase.CONFIRMED, "Swap completed successfully")
            logger.info("Swap is in mempool. Waiting for confirmation...")

        raise _Finished(SwapPhase.TIMED_OUT, f"Swap not confirmed after {max_attempts} attempts")

    # ---- suspension helpers ----

    def _on_balances(self, snapshot: BalanceSnapshot) -> None:
        self._buffered_balances = dict(snapshot)
        self._balance_event.set()

    async def _ask(self, question: str) -> bool:
        return bool(await self._guard(self._decider.confirm(question)))

    async def _call(self, request: Awaitable[Any]) -> Any:
        try:
            return await self._guard(request)
        except (ProtocolError, RequestTimeoutError, RequestCancelledError, TransportClosedError) as exc:
            raise self._failure_for(exc) from exc

    def _failure_for(self, exc: BaseException) -> _Finished:
        # Disconnect abandons every pending request; report the root cause.
        if isinstance(exc, RequestCancelledError) and self._client.disconnected.is_set():
            try:
                self._abort_if_stopped()
            except _Finished as finished:
                return finished
        return _failure(exc)

    def _abort_if_stopped(self) -> None:
        if self._cancel_event.is_set():
            raise _Finished(SwapPhase.REJECTED, f"cancelled: {self._cancel_reason}")
        if self._client.disconnected.is_set():
            raise _Finished(
                SwapPhase.FAILED,
                f"transport disconnected: {self._client.disconnect_reason}",
                code="transport_closed",
            )

    async def _guard(self, awaitable: Awaitable[Any], *, timeout: float | None = None) -> Any:
        """Await `awaitable` unless cancellation or transport loss comes first.

        Raises TimeoutError when `timeout` elapses; pending waiters are
        cancelled and awaited before returning so no timer outlives the call.
        """
        try:
            self._abort_if_stopped()
        except _Finished:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise

        work = asyncio.ensure_future(awaitable)
        cancel_wait = asyncio.create_task(self._cancel_event.wait())
        disconnect_wait = asyncio.create_task(self._client.disconnected.wait())
        waiters = {work, cancel_wait, disconnect_wait}
        try:
            done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in waiters:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*waiters, return_exceptions=True)

        if work in done:
            return work.result()
        if done:
            self._abort_if_stopped()
        raise TimeoutError

    def _transition(self, to: SwapPhase) -> None:
        current = self.session.phase
        if to not in ALLOWED_TRANSITIONS[current]:
            raise RuntimeError(f"illegal swap transition {current} -> {to}")
        logger.debug("swap phase %s -> %s", current, to)
        self.session.phase = to
        self.history.append(to)

    def _finish(self, finished: _Finished) -> None:
        session = self.session
        if session.phase.is_terminal:
            return
        self._transition(finished.phase)
        session.reason = finished.reason
        session.error_code = finished.code
        session.error_text = finished.text

        if finished.phase is SwapPhase.CONFIRMED:
            logger.info("%s (txid %s)", finished.reason, session.txid)
        elif finished.phase is SwapPhase.TIMED_OUT:
            logger.warning("%s. You can check its status later using GetSwaps.", finished.reason)
        elif finished.phase is SwapPhase.REJECTED:
            logger.warning("Swap cancelled: %s", finished.reason)
        else:
            logger.error("Swap failed: %s", finished.reason)


__all__ = ["SwapStateMachine"]
