from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

from sideswap_client.swap import Decider, SwapStateMachine
from sideswap_client.state import SwapPhase
from sideswap_client.client import ProtocolClient
from sideswap_client.protocol import SwapStatus
from sideswap_client.swap.machine import (
    QUESTION_ACCEPT_QUOTE,
    QUESTION_REFETCH_EMPTY,
    QUESTION_REFETCH_INSUFFICIENT,
)


class _BlockingDecider(Decider):
    def __init__(self) -> None:
        self.asked = asyncio.Event()

    async def confirm(self, question: str) -> bool:
        self.asked.set()
        await asyncio.Event().wait()
        return True


async def _run_swap(transport, decider, settings, *, request_timeout_s: float = 1.0):
    client = ProtocolClient(transport, request_timeout_s=request_timeout_s)
    await client.start()
    machine = SwapStateMachine(client, decider, settings)
    try:
        outcome = await asyncio.wait_for(machine.run(), timeout=5.0)
    finally:
        await client.stop()
    return machine, client, outcome


async def _wait_for_phase(machine: SwapStateMachine, phase: SwapPhase) -> None:
    async with asyncio.timeout(1.0):
        while machine.phase is not phase:
            await asyncio.sleep(0.005)


@pytest.mark.asyncio
async def test_happy_path_confirms(transport, server, decider_factory, swap_settings) -> None:
    decider = decider_factory(True)
    machine, client, outcome = await _run_swap(transport, decider, swap_settings)

    assert outcome.phase is SwapPhase.CONFIRMED
    assert outcome.succeeded
    assert outcome.txid == server.accept_txid
    assert outcome.quote.quote_id == 42
    assert outcome.poll_attempts == 1
    assert decider.questions == [QUESTION_ACCEPT_QUOTE]
    assert machine.history == [
        SwapPhase.IDLE,
        SwapPhase.AWAITING_ADDRESS,
        SwapPhase.AWAITING_BALANCE,
        SwapPhase.QUOTE_REQUESTED,
        SwapPhase.AWAITING_USER_ACCEPTANCE,
        SwapPhase.ACCEPT_REQUESTED,
        SwapPhase.POLLING_CONFIRMATION,
        SwapPhase.CONFIRMED,
    ]
    assert transport.sent_tags == ["NewAddress", "GetQuote", "AcceptQuote", "GetSwaps"]
    assert [msg["Req"]["id"] for msg in transport.sent] == [1, 2, 3, 4]
    assert transport.sent[1]["Req"]["req"]["GetQuote"] == {
        "send_asset": "DePix",
        "send_amount": 1,
        "recv_asset": "L-BTC",
        "receive_address": server.address,
    }
    assert transport.sent[2]["Req"]["req"]["AcceptQuote"] == {"quote_id": 42}
    assert client.swaps[server.accept_txid].status is SwapStatus.CONFIRMED
    assert client.dispatcher.subscriber_count("Balances") == 1


@pytest.mark.asyncio
async def test_polls_through_absent_and_mempool(transport, server, decider_factory, swap_settings) -> None:
    server.statuses = ["absent", "NotFound", "Mempool", "Confirmed"]
    _, _, outcome = await _run_swap(transport, decider_factory(True), swap_settings)

    assert outcome.phase is SwapPhase.CONFIRMED
    assert outcome.poll_attempts == 4


@pytest.mark.asyncio
async def test_times_out_after_poll_budget(transport, server, decider_factory, swap_settings) -> None:
    server.statuses = ["Mempool"]
    _, _, outcome = await _run_swap(transport, decider_factory(True), swap_settings)

    assert outcome.phase is SwapPhase.TIMED_OUT
    assert not outcome.succeeded
    assert outcome.poll_attempts == 10
    assert server.calls["GetSwaps"] == 10
    assert "10 attempts" in outcome.reason


@pytest.mark.asyncio
async def test_poll_request_timeout_counts_as_attempt(transport, server, decider_factory, swap_settings) -> None:
    server.statuses = [None, "Confirmed"]
    settings = replace(swap_settings, request_timeout_s=0.05)
    _, client, outcome = await _run_swap(transport, decider_factory(True), settings)

    assert outcome.phase is SwapPhase.CONFIRMED
    assert outcome.poll_attempts == 2
    assert client.registry.pending_count == 0


@pytest.mark.asyncio
async def test_insufficient_balance_declined_sends_nothing_more(
    transport, server, decider_factory, swap_settings
) -> None:
    server.balance_pushes = [{"DePix": 0.5}]
    decider = decider_factory(False)
    _, _, outcome = await _run_swap(transport, decider, swap_settings)

    assert outcome.phase is SwapPhase.REJECTED
    assert "insufficient DePix balance" in outcome.reason
    assert decider.questions == [QUESTION_REFETCH_INSUFFICIENT]
    assert transport.sent_tags == ["NewAddress"]


@pytest.mark.asyncio
async def test_empty_balances_ask_the_no_balance_question(transport, server, decider_factory, swap_settings) -> None:
    server.balance_pushes = [{}]
    decider = decider_factory(False)
    _, _, outcome = await _run_swap(transport, decider, swap_settings)

    assert outcome.phase is SwapPhase.REJECTED
    assert decider.questions == [QUESTION_REFETCH_EMPTY]


@pytest.mark.asyncio
async def test_missing_balance_push_times_out_to_refetch_prompt(
    transport, server, decider_factory, swap_settings
) -> None:
    server.balance_pushes = [None]
    settings = replace(swap_settings, balance_timeout_s=0.05)
    decider = decider_factory(False)
    _, _, outcome = await _run_swap(transport, decider, settings)

    assert outcome.phase is SwapPhase.REJECTED
    assert decider.questions == [QUESTION_REFETCH_EMPTY]


@pytest.mark.asyncio
async def test_refetch_requests_new_address_then_proceeds(transport, server, decider_factory, swap_settings) -> None:
    server.balance_pushes = [{"DePix": 0}, {"DePix": 2}]
    decider = decider_factory(True, True)
    machine, _, outcome = await _run_swap(transport, decider, swap_settings)

    assert outcome.phase is SwapPhase.CONFIRMED
    assert server.calls["NewAddress"] == 2
    assert decider.questions == [QUESTION_REFETCH_INSUFFICIENT, QUESTION_ACCEPT_QUOTE]
    assert machine.session.balance_refetches == 1
    assert machine.history[:5] == [
        SwapPhase.IDLE,
        SwapPhase.AWAITING_ADDRESS,
        SwapPhase.AWAITING_BALANCE,
        SwapPhase.AWAITING_ADDRESS,
        SwapPhase.AWAITING_BALANCE,
    ]


@pytest.mark.asyncio
async def test_refetches_are_capped(transport, server, decider_factory, swap_settings) -> None:
    server.balance_pushes = [{}]
    settings = replace(swap_settings, max_balance_refetches=2)
    decider = decider_factory(True, True, True, True)
    _, _, outcome = await _run_swap(transport, decider, settings)

    assert outcome.phase is SwapPhase.REJECTED
    assert server.calls["NewAddress"] == 3
    assert len(decider.questions) == 2


@pytest.mark.asyncio
async def test_balances_pushed_before_address_are_applied(
    transport, server, decider_factory, swap_settings
) -> None:
    server.balances_before_address = True
    _, _, outcome = await _run_swap(transport, decider_factory(True), swap_settings)

    assert outcome.phase is SwapPhase.CONFIRMED
    assert server.calls["NewAddress"] == 1


@pytest.mark.asyncio
async def test_quote_error_fails_without_accepting(transport, server, decider_factory, swap_settings) -> None:
    server.errors["GetQuote"] = {"text": "Quote error: not enough liquidity", "code": "server_error"}
    decider = decider_factory(True)
    _, _, outcome = await _run_swap(transport, decider, swap_settings)

    assert outcome.phase is SwapPhase.FAILED
    assert outcome.error_code == "quote_error"
    assert outcome.error_text == "Quote error: not enough liquidity"
    assert decider.questions == []
    assert "AcceptQuote" not in transport.sent_tags


@pytest.mark.asyncio
async def test_other_server_error_fails_with_its_code(transport, server, decider_factory, swap_settings) -> None:
    server.errors["AcceptQuote"] = {"text": "quote expired", "code": "expired"}
    _, _, outcome = await _run_swap(transport, decider_factory(True), swap_settings)

    assert outcome.phase is SwapPhase.FAILED
    assert outcome.error_code == "expired"
    assert outcome.txid is None


@pytest.mark.asyncio
async def test_declined_quote_is_rejected(transport, server, decider_factory, swap_settings) -> None:
    _, _, outcome = await _run_swap(transport, decider_factory(False), swap_settings)

    assert outcome.phase is SwapPhase.REJECTED
    assert outcome.quote is not None
    assert transport.sent_tags == ["NewAddress", "GetQuote"]


@pytest.mark.asyncio
async def test_request_timeout_outside_polling_fails(transport, server, decider_factory, swap_settings) -> None:
    server.silent.add("NewAddress")
    _, _, outcome = await _run_swap(transport, decider_factory(True), swap_settings, request_timeout_s=0.05)

    assert outcome.phase is SwapPhase.FAILED
    assert outcome.error_code == "request_timeout"


@pytest.mark.asyncio
async def test_transport_loss_fails_in_flight_swap(transport, server, decider_factory, swap_settings) -> None:
    server.drop_on.add("AcceptQuote")
    _, client, outcome = await _run_swap(transport, decider_factory(True), swap_settings, request_timeout_s=5.0)

    assert outcome.phase is SwapPhase.FAILED
    assert outcome.error_code == "transport_closed"
    assert client.registry.pending_count == 0


@pytest.mark.asyncio
async def test_cancel_while_waiting_for_response(transport, server, decider_factory, swap_settings) -> None:
    server.silent.add("GetQuote")
    client = ProtocolClient(transport, request_timeout_s=5.0)
    await client.start()
    machine = SwapStateMachine(client, decider_factory(True), swap_settings)
    try:
        task = asyncio.create_task(machine.run())
        await _wait_for_phase(machine, SwapPhase.QUOTE_REQUESTED)
        await transport.wait_sent(2)
        machine.cancel("user pressed ctrl-c")
        outcome = await asyncio.wait_for(task, timeout=1.0)
    finally:
        await client.stop()

    assert outcome.phase is SwapPhase.REJECTED
    assert "user pressed ctrl-c" in outcome.reason
    assert client.registry.pending_count == 0


@pytest.mark.asyncio
async def test_cancel_while_waiting_for_decision(transport, server, swap_settings) -> None:
    decider = _BlockingDecider()
    client = ProtocolClient(transport, request_timeout_s=1.0)
    await client.start()
    machine = SwapStateMachine(client, decider, swap_settings)
    try:
        task = asyncio.create_task(machine.run())
        await asyncio.wait_for(decider.asked.wait(), timeout=1.0)
        machine.cancel()
        outcome = await asyncio.wait_for(task, timeout=1.0)
    finally:
        await client.stop()

    assert outcome.phase is SwapPhase.REJECTED
    assert machine.phase is SwapPhase.REJECTED
    assert "AcceptQuote" not in transport.sent_tags


@pytest.mark.asyncio
async def test_cancel_during_poll_sleep(transport, server, decider_factory, swap_settings) -> None:
    settings = replace(swap_settings, poll_interval_s=30.0)
    client = ProtocolClient(transport, request_timeout_s=1.0)
    await client.start()
    machine = SwapStateMachine(client, decider_factory(True), settings)
    try:
        task = asyncio.create_task(machine.run())
        await _wait_for_phase(machine, SwapPhase.POLLING_CONFIRMATION)
        machine.cancel("shutting down")
        outcome = await asyncio.wait_for(task, timeout=1.0)
    finally:
        await client.stop()

    assert outcome.phase is SwapPhase.REJECTED
    assert outcome.txid == server.accept_txid
    assert "GetSwaps" not in transport.sent_tags


@pytest.mark.asyncio
async def test_machine_runs_once(transport, decider_factory, swap_settings) -> None:
    _, client, _ = await _run_swap(transport, decider_factory(True), swap_settings)
    machine = SwapStateMachine(client, decider_factory(True), swap_settings)
    await machine.run()
    with pytest.raises(RuntimeError):
        await machine.run()


class _RecordingDecider(Decider):
    def __init__(self, events: list[tuple[str, object]]) -> None:
        self.events = events

    async def confirm(self, question: str) -> bool:
        self.events.append(("question", question))
        return True


async def _run_with_hooks(transport, settings) -> tuple[list[tuple[str, object]], object]:
    events: list[tuple[str, object]] = []
    client = ProtocolClient(transport, request_timeout_s=1.0)
    await client.start()
    machine = SwapStateMachine(
        client,
        _RecordingDecider(events),
        settings,
        on_balances=lambda balances: events.append(("balances", balances)),
        on_quote=lambda quote: events.append(("quote", quote.quote_id)),
    )
    try:
        outcome = await asyncio.wait_for(machine.run(), timeout=5.0)
    finally:
        await client.stop()
    return events, outcome


@pytest.mark.asyncio
async def test_quote_is_shown_before_the_accept_question(transport, server, swap_settings) -> None:
    events, outcome = await _run_with_hooks(transport, swap_settings)

    assert outcome.phase is SwapPhase.CONFIRMED
    assert events == [
        ("balances", {"DePix": 5, "L-BTC": 0}),
        ("quote", 42),
        ("question", QUESTION_ACCEPT_QUOTE),
    ]


@pytest.mark.asyncio
async def test_balances_are_shown_before_the_refetch_question(transport, server, swap_settings) -> None:
    server.balance_pushes = [{"DePix": 0}, {"DePix": 2}]
    events, outcome = await _run_with_hooks(transport, swap_settings)

    assert outcome.phase is SwapPhase.CONFIRMED
    assert events == [
        ("balances", {"DePix": 0}),
        ("question", QUESTION_REFETCH_INSUFFICIENT),
        ("balances", {"DePix": 2}),
        ("quote", 42),
        ("question", QUESTION_ACCEPT_QUOTE),
    ]
