from __future__ import annotations

from sideswap_client.protocol import NotificationDispatcher


def test_dispatch_calls_subscribers_in_order() -> None:
    dispatcher = NotificationDispatcher()
    seen: list[tuple[str, object]] = []
    dispatcher.on("Balances", lambda data: seen.append(("first", data)))
    dispatcher.on("Balances", lambda data: seen.append(("second", data)))

    assert dispatcher.dispatch("Balances", {"DePix": 1}) == 2
    assert seen == [("first", {"DePix": 1}), ("second", {"DePix": 1})]


def test_unknown_kind_is_a_noop() -> None:
    dispatcher = NotificationDispatcher()
    assert dispatcher.dispatch("Weather", {}) == 0


def test_unsubscribe_stops_delivery() -> None:
    dispatcher = NotificationDispatcher()
    seen: list[object] = []
    unsubscribe = dispatcher.on("Balances", seen.append)

    unsubscribe()
    unsubscribe()

    assert dispatcher.subscriber_count("Balances") == 0
    assert dispatcher.dispatch("Balances", {}) == 0
    assert seen == []


def test_failing_handler_does_not_block_others() -> None:
    dispatcher = NotificationDispatcher()
    seen: list[object] = []

    def broken(_data: object) -> None:
        raise RuntimeError("boom")

    dispatcher.on("Balances", broken)
    dispatcher.on("Balances", seen.append)

    assert dispatcher.dispatch("Balances", {"L-BTC": 2}) == 1
    assert seen == [{"L-BTC": 2}]


def test_handler_may_unsubscribe_while_dispatching() -> None:
    dispatcher = NotificationDispatcher()
    seen: list[str] = []
    unsubscribe = None

    def once(_data: object) -> None:
        seen.append("once")
        unsubscribe()

    unsubscribe = dispatcher.on("Balances", once)
    dispatcher.on("Balances", lambda _data: seen.append("always"))

    dispatcher.dispatch("Balances", {})
    dispatcher.dispatch("Balances", {})

    assert seen == ["once", "always", "always"]
