from __future__ import annotations

import pytest

from sideswap_client.cli import run_swap, build_parser, apply_overrides
from sideswap_client.client import ProtocolClient
from sideswap_client.state.settings import AppSettings, SwapSettings, ConnectionSettings


def _settings() -> AppSettings:
    return AppSettings(
        connection=ConnectionSettings(
            url="ws://127.0.0.1:3102",
            ping_interval_s=20.0,
            ping_timeout_s=20.0,
            open_timeout_s=10.0,
            max_message_bytes=4 * 1024 * 1024,
        ),
        swap=SwapSettings(
            send_asset="DePix",
            send_amount=1,
            recv_asset="L-BTC",
            poll_interval_s=5.0,
            max_poll_attempts=10,
            request_timeout_s=15.0,
            balance_timeout_s=30.0,
            max_balance_refetches=3,
        ),
    )


def test_defaults_to_swap_without_overrides() -> None:
    args = build_parser().parse_args([])
    assert args.command == "swap"

    settings = _settings()
    assert apply_overrides(settings, args) == settings


def test_flags_override_settings() -> None:
    args = build_parser().parse_args(
        ["swap", "--url", "ws://remote:9000", "--send-asset", "USDt", "--send-amount", "2.5", "--recv-asset", "DePix"]
    )
    settings = apply_overrides(_settings(), args)

    assert settings.connection.url == "ws://remote:9000"
    assert settings.swap.send_asset == "USDt"
    assert settings.swap.send_amount == 2.5
    assert settings.swap.recv_asset == "DePix"
    assert settings.swap.max_poll_attempts == 10


def test_swaps_command_parses() -> None:
    assert build_parser().parse_args(["swaps"]).command == "swaps"


def test_negative_amount_is_rejected() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--send-amount", "-1"])


@pytest.mark.asyncio
async def test_run_swap_shows_the_quote_before_asking(
    transport, swap_settings, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    shown_before_prompt: list[str] = []

    def answer_yes(prompt: str) -> str:
        shown_before_prompt.append(capsys.readouterr().out)
        return "y"

    monkeypatch.setattr("builtins.input", answer_yes)
    settings = AppSettings(connection=_settings().connection, swap=swap_settings)
    client = ProtocolClient(transport, request_timeout_s=1.0)
    await client.start()
    try:
        code = await run_swap(client, settings)
    finally:
        await client.stop()

    assert code == 0
    assert len(shown_before_prompt) == 1
    assert "Quote ID:" in shown_before_prompt[0]
    assert "DePix:" in shown_before_prompt[0]
    assert "Quote ID:" not in capsys.readouterr().out
