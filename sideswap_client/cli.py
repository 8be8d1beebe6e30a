"""Command-line entry point for the SideSwap swap client.

Usage:
    sideswap-client [swap] [--url URL] [--send-asset A] [--send-amount N] [--recv-asset B]
    sideswap-client swaps [--url URL]
"""

from __future__ import annotations

import asyncio
import logging
import argparse
import contextlib
from dataclasses import replace

from sideswap_client.swap import ConsoleDecider, SwapStateMachine
from sideswap_client.client import ProtocolClient
from sideswap_client.state.settings import AppSettings
from sideswap_client.runtime import parse_amount, load_settings, configure_logging
from sideswap_client.transport import WebSocketTransport
from sideswap_client.errors import ProtocolError, RequestTimeoutError, TransportClosedError, RequestCancelledError
from sideswap_client.client.printing import (
    dim,
    divider,
    format_error,
    format_quote,
    format_swaps,
    format_outcome,
    section_header,
    format_balances,
)

logger = logging.getLogger(__name__)

_COMMANDS = ("swap", "swaps")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sideswap-client", description="Swap assets through a local SideSwap API")
    parser.add_argument("command", nargs="?", default="swap", choices=_COMMANDS, help="swap (default) or swaps")
    parser.add_argument("--url", type=str, default=None, help="WebSocket endpoint (overrides SIDESWAP_WS_URL)")
    parser.add_argument("--send-asset", type=str, default=None, help="Asset to send")
    parser.add_argument("--send-amount", type=parse_amount, default=None, help="Amount to send")
    parser.add_argument("--recv-asset", type=str, default=None, help="Asset to receive")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def apply_overrides(settings: AppSettings, args: argparse.Namespace) -> AppSettings:
    connection = settings.connection
    if args.url:
        connection = replace(connection, url=args.url)

    swap_overrides = {
        name: value
        for name, value in (
            ("send_asset", args.send_asset),
            ("send_amount", args.send_amount),
            ("recv_asset", args.recv_asset),
        )
        if value is not None
    }
    swap = replace(settings.swap, **swap_overrides) if swap_overrides else settings.swap
    return AppSettings(connection=connection, swap=swap)


async def _print_swaps(client: ProtocolClient) -> bool:
    try:
        response = await client.get_swaps()
    except (ProtocolError, RequestTimeoutError, RequestCancelledError, TransportClosedError) as exc:
        print(format_error("Failed to get swaps", str(exc)))
        return False
    print(format_swaps(response.swaps))
    return True


async def run_swap(client: ProtocolClient, settings: AppSettings) -> int:
    swap = settings.swap
    print(f"\n{section_header('SIDESWAP')}")
    print(dim(f"  endpoint: {settings.connection.url}"))
    print(dim(f"  swap: {swap.send_amount} {swap.send_asset} -> {swap.recv_asset}"))
    print()

    machine = SwapStateMachine(
        client,
        ConsoleDecider(),
        swap,
        on_balances=lambda balances: print(format_balances(balances)),
        on_quote=lambda quote: print(format_quote(quote, swap.recv_asset)),
    )
    outcome = await machine.run()

    print(divider())
    print(format_outcome(outcome))

    if not client.disconnected.is_set():
        await _print_swaps(client)
    return 0 if outcome.succeeded else 1


async def run(args: argparse.Namespace) -> int:
    settings = apply_overrides(load_settings(), args)
    client = ProtocolClient(
        WebSocketTransport(settings.connection),
        request_timeout_s=settings.swap.request_timeout_s,
    )

    try:
        await client.start()
    except TransportClosedError as exc:
        print(format_error("Could not connect", exc.reason))
        return 1

    try:
        if args.command == "swaps":
            return 0 if await _print_swaps(client) else 1
        return await run_swap(client, settings)
    finally:
        with contextlib.suppress(Exception):
            await client.stop()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.debug)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.warning("interrupted")
        return 130


__all__ = ["apply_overrides", "build_parser", "main", "run"]
