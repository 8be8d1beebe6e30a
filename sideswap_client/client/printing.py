"""Readable console output for swap sessions.

All user-facing console formatting is routed through this module so styling
stays consistent and ANSI colors are only used when stdout is a tty.
"""

from __future__ import annotations

import sys

from sideswap_client.state.phase import SwapPhase
from sideswap_client.state.session import SwapOutcome
from sideswap_client.protocol.status import SwapStatus
from sideswap_client.protocol.messages import Swap, BalanceSnapshot, GetQuoteResponse

_USE_COLOR = sys.stdout.isatty()


def _c(code: str, text: str) -> str:
    if not _USE_COLOR:
        return text
    return f"\033[{code}m{text}\033[0m"


def dim(text: str) -> str:
    return _c("2", text)


def bold(text: str) -> str:
    return _c("1", text)


def green(text: str) -> str:
    return _c("32", text)


def red(text: str) -> str:
    return _c("31", text)


def cyan(text: str) -> str:
    return _c("36", text)


def yellow(text: str) -> str:
    return _c("33", text)


def divider(width: int = 80) -> str:
    return dim("─" * width)


def section_header(title: str, width: int = 60) -> str:
    """Create a prominent section header with surrounding decoration."""
    padding = width - len(title) - 4
    left = padding // 2
    right = padding - left
    return bold(f"{'─' * left}[ {title} ]{'─' * right}")


def format_error(label: str, detail: str = "") -> str:
    suffix = f": {detail}" if detail else ""
    return f"{red('ERROR')}  {label}{suffix}"


def format_warning(label: str) -> str:
    return f"{yellow('WARN')}   {label}"


def format_balances(balances: BalanceSnapshot) -> str:
    if not balances:
        return format_warning("No balances available")
    return "\n".join(f"{cyan(asset + ':')} {yellow(str(amount))}" for asset, amount in balances.items())


def format_quote(quote: GetQuoteResponse, recv_asset: str) -> str:
    lines = [
        f"{cyan('Quote ID:')} {yellow(str(quote.quote_id))}",
        f"{cyan('Receive amount:')} {yellow(str(quote.recv_amount))} {recv_asset}",
        f"{cyan('TTL:')} {yellow(str(quote.ttl))}",
        f"{cyan('TXID:')} {yellow(quote.txid)}",
    ]
    return "\n".join(lines)


_STATUS_COLORS = {
    SwapStatus.CONFIRMED: green,
    SwapStatus.MEMPOOL: yellow,
    SwapStatus.NOT_FOUND: red,
}


def format_swap(swap: Swap) -> str:
    color = _STATUS_COLORS.get(swap.status, dim)
    return f"{cyan('TXID:')} {dim(swap.txid)} {cyan('Status:')} {color(str(swap.status))}"


def format_swaps(swaps: list[Swap] | tuple[Swap, ...]) -> str:
    if not swaps:
        return format_warning("No swaps found")
    header = bold(f"Swaps status ({len(swaps)} found):")
    return "\n".join([header, *(format_swap(swap) for swap in swaps)])


def format_outcome(outcome: SwapOutcome) -> str:
    if outcome.phase is SwapPhase.CONFIRMED:
        return f"{green('SWAP CONFIRMED')}  txid {outcome.txid}"
    if outcome.phase is SwapPhase.TIMED_OUT:
        return format_warning(
            f"{outcome.reason}. You can check its status later with the `swaps` command (txid {outcome.txid})."
        )
    if outcome.phase is SwapPhase.REJECTED:
        return format_warning(f"Swap cancelled: {outcome.reason}")
    detail = outcome.reason
    if outcome.error_code:
        detail = f"{detail} [code={outcome.error_code}]"
    return format_error("Swap failed", detail)


__all__ = [
    "bold",
    "cyan",
    "dim",
    "divider",
    "format_balances",
    "format_error",
    "format_outcome",
    "format_quote",
    "format_swap",
    "format_swaps",
    "format_warning",
    "green",
    "red",
    "section_header",
    "yellow",
]
