"""Swap workflow phases and the transitions allowed between them."""

from __future__ import annotations

from enum import StrEnum


class SwapPhase(StrEnum):
    IDLE = "idle"
    AWAITING_ADDRESS = "awaiting_address"
    AWAITING_BALANCE = "awaiting_balance"
    QUOTE_REQUESTED = "quote_requested"
    AWAITING_USER_ACCEPTANCE = "awaiting_user_acceptance"
    ACCEPT_REQUESTED = "accept_requested"
    POLLING_CONFIRMATION = "polling_confirmation"
    CONFIRMED = "confirmed"
    TIMED_OUT = "timed_out"
    REJECTED = "rejected"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_PHASES


TERMINAL_PHASES: frozenset[SwapPhase] = frozenset(
    {SwapPhase.CONFIRMED, SwapPhase.TIMED_OUT, SwapPhase.REJECTED, SwapPhase.FAILED}
)

# Rejected/Failed are reachable from every non-terminal phase (decline, cancel, transport loss).
_ABORT = {SwapPhase.REJECTED, SwapPhase.FAILED}

ALLOWED_TRANSITIONS: dict[SwapPhase, frozenset[SwapPhase]] = {
    SwapPhase.IDLE: frozenset({SwapPhase.AWAITING_ADDRESS, *_ABORT}),
    SwapPhase.AWAITING_ADDRESS: frozenset({SwapPhase.AWAITING_BALANCE, *_ABORT}),
    SwapPhase.AWAITING_BALANCE: frozenset({SwapPhase.QUOTE_REQUESTED, SwapPhase.AWAITING_ADDRESS, *_ABORT}),
    SwapPhase.QUOTE_REQUESTED: frozenset({SwapPhase.AWAITING_USER_ACCEPTANCE, *_ABORT}),
    SwapPhase.AWAITING_USER_ACCEPTANCE: frozenset({SwapPhase.ACCEPT_REQUESTED, *_ABORT}),
    SwapPhase.ACCEPT_REQUESTED: frozenset({SwapPhase.POLLING_CONFIRMATION, *_ABORT}),
    SwapPhase.POLLING_CONFIRMATION: frozenset({SwapPhase.CONFIRMED, SwapPhase.TIMED_OUT, *_ABORT}),
    SwapPhase.CONFIRMED: frozenset(),
    SwapPhase.TIMED_OUT: frozenset(),
    SwapPhase.REJECTED: frozenset(),
    SwapPhase.FAILED: frozenset(),
}

__all__ = ["ALLOWED_TRANSITIONS", "TERMINAL_PHASES", "SwapPhase"]
