"""Per-workflow swap state (dataclasses only)."""

from __future__ import annotations

from dataclasses import field, dataclass

from sideswap_client.protocol.messages import Amount, BalanceSnapshot, GetQuoteResponse

from .phase import SwapPhase


@dataclass(slots=True)
class SwapSession:
    send_asset: str
    send_amount: Amount
    recv_asset: str
    phase: SwapPhase = SwapPhase.IDLE
    address: str | None = None
    balances: BalanceSnapshot = field(default_factory=dict)
    quote: GetQuoteResponse | None = None
    txid: str | None = None
    poll_attempts: int = 0
    balance_refetches: int = 0
    reason: str = ""
    error_code: str | None = None
    error_text: str | None = None

    def available(self) -> Amount:
        return self.balances.get(self.send_asset, 0)

    def has_sufficient_balance(self) -> bool:
        return self.available() >= self.send_amount


@dataclass(frozen=True, slots=True)
class SwapOutcome:
    phase: SwapPhase
    reason: str
    send_asset: str
    send_amount: Amount
    recv_asset: str
    quote: GetQuoteResponse | None = None
    txid: str | None = None
    poll_attempts: int = 0
    error_code: str | None = None
    error_text: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.phase is SwapPhase.CONFIRMED

    @classmethod
    def from_session(cls, session: SwapSession) -> SwapOutcome:
        return cls(
            phase=session.phase,
            reason=session.reason,
            send_asset=session.send_asset,
            send_amount=session.send_amount,
            recv_asset=session.recv_asset,
            quote=session.quote,
            txid=session.txid,
            poll_attempts=session.poll_attempts,
            error_code=session.error_code,
            error_text=session.error_text,
        )


__all__ = ["SwapOutcome", "SwapSession"]
