"""Asynchronous client for the SideSwap JSON-over-websocket swap API."""

from .client import ProtocolClient
from .swap import Decider, ConsoleDecider, SwapStateMachine
from .state import SwapPhase, SwapOutcome, SwapSettings

__all__ = [
    "ConsoleDecider",
    "Decider",
    "ProtocolClient",
    "SwapOutcome",
    "SwapPhase",
    "SwapSettings",
    "SwapStateMachine",
]
