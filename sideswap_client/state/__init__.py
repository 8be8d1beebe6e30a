from .session import SwapOutcome, SwapSession
from .phase import TERMINAL_PHASES, ALLOWED_TRANSITIONS, SwapPhase
from .settings import AppSettings, SwapSettings, ConnectionSettings

__all__ = [
    "ALLOWED_TRANSITIONS",
    "AppSettings",
    "ConnectionSettings",
    "SwapOutcome",
    "SwapPhase",
    "SwapSession",
    "SwapSettings",
    "TERMINAL_PHASES",
]
