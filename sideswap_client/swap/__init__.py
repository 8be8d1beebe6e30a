"""Swap workflow: state machine plus the yes/no decision points it awaits."""

from .machine import SwapStateMachine
from .decisions import Decider
from .console import ConsoleDecider, is_yes

__all__ = ["ConsoleDecider", "Decider", "SwapStateMachine", "is_yes"]
