"""Yes/no decision points the swap workflow awaits."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Decider(ABC):
    @abstractmethod
    async def confirm(self, question: str) -> bool:
        """Return True when the caller answers yes to `question`."""
        raise NotImplementedError


__all__ = ["Decider"]
