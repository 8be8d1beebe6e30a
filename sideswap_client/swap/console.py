"""Terminal-backed yes/no prompts."""

from __future__ import annotations

import asyncio
import threading
import contextlib
from collections.abc import Callable

from sideswap_client.client.printing import yellow

from .decisions import Decider

_YES = {"y", "yes"}


def is_yes(answer: str | None) -> bool:
    return (answer or "").strip().lower() in _YES


def _settle(future: asyncio.Future, *, result: str | None = None, error: BaseException | None = None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


class ConsoleDecider(Decider):
    """Ask on stdin without blocking the event loop (the listener keeps draining frames).

    The blocking read runs on a daemon thread rather than the default executor:
    a prompt abandoned by cancellation or transport loss must not keep
    `asyncio.run` waiting for the executor to shut down.
    """

    def __init__(self, reader: Callable[[str], str] | None = None) -> None:
        self._reader = reader

    async def confirm(self, question: str) -> bool:
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        prompt = yellow(f"{question} (y/n): ")
        reader = self._reader

        def _read() -> None:
            result: str | None = None
            error: BaseException | None = None
            try:
                result = (reader or input)(prompt)
            except EOFError:
                result = None
            except Exception as exc:
                error = exc
            if loop.is_closed():
                return
            # The loop may close between the check and the call.
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(lambda: _settle(future, result=result, error=error))

        threading.Thread(target=_read, name="sideswap-prompt", daemon=True).start()
        answer = await future
        return answer is not None and is_yes(answer)


__all__ = ["ConsoleDecider", "is_yes"]
