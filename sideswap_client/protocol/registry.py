"""Correlation of asynchronous responses to outstanding requests by id."""

from __future__ import annotations

import time
import asyncio
import logging
import threading
from typing import Any
from collections import deque
from dataclasses import dataclass

from sideswap_client.errors import ProtocolError, RequestCancelledError, UnmatchedResponseError

from .messages import ErrorPayload, RequestPayload, ResponsePayload

logger = logging.getLogger(__name__)

_MAX_ANOMALIES = 256


@dataclass(slots=True)
class PendingRequest:
    id: int
    payload_tag: str
    created_at: float
    future: asyncio.Future


def _complete(future: asyncio.Future, *, result: Any = None, error: BaseException | None = None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


class CorrelationRegistry:
    """Id allocation plus the pending-request table.

    Ids start at 1 and only ever grow. Each pending handle is completed at most
    once: the entry is removed from the table under the lock before its future
    is touched, so a duplicate or late answer finds nothing and is recorded as
    an anomaly instead.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next_id = 1
        self._pending: dict[int, PendingRequest] = {}
        self.anomalies: deque[UnmatchedResponseError] = deque(maxlen=_MAX_ANOMALIES)

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def pending_ids(self) -> list[int]:
        with self._lock:
            return sorted(self._pending)

    def register(self, payload: RequestPayload) -> tuple[int, asyncio.Future]:
        future = asyncio.get_running_loop().create_future()
        with self._lock:
            request_id = self._next_id
            self._next_id += 1
            self._pending[request_id] = PendingRequest(
                id=request_id,
                payload_tag=payload.tag,
                created_at=time.monotonic(),
                future=future,
            )
        return request_id, future

    def resolve(self, request_id: int | None, payload: ResponsePayload | ErrorPayload) -> bool:
        with self._lock:
            pending = self._pending.pop(request_id, None) if request_id is not None else None
            issued = request_id is not None and 0 < request_id < self._next_id

        if pending is None:
            reason = "already resolved or abandoned" if issued else "never issued"
            self._record_anomaly(UnmatchedResponseError(request_id=request_id, reason=reason))
            return False

        if isinstance(payload, ErrorPayload):
            error = ProtocolError(
                request_id=request_id,
                text=payload.text,
                code=payload.code,
                details=payload.details,
            )
            self._deliver(pending, error=error)
        elif payload.tag != pending.payload_tag:
            error = ProtocolError(
                request_id=request_id,
                text=f"expected {pending.payload_tag} response, got {payload.tag}",
                code="unexpected_response",
            )
            self._deliver(pending, error=error)
        else:
            self._deliver(pending, result=payload)
        return True

    def abandon(self, request_id: int, reason: str) -> bool:
        with self._lock:
            pending = self._pending.pop(request_id, None)
        if pending is None:
            return False
        self._deliver(pending, error=RequestCancelledError(request_id=request_id, reason=reason))
        return True

    def abandon_all(self, reason: str) -> int:
        with self._lock:
            abandoned = list(self._pending.values())
            self._pending.clear()
        for pending in abandoned:
            self._deliver(pending, error=RequestCancelledError(request_id=pending.id, reason=reason))
        if abandoned:
            logger.warning("abandoned %d pending request(s): %s", len(abandoned), reason)
        return len(abandoned)

    def _record_anomaly(self, anomaly: UnmatchedResponseError) -> None:
        self.anomalies.append(anomaly)
        logger.warning("%s", anomaly)

    @staticmethod
    def _deliver(pending: PendingRequest, *, result: Any = None, error: BaseException | None = None) -> None:
        future = pending.future
        loop = future.get_loop()
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            _complete(future, result=result, error=error)
            return
        if loop.is_closed():
            logger.debug("dropping result for request %d: event loop closed", pending.id)
            return
        loop.call_soon_threadsafe(lambda: _complete(future, result=result, error=error))


__all__ = ["CorrelationRegistry", "PendingRequest"]
