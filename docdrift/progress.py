"""Progress reporting for running scans.

Each scan owns one reporter. It clamps and rounds percentages and coalesces
bursts so that whatever persistence the caller wires in sees a bounded write
rate. Terminal phases skip the interval check so the final state always lands.
"""

from __future__ import annotations

import math
import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from .models import ProgressEvent, ScanPhase

DEFAULT_MIN_INTERVAL = 0.6


class ScanCancelled(RuntimeError):
    """Raised when the caller cancels a scan in flight."""


def raise_if_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise ScanCancelled("Scan cancelled by caller")


class ProgressSink(Protocol):
    """Receives progress events for a single scan."""

    def report(self, event: ProgressEvent) -> None:
        ...


class NullProgressSink:
    """Sink used when the caller does not want progress updates."""

    def report(self, event: ProgressEvent) -> None:
        return None


class ProgressReporter:
    """Throttled sink forwarding events to a caller-supplied callback."""

    def __init__(
        self,
        callback: Callable[[ProgressEvent], Any],
        *,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._callback = callback
        self._min_interval = min_interval
        self._clock = clock
        self._last: Optional[Tuple[int, ScanPhase, Optional[str]]] = None
        self._last_forward_at: Optional[float] = None

    @property
    def last_event(self) -> Optional[Tuple[int, ScanPhase, Optional[str]]]:
        return self._last

    def report(self, event: ProgressEvent) -> None:
        percent = clamp_percent(event.percent)
        key = (percent, event.phase, event.message)
        if key == self._last:
            return
        now = self._clock()
        if (
            not event.phase.is_terminal
            and self._last_forward_at is not None
            and now - self._last_forward_at < self._min_interval
        ):
            return

        self._last = key
        self._last_forward_at = now
        forwarded = ProgressEvent(
            phase=event.phase,
            percent=percent,
            message=event.message,
            meta=dict(event.meta),
        )
        self._callback(forwarded)


def emit(
    sink: ProgressSink,
    phase: ScanPhase,
    percent: float,
    message: str | None = None,
    meta: Dict[str, Any] | None = None,
) -> None:
    """Publish an event on any sink, clamping the percentage first."""
    sink.report(
        ProgressEvent(phase=phase, percent=clamp_percent(percent), message=message, meta=dict(meta or {}))
    )


def interpolate(start: int, end: int, index: int, total: int) -> int:
    """Map ``index`` of ``total`` into the progress sub-range ``[start, end]``."""
    total = max(total, 1)
    return min(end, start + _round_half_up((index / total) * (end - start)))


def clamp_percent(value: Any) -> int:
    """Clamp to [0, 100] and round; non-numeric input becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number):
        return 0
    if math.isinf(number):
        return 100 if number > 0 else 0
    return max(0, min(100, _round_half_up(number)))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


__all__ = [
    "DEFAULT_MIN_INTERVAL",
    "NullProgressSink",
    "ProgressReporter",
    "ProgressSink",
    "ScanCancelled",
    "clamp_percent",
    "emit",
    "interpolate",
    "raise_if_cancelled",
]
