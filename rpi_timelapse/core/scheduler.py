"""Drift-corrected sample scheduler.

The scheduler is an iterator of :class:`TimeSnapshot`. Every pull re-reads the
monotonic clock and compares it with the previous tick instead of adding fixed
steps, so slow captures or late wake-ups never accumulate into drift. Waiting
is a plain poll loop that sleeps ``idle`` milliseconds between checks; the
``time_scale`` knob multiplies observed time, which lets tests run an hour of
sampling in seconds.

All durations are integer milliseconds.
"""

from __future__ import annotations

import dataclasses
import math
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, Optional

from rpi_timelapse.core.errors import ClockSyncError
from rpi_timelapse.core.logging_utils import LoggerLike, ensure_structured_logger
from rpi_timelapse.core.time_sync import DEFAULT_NTP_HOST, query_ntp_seconds

Clock = Callable[[], int]
Sleeper = Callable[[float], None]
TimeLookup = Callable[[str], float]


def monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


@dataclass(frozen=True, slots=True)
class ScheduleConfig:
    interval: int
    idle: int
    time_scale: float = 1.0
    max_samples: Optional[int] = None  # None runs forever

    def normalized(self) -> "ScheduleConfig":
        time_scale = self.time_scale if self.time_scale > 0 else 1.0
        max_samples = self.max_samples
        if max_samples is not None and max_samples < 0:
            max_samples = None
        return dataclasses.replace(self, time_scale=float(time_scale), max_samples=max_samples)

    @property
    def bounded(self) -> bool:
        return self.max_samples is not None


@dataclass(frozen=True, slots=True)
class TimeSnapshot:
    timestamp: int  # epoch milliseconds
    elapsed: int  # scaled milliseconds since the scheduler started
    utc: datetime


@dataclass(slots=True)
class ClockAnchor:
    reference: int  # epoch milliseconds at ``start``
    start: int
    last: int


class Scheduler(Iterator[TimeSnapshot]):
    """Yield one snapshot per elapsed ``interval`` (scaled)."""

    def __init__(
        self,
        config: ScheduleConfig,
        *,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleeper] = None,
        logger: LoggerLike = None,
    ) -> None:
        if config.interval < 0 or config.idle < 0:
            raise ValueError(f"interval and idle must be non-negative (got {config.interval}, {config.idle})")
        self._config = config.normalized()
        self._clock = clock or monotonic_ms
        self._sleep = sleep or time.sleep
        self._logger = ensure_structured_logger(logger, fallback_name="Scheduler")
        now = self._clock()
        self._anchor = ClockAnchor(reference=int(time.time()) * 1000, start=now, last=now)
        self._sampled = 0

    @property
    def config(self) -> ScheduleConfig:
        return self._config

    @property
    def sampled(self) -> int:
        return self._sampled

    @property
    def reference_time(self) -> datetime:
        return _utc_from_ms(self._anchor.reference)

    def sync_network_time(self, host: str = DEFAULT_NTP_HOST, *, lookup: Optional[TimeLookup] = None) -> None:
        """Re-anchor the reference time to an NTP answer.

        Raises ClockSyncError when the lookup fails. Call before the first tick.
        """
        lookup = lookup or query_ntp_seconds
        try:
            seconds = lookup(host)
        except (OSError, ValueError) as exc:
            raise ClockSyncError(f"time lookup against {host} failed: {exc}") from exc
        self.apply_time_sync(seconds)

    def apply_time_sync(self, seconds: float) -> None:
        now = self._clock()
        self._anchor.reference = int(seconds) * 1000
        self._anchor.start = now
        self._anchor.last = now
        self._logger.info("reference time set to %s", self.reference_time.isoformat())

    def __iter__(self) -> "Scheduler":
        return self

    def __next__(self) -> TimeSnapshot:
        limit = self._config.max_samples
        if limit is not None and self._sampled >= limit:
            raise StopIteration

        interval = self._config.interval
        scale = self._config.time_scale
        idle_seconds = self._config.idle / 1000.0
        anchor = self._anchor
        while True:
            now = self._clock()
            elapsed_scaled = math.floor((now - anchor.last) * scale)
            if elapsed_scaled > interval:
                self._sampled += 1
                anchor.last = now
                since_start = math.floor((now - anchor.start) * scale)
                return self._snapshot(since_start)
            self._sleep(idle_seconds)

    def _snapshot(self, since_start: int) -> TimeSnapshot:
        timestamp = self._anchor.reference + since_start
        return TimeSnapshot(timestamp=timestamp, elapsed=since_start, utc=_utc_from_ms(timestamp))


def _utc_from_ms(epoch_ms: int) -> datetime:
    seconds, millis = divmod(epoch_ms, 1000)
    return datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(milliseconds=millis)


__all__ = ["ClockAnchor", "ScheduleConfig", "Scheduler", "TimeSnapshot", "monotonic_ms"]
