"""Interval decomposition.

A stay is first cut into chunks that carry the multi-day and rolling-window
caps, then each chunk is cut into clock-time segments at every boundary the
tariff's time ranges imply. Segments never cross midnight.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, List, Optional, Tuple

from .config import MINUTES_PER_DAY, EngineConfig
from .errors import InvalidIntervalError
from .logging import LogEvent, log_debug
from .rates import DayClass, MaxRate, TariffTable, day_class_of

_ONE_MINUTE = timedelta(minutes=1)
_ONE_DAY = timedelta(days=1)


def minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


@dataclass(frozen=True)
class ParkingInterval:
    """A stay from ``start`` (inclusive) to ``end`` (exclusive), in local wall-clock time."""

    start: datetime
    end: datetime

    @classmethod
    def from_timestamps(cls, start: Any, end: Any) -> "ParkingInterval":
        """Validate and normalize a pair of timestamps.

        Aware timestamps are compared as instants, then ``end`` is moved into
        the zone of ``start`` and both are billed on that local clock. The
        start is floored and the end ceiled to whole minutes, so every started
        minute is billed.

        Raises:
            InvalidIntervalError: On non-datetime values, mixed naive and aware
                timestamps, or ``end`` before ``start``
        """
        if not isinstance(start, datetime) or not isinstance(end, datetime):
            raise InvalidIntervalError("start and end must be datetime values", start=start, end=end)
        if (start.tzinfo is None) != (end.tzinfo is None):
            raise InvalidIntervalError(
                "start and end must both be naive or both be timezone-aware",
                start=start,
                end=end,
            )
        if end < start:
            raise InvalidIntervalError("end must not be before start", start=start, end=end)

        if start.tzinfo is not None:
            end = end.astimezone(start.tzinfo).replace(tzinfo=None)
            start = start.replace(tzinfo=None)

        start = start.replace(second=0, microsecond=0)
        rounded_end = end.replace(second=0, microsecond=0)
        if rounded_end < end:
            rounded_end += _ONE_MINUTE
        return cls(start, rounded_end)

    @property
    def minutes(self) -> int:
        return minutes_between(self.start, self.end)


@dataclass(frozen=True)
class TimeSegment:
    """Sub-interval of a chunk within one calendar day and one set of time-range boundaries."""

    start: datetime
    end: datetime

    @property
    def minutes(self) -> int:
        return minutes_between(self.start, self.end)

    @property
    def minute_of_day(self) -> int:
        return self.start.hour * 60 + self.start.minute


@dataclass(frozen=True)
class Chunk:
    """Independently capped piece of a stay.

    Attributes:
        start: Chunk start
        end: Chunk end
        cap: Cap applied to the chunk as a whole (the daily cap for whole days)
        windows: Rolling-cap windows the chunk is billed in, if any
    """

    start: datetime
    end: datetime
    cap: Optional[MaxRate] = None
    windows: Tuple["Chunk", ...] = ()

    @property
    def minutes(self) -> int:
        return minutes_between(self.start, self.end)


def _rolling_windows(
    table: TariffTable,
    start: datetime,
    end: datetime,
    day_class: DayClass,
) -> Tuple[Chunk, ...]:
    cap = table.rolling_cap(day_class)
    if cap is None or cap.unit_minutes is None or minutes_between(start, end) <= cap.unit_minutes:
        return ()
    step = timedelta(minutes=cap.unit_minutes)
    windows: List[Chunk] = []
    cursor = start
    while cursor < end:
        stop = min(cursor + step, end)
        windows.append(Chunk(cursor, stop, cap=cap))
        cursor = stop
    return tuple(windows)


def _chunk(
    table: TariffTable,
    start: datetime,
    end: datetime,
    config: EngineConfig,
    cap: Optional[MaxRate] = None,
) -> Chunk:
    day_class = day_class_of(start.date(), config)
    return Chunk(start, end, cap=cap, windows=_rolling_windows(table, start, end, day_class))


def decompose(
    table: TariffTable,
    start: datetime,
    end: datetime,
    config: EngineConfig,
) -> List[Chunk]:
    """Split a stay into independently capped chunks.

    Stays longer than a day become whole-day chunks counted from the stay
    start, each capped at the daily cap if the table has one, plus a
    remainder that is decomposed again. Any chunk longer than the shortest
    rolling cap window is billed in consecutive windows of that length, each
    capped on its own. The rolling cap is picked by the day class of the
    chunk's first day.

    Args:
        table: Normalized tariff table
        start: Stay start (whole minute, local clock)
        end: Stay end (whole minute, local clock)
        config: Engine configuration (weekend days and holidays)

    Returns:
        Chunks in chronological order
    """
    total = minutes_between(start, end)
    if total <= MINUTES_PER_DAY:
        return [_chunk(table, start, end, config)]

    daily_cap = table.daily_cap
    chunks: List[Chunk] = []
    cursor = start
    for _ in range(total // MINUTES_PER_DAY):
        stop = cursor + _ONE_DAY
        chunks.append(_chunk(table, cursor, stop, config, cap=daily_cap))
        cursor = stop
    if cursor < end:
        chunks.extend(decompose(table, cursor, end, config))
    log_debug(
        LogEvent.INTERVAL_DECOMPOSITION,
        "Stay split into daily chunks",
        minutes=total,
        whole_days=total // MINUTES_PER_DAY,
        daily_cap=daily_cap.price if daily_cap is not None else None,
    )
    return chunks


def split_segments(
    table: TariffTable,
    start: datetime,
    end: datetime,
    config: EngineConfig,
) -> List[TimeSegment]:
    """Split a span at every time-range boundary and at every midnight.

    Args:
        table: Normalized tariff table providing the boundaries
        start: Span start
        end: Span end
        config: Engine configuration (fallback boundaries)

    Returns:
        Contiguous segments covering ``[start, end)``
    """
    boundaries = sorted(set(table.boundaries()) | set(config.fallback_boundaries))
    segments: List[TimeSegment] = []
    cursor = start
    while cursor < end:
        minute = cursor.hour * 60 + cursor.minute
        midnight = cursor.replace(hour=0, minute=0, second=0, microsecond=0)
        next_boundary = next((b for b in boundaries if b > minute), MINUTES_PER_DAY)
        stop = min(midnight + timedelta(minutes=next_boundary), end)
        segments.append(TimeSegment(cursor, stop))
        cursor = stop
    return segments
