"""Engine configuration.

The engine reads no environment variables; everything that is not part of a
tariff table is passed in through :class:`EngineConfig`.
"""

import re
from datetime import date
from typing import FrozenSet, Iterable, Optional, Tuple, Union

_HHMM_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

MINUTES_PER_DAY = 1440


def parse_minute_of_day(value: Union[str, int], allow_end_of_day: bool = False) -> int:
    """Convert ``"HH:MM"`` or an int into a minute-of-day value.

    Args:
        value: Clock time as ``"HH:MM"`` or minutes since midnight
        allow_end_of_day: Accept ``"24:00"`` / 1440 as the end of the day

    Returns:
        Minutes since midnight

    Raises:
        ValueError: If the value is not a valid clock time
    """
    limit = MINUTES_PER_DAY if allow_end_of_day else MINUTES_PER_DAY - 1
    if isinstance(value, bool):
        raise ValueError(f"Invalid clock time: {value!r}")
    if isinstance(value, int):
        minute = value
    elif isinstance(value, str):
        match = _HHMM_PATTERN.match(value.strip())
        if not match:
            raise ValueError(f"Invalid clock time: {value!r}")
        hours, minutes = int(match.group(1)), int(match.group(2))
        if minutes >= 60:
            raise ValueError(f"Invalid clock time: {value!r}")
        minute = hours * 60 + minutes
    else:
        raise ValueError(f"Invalid clock time: {value!r}")
    if minute < 0 or minute > limit:
        raise ValueError(f"Clock time out of range: {value!r}")
    return minute


class EngineConfig:
    """Configuration for fee calculations."""

    def __init__(
        self,
        holidays: Optional[Iterable[date]] = None,
        weekend_days: Iterable[int] = (5, 6),
        fallback_boundaries: Optional[Iterable[Union[str, int]]] = None,
    ):
        """Initialize engine configuration.

        Args:
            holidays: Public holidays billed as ``weekend_holiday`` days.
            weekend_days: ``date.weekday()`` values billed as weekend days
                          (Saturday and Sunday by default).
            fallback_boundaries: Extra clock times at which every stay is
                                 split into segments, in addition to the
                                 boundaries derived from the tariff's own
                                 time ranges. Empty by default.
        """
        holiday_set = frozenset(holidays or ())
        for day in holiday_set:
            if not isinstance(day, date):
                raise ValueError(f"holidays must contain dates, got {day!r}")
        self._holidays: FrozenSet[date] = holiday_set

        weekend = frozenset(weekend_days)
        for day in weekend:
            if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day <= 6:
                raise ValueError(f"weekend_days must be weekday indexes 0-6, got {day!r}")
        self._weekend_days: FrozenSet[int] = weekend

        self._fallback_boundaries: Tuple[int, ...] = tuple(
            sorted({parse_minute_of_day(value) for value in fallback_boundaries or ()})
        )

    @property
    def holidays(self) -> FrozenSet[date]:
        return self._holidays

    @property
    def weekend_days(self) -> FrozenSet[int]:
        return self._weekend_days

    @property
    def fallback_boundaries(self) -> Tuple[int, ...]:
        return self._fallback_boundaries

    def is_weekend_or_holiday(self, day: date) -> bool:
        """Return True when ``day`` bills as a weekend/holiday day."""
        return day.weekday() in self._weekend_days or day in self._holidays

    def is_holiday(self, day: date) -> bool:
        return day in self._holidays


DEFAULT_CONFIG = EngineConfig()
