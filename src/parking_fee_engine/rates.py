"""Tariff data structures for the fee engine.

A tariff table is a collection of rates. Each rate is one variant of a closed
tagged union:

- ``BaseRate``: ordinary per-unit charge
- ``ProgressiveRate``: per-unit charge replacing the base price once
  ``apply_after`` minutes of the qualifying scope have elapsed
- ``MaxRate``: ceiling on the fee accumulated over a window
- ``ConditionalFreeRate``: stays up to a threshold are free

Every variant may be restricted to a clock-time window (``TimeRange``) and a
day-of-week class (``DayType``).
"""

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import ClassVar, FrozenSet, Iterator, Literal, Optional, Set, Tuple, Union

from .config import MINUTES_PER_DAY, EngineConfig, parse_minute_of_day


class RateKind(str, Enum):
    """Discriminator of the rate variants."""

    BASE = "base"
    PROGRESSIVE = "progressive"
    MAX = "max"
    CONDITIONAL_FREE = "conditionalFree"


class DayClass(str, Enum):
    """Billing class of a calendar day."""

    WEEKDAY = "weekday"
    WEEKEND_HOLIDAY = "weekend_holiday"


def day_class_of(day: date, config: EngineConfig) -> DayClass:
    if config.is_weekend_or_holiday(day):
        return DayClass.WEEKEND_HOLIDAY
    return DayClass.WEEKDAY


_TIME_RANGE_PATTERN = re.compile(
    r"^\s*(\d{1,2}:\d{2})\s*[~～〜\-]\s*(\d{1,2}:\d{2})\s*$"
)


@dataclass(frozen=True)
class TimeRange:
    """Clock-time window in minutes of the day.

    ``end_minute < start_minute`` wraps past midnight. Equal endpoints, or
    ``0:00~24:00``, cover the whole day. Containment is start-inclusive and
    end-exclusive.
    """

    start_minute: int
    end_minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.start_minute < MINUTES_PER_DAY:
            raise ValueError(f"start_minute out of range: {self.start_minute}")
        if not 0 <= self.end_minute <= MINUTES_PER_DAY:
            raise ValueError(f"end_minute out of range: {self.end_minute}")

    @classmethod
    def parse(cls, text: str) -> "TimeRange":
        """Parse ``"HH:MM~HH:MM"`` (also ``～``, ``〜`` or ``-`` separated).

        Raises:
            ValueError: If the text is not a valid time range
        """
        if not isinstance(text, str):
            raise ValueError(f"Time range must be a string, got {type(text).__name__}")
        match = _TIME_RANGE_PATTERN.match(text)
        if not match:
            raise ValueError(f"Invalid time range: {text!r}")
        start = parse_minute_of_day(match.group(1))
        end = parse_minute_of_day(match.group(2), allow_end_of_day=True)
        return cls(start, end)

    @property
    def is_all_day(self) -> bool:
        return self.start_minute == self.end_minute % MINUTES_PER_DAY

    @property
    def crosses_midnight(self) -> bool:
        return self.end_minute < self.start_minute

    def contains(self, minute_of_day: int) -> bool:
        """Check whether a minute of the day falls inside this window."""
        if self.is_all_day:
            return True
        if self.crosses_midnight:
            return minute_of_day >= self.start_minute or minute_of_day < self.end_minute
        return self.start_minute <= minute_of_day < self.end_minute

    def boundaries(self) -> FrozenSet[int]:
        """Minutes of the day at which this window opens or closes."""
        if self.is_all_day:
            return frozenset()
        return frozenset({self.start_minute, self.end_minute % MINUTES_PER_DAY})

    def __str__(self) -> str:
        return (
            f"{self.start_minute // 60}:{self.start_minute % 60:02d}"
            f"~{self.end_minute // 60}:{self.end_minute % 60:02d}"
        )


DayTypeKind = Literal["weekday", "weekend_holiday", "daily", "days"]


@dataclass(frozen=True)
class DayType:
    """Day-of-week restriction of a rate.

    ``days`` holds ``date.weekday()`` values for a specific-day list;
    ``holidays`` additionally matches configured public holidays.
    """

    kind: DayTypeKind
    days: FrozenSet[int] = frozenset()
    holidays: bool = False

    def __post_init__(self) -> None:
        if self.kind == "days":
            if not self.days and not self.holidays:
                raise ValueError("A specific-day list must name at least one day")
            if any(not 0 <= day <= 6 for day in self.days):
                raise ValueError(f"Invalid weekday index in {sorted(self.days)}")
        elif self.days or self.holidays:
            raise ValueError(f"Day type '{self.kind}' does not take a day list")

    @property
    def is_scoped(self) -> bool:
        """Whether this day type restricts the days a rate applies on."""
        return self.kind != "daily"

    def matches(self, day: date, config: EngineConfig) -> bool:
        """Check whether a calendar day is covered by this day type."""
        if self.kind == "daily":
            return True
        if self.kind == "days":
            return day.weekday() in self.days or (self.holidays and config.is_holiday(day))
        return day_class_of(day, config).value == self.kind

    def matches_class(self, day_class: DayClass) -> bool:
        """Check this day type against a day class rather than a date.

        Specific-day lists never match a bare class.
        """
        if self.kind == "daily":
            return True
        return self.kind == day_class.value

    def __str__(self) -> str:
        if self.kind != "days":
            return self.kind
        names = [_WEEKDAY_NAMES[day] for day in sorted(self.days)]
        if self.holidays:
            names.append("holiday")
        return ",".join(names)


_WEEKDAY_NAMES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

WEEKDAY = DayType("weekday")
WEEKEND_HOLIDAY = DayType("weekend_holiday")
DAILY = DayType("daily")


class _ScopedRate:
    """Window and day-type matching shared by all rate variants."""

    time_range: Optional[TimeRange]
    day_type: Optional[DayType]

    @property
    def has_time_range(self) -> bool:
        return self.time_range is not None and not self.time_range.is_all_day

    @property
    def has_day_type(self) -> bool:
        return self.day_type is not None and self.day_type.is_scoped

    def applies_on(self, day: date, config: EngineConfig) -> bool:
        return self.day_type is None or self.day_type.matches(day, config)

    def applies_at(self, minute_of_day: int) -> bool:
        return self.time_range is None or self.time_range.contains(minute_of_day)


def _check_price(price: int) -> None:
    if not isinstance(price, int) or isinstance(price, bool):
        raise ValueError(f"price must be an integer, got {price!r}")
    if price < 0:
        raise ValueError("price must be non-negative")


def _check_unit(unit_minutes: int, name: str = "unit_minutes") -> None:
    if not isinstance(unit_minutes, int) or isinstance(unit_minutes, bool):
        raise ValueError(f"{name} must be an integer, got {unit_minutes!r}")
    if unit_minutes <= 0:
        raise ValueError(f"{name} must be positive")


@dataclass(frozen=True)
class BaseRate(_ScopedRate):
    """Ordinary charge of ``price`` per started ``unit_minutes``."""

    kind: ClassVar[RateKind] = RateKind.BASE

    unit_minutes: int
    price: int
    time_range: Optional[TimeRange] = None
    day_type: Optional[DayType] = None

    def __post_init__(self) -> None:
        _check_unit(self.unit_minutes)
        _check_price(self.price)


@dataclass(frozen=True)
class ProgressiveRate(_ScopedRate):
    """Per-unit charge that replaces the base price after ``apply_after`` minutes."""

    kind: ClassVar[RateKind] = RateKind.PROGRESSIVE

    unit_minutes: int
    price: int
    apply_after: int = 0
    time_range: Optional[TimeRange] = None
    day_type: Optional[DayType] = None

    def __post_init__(self) -> None:
        _check_unit(self.unit_minutes)
        _check_price(self.price)
        if not isinstance(self.apply_after, int) or self.apply_after < 0:
            raise ValueError("apply_after must be a non-negative integer")


@dataclass(frozen=True)
class MaxRate(_ScopedRate):
    """Ceiling of ``price`` on the fee accumulated over ``unit_minutes``.

    ``unit_minutes`` of ``None`` means the cap window is unbounded.
    """

    kind: ClassVar[RateKind] = RateKind.MAX

    unit_minutes: Optional[int]
    price: int
    time_range: Optional[TimeRange] = None
    day_type: Optional[DayType] = None

    def __post_init__(self) -> None:
        if self.unit_minutes is not None:
            _check_unit(self.unit_minutes)
        _check_price(self.price)

    @property
    def is_daily_cap(self) -> bool:
        return (
            self.unit_minutes == MINUTES_PER_DAY
            and not self.has_time_range
            and not self.has_day_type
        )

    @property
    def is_rolling_cap(self) -> bool:
        return (
            self.unit_minutes is not None
            and self.unit_minutes < MINUTES_PER_DAY
            and not self.has_time_range
        )

    def covers(self, minutes: int) -> bool:
        """Whether a span of ``minutes`` lies within this cap's window."""
        return self.unit_minutes is None or self.unit_minutes >= minutes


@dataclass(frozen=True)
class ConditionalFreeRate(_ScopedRate):
    """Stays of at most ``unit_minutes`` minutes are free."""

    kind: ClassVar[RateKind] = RateKind.CONDITIONAL_FREE

    unit_minutes: int
    price: int = 0
    time_range: Optional[TimeRange] = None
    day_type: Optional[DayType] = None

    def __post_init__(self) -> None:
        _check_unit(self.unit_minutes, "threshold")
        _check_price(self.price)


Rate = Union[BaseRate, ProgressiveRate, MaxRate, ConditionalFreeRate]


@dataclass(frozen=True)
class TariffTable:
    """Immutable, normalized set of rates for one parking spot."""

    rates: Tuple[Rate, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "rates", tuple(self.rates))

    def __iter__(self) -> Iterator[Rate]:
        return iter(self.rates)

    def __len__(self) -> int:
        return len(self.rates)

    @property
    def base_rates(self) -> Tuple[BaseRate, ...]:
        return tuple(r for r in self.rates if isinstance(r, BaseRate))

    @property
    def progressive_rates(self) -> Tuple[ProgressiveRate, ...]:
        return tuple(r for r in self.rates if isinstance(r, ProgressiveRate))

    @property
    def max_rates(self) -> Tuple[MaxRate, ...]:
        return tuple(r for r in self.rates if isinstance(r, MaxRate))

    @property
    def conditional_free_rates(self) -> Tuple[ConditionalFreeRate, ...]:
        return tuple(r for r in self.rates if isinstance(r, ConditionalFreeRate))

    @property
    def has_billing_rates(self) -> bool:
        """Whether any base or progressive rate exists."""
        return bool(self.base_rates or self.progressive_rates)

    @property
    def daily_cap(self) -> Optional[MaxRate]:
        """Unscoped 24-hour cap; the cheapest one if several exist."""
        caps = [r for r in self.max_rates if r.is_daily_cap]
        return min(caps, key=lambda r: r.price) if caps else None

    def rolling_cap(self, day_class: DayClass) -> Optional[MaxRate]:
        """Shortest bounded cap without a time range that applies to ``day_class``."""
        caps = [
            r
            for r in self.max_rates
            if r.is_rolling_cap and (r.day_type is None or r.day_type.matches_class(day_class))
        ]
        if not caps:
            return None
        return min(caps, key=lambda r: (r.unit_minutes, r.price))

    def boundaries(self) -> Tuple[int, ...]:
        """Sorted minutes of the day at which any rate's time range starts or ends."""
        points: Set[int] = set()
        for rate in self.rates:
            if rate.time_range is not None:
                points |= rate.time_range.boundaries()
        return tuple(sorted(points))
