"""Tariff normalizer.

Turns raw tariff entries, as produced by upstream ingestion, into typed
:mod:`rates` records. Upstream rows use inconsistent field names (camelCase,
snake_case, the legacy ``minutes`` field) and free-form day-type labels in
English or Japanese; all of them resolve to one canonical representation
here. Anything that cannot be resolved without guessing a price or a billing
unit is rejected with :class:`TariffValidationError`.
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .constraints import EnumConstraint, NumericConstraint
from .errors import TariffValidationError
from .logging import LogEvent, log_debug, log_warning
from .rates import (
    DAILY,
    WEEKDAY,
    WEEKEND_HOLIDAY,
    BaseRate,
    ConditionalFreeRate,
    DayType,
    MaxRate,
    ProgressiveRate,
    Rate,
    RateKind,
    TariffTable,
    TimeRange,
)

_FIELD_ALIASES: Dict[str, Sequence[str]] = {
    "type": ("type", "rate_type", "rateType"),
    "unit_minutes": ("unitMinutes", "unit_minutes", "minutes"),
    "price": ("price",),
    "time_range": ("timeRange", "time_range"),
    "day_type": ("dayType", "day_type"),
    "apply_after": ("applyAfter", "apply_after"),
}

_TYPE_ALIASES: Dict[str, RateKind] = {
    "base": RateKind.BASE,
    "progressive": RateKind.PROGRESSIVE,
    "max": RateKind.MAX,
    "conditionalFree": RateKind.CONDITIONAL_FREE,
    "conditional_free": RateKind.CONDITIONAL_FREE,
    "conditional-free": RateKind.CONDITIONAL_FREE,
}

RATE_TYPE = EnumConstraint(
    allowed_values=list(_TYPE_ALIASES),
    description="Kind of tariff rule",
)
UNIT_MINUTES = NumericConstraint(
    min_value=1,
    allow_float=False,
    description="Billing unit length in minutes",
)
CAP_WINDOW_MINUTES = NumericConstraint(
    min_value=0,
    allow_float=False,
    description="Cap window in minutes (0 or missing for unbounded)",
)
PRICE = NumericConstraint(
    min_value=0,
    allow_float=False,
    description="Price in the minor currency unit",
)
APPLY_AFTER = NumericConstraint(
    min_value=0,
    allow_float=False,
    description="Minutes after which a progressive rate applies",
)

_DAY_TYPE_ALIASES: Dict[str, DayType] = {
    "weekday": WEEKDAY,
    "weekdays": WEEKDAY,
    "平日": WEEKDAY,
    "weekend_holiday": WEEKEND_HOLIDAY,
    "weekend": WEEKEND_HOLIDAY,
    "weekends": WEEKEND_HOLIDAY,
    "休日": WEEKEND_HOLIDAY,
    "土日祝": WEEKEND_HOLIDAY,
    "土日祝日": WEEKEND_HOLIDAY,
    "daily": DAILY,
    "all": DAILY,
    "全日": DAILY,
    "毎日": DAILY,
}

_DAY_NAMES: Dict[str, Optional[int]] = {
    "mon": 0, "monday": 0, "月": 0,
    "tue": 1, "tuesday": 1, "火": 1,
    "wed": 2, "wednesday": 2, "水": 2,
    "thu": 3, "thursday": 3, "木": 3,
    "fri": 4, "friday": 4, "金": 4,
    "sat": 5, "saturday": 5, "土": 5,
    "sun": 6, "sunday": 6, "日": 6,
    # None marks the public-holiday token
    "holiday": None, "holidays": None, "祝": None, "祝日": None,
}

_DAY_SPAN = re.compile(r"^(\w+?)\s*[~～〜\-]\s*(\w+)$")
_DAY_SEPARATORS = re.compile(r"[,、・/\s]+")
_CURRENCY_NOISE = re.compile(r"[¥￥円,\s]")


def _field(entry: Mapping[str, Any], name: str) -> Any:
    for key in _FIELD_ALIASES[name]:
        if key in entry and entry[key] is not None:
            return entry[key]
    return None


def _coerce_number(value: Any, name: str, index: int) -> Union[int, float]:
    """Coerce numeric strings such as ``"¥1,200"`` to numbers."""
    if isinstance(value, str):
        cleaned = _CURRENCY_NOISE.sub("", value)
        try:
            return int(cleaned)
        except ValueError:
            try:
                return float(cleaned)
            except ValueError:
                raise TariffValidationError(
                    f"Field '{name}' is not numeric: {value!r}",
                    index=index,
                    field=name,
                    value=value,
                ) from None
    return value


def _integer_field(
    entry: Mapping[str, Any],
    name: str,
    constraint: NumericConstraint,
    index: int,
) -> Optional[int]:
    raw = _field(entry, name)
    if raw is None:
        return None
    value = _coerce_number(raw, name, index)
    constraint.validate(name, value, index)
    return int(value)


def _price(entry: Mapping[str, Any], index: int, required: bool) -> int:
    raw = _field(entry, "price")
    if raw is None:
        if required:
            raise TariffValidationError("Missing required field 'price'", index=index, field="price")
        return 0
    value = _coerce_number(raw, "price", index)
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0:
        log_warning(
            LogEvent.TARIFF_NORMALIZATION,
            "Negative price clamped to 0",
            index=index,
            price=value,
        )
        value = 0
    PRICE.validate("price", value, index)
    return int(value)


def parse_day_type(value: Any) -> Optional[DayType]:
    """Resolve a raw day-type label into a :class:`DayType`.

    Accepts the canonical names, English and Japanese labels, specific-day
    lists (``["sat", "holiday"]``, ``"土"``, ``"日祝"``, ``"mon,wed"``) and
    day spans (``"mon-fri"``, ``"月～水"``).

    Raises:
        ValueError: If the label cannot be resolved
    """
    if value is None or isinstance(value, DayType):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        tokens: List[str] = [str(item).strip().lower() for item in value]
        return _day_list(tokens, value)
    if not isinstance(value, str):
        raise ValueError(f"Day type must be a string or a list, got {type(value).__name__}")

    text = value.strip()
    if not text:
        return None
    canonical = _DAY_TYPE_ALIASES.get(text.lower())
    if canonical is not None:
        return canonical

    tokens = []
    for part in _DAY_SEPARATORS.split(text.lower()):
        if not part:
            continue
        span = _DAY_SPAN.match(part)
        if part in _DAY_NAMES:
            tokens.append(part)
        elif span and span.group(1) in _DAY_NAMES and span.group(2) in _DAY_NAMES:
            tokens.extend(_day_span(span.group(1), span.group(2), value))
        elif all(char in _DAY_NAMES for char in part.replace("祝日", "祝")):
            tokens.extend(part.replace("祝日", "祝"))
        else:
            raise ValueError(f"Unrecognised day type: {value!r}")
    return _day_list(tokens, value)


def _day_span(first: str, last: str, original: Any) -> List[str]:
    start, end = _DAY_NAMES[first], _DAY_NAMES[last]
    if start is None or end is None:
        raise ValueError(f"Holidays cannot bound a day span: {original!r}")
    days = []
    day = start
    while True:
        days.append(("mon", "tue", "wed", "thu", "fri", "sat", "sun")[day])
        if day == end:
            return days
        day = (day + 1) % 7


def _day_list(tokens: List[str], original: Any) -> DayType:
    days = set()
    holidays = False
    for token in tokens:
        if token not in _DAY_NAMES:
            raise ValueError(f"Unrecognised day name {token!r} in {original!r}")
        day = _DAY_NAMES[token]
        if day is None:
            holidays = True
        else:
            days.add(day)
    if not days and not holidays:
        raise ValueError(f"Empty day list: {original!r}")
    if days == {0, 1, 2, 3, 4} and not holidays:
        return WEEKDAY
    if days == set(range(7)):
        return DAILY
    return DayType("days", frozenset(days), holidays)


def _scope(entry: Mapping[str, Any], index: int) -> Dict[str, Any]:
    raw_range = _field(entry, "time_range")
    time_range = None
    if raw_range is not None and raw_range != "":
        try:
            time_range = raw_range if isinstance(raw_range, TimeRange) else TimeRange.parse(raw_range)
        except ValueError as e:
            raise TariffValidationError(str(e), index=index, field="time_range", value=raw_range) from e

    raw_day_type = _field(entry, "day_type")
    try:
        day_type = parse_day_type(raw_day_type)
    except ValueError as e:
        raise TariffValidationError(str(e), index=index, field="day_type", value=raw_day_type) from e
    return {"time_range": time_range, "day_type": day_type}


def normalize_rate(entry: Union[Mapping[str, Any], Rate], index: int = 0) -> Rate:
    """Normalize a single raw tariff entry.

    Args:
        entry: Raw mapping (or an already-typed rate, returned unchanged)
        index: Position of the entry, used in error reports

    Returns:
        The typed rate

    Raises:
        TariffValidationError: If the entry cannot be normalized
    """
    if isinstance(entry, (BaseRate, ProgressiveRate, MaxRate, ConditionalFreeRate)):
        return entry
    if not isinstance(entry, Mapping):
        raise TariffValidationError(
            f"Tariff entry must be a mapping, got {type(entry).__name__}",
            index=index,
            value=entry,
        )

    raw_type = _field(entry, "type")
    if raw_type is None:
        log_debug(LogEvent.TARIFF_NORMALIZATION, "Missing rate type, defaulting to base", index=index)
        raw_type = RateKind.BASE.value
    if isinstance(raw_type, RateKind):
        raw_type = raw_type.value
    RATE_TYPE.validate("type", raw_type, index)
    kind = _TYPE_ALIASES[raw_type]
    scope = _scope(entry, index)

    if kind is RateKind.MAX:
        window = _integer_field(entry, "unit_minutes", CAP_WINDOW_MINUTES, index)
        return MaxRate(window or None, _price(entry, index, required=True), **scope)

    unit_minutes = _integer_field(entry, "unit_minutes", UNIT_MINUTES, index)
    if unit_minutes is None:
        field_name = "threshold" if kind is RateKind.CONDITIONAL_FREE else "unit_minutes"
        raise TariffValidationError(
            f"Missing required field '{field_name}' on {kind.value} rate",
            index=index,
            field="unit_minutes",
        )

    if kind is RateKind.CONDITIONAL_FREE:
        return ConditionalFreeRate(unit_minutes, _price(entry, index, required=False), **scope)

    price = _price(entry, index, required=True)
    if kind is RateKind.BASE:
        return BaseRate(unit_minutes, price, **scope)

    apply_after = _integer_field(entry, "apply_after", APPLY_AFTER, index)
    if apply_after is None:
        log_debug(LogEvent.TARIFF_NORMALIZATION, "Progressive rate without applyAfter, using 0", index=index)
        apply_after = 0
    return ProgressiveRate(unit_minutes, price, apply_after, **scope)


def normalize_tariff(entries: Union[TariffTable, Iterable[Union[Mapping[str, Any], Rate]]]) -> TariffTable:
    """Normalize a raw tariff table.

    Args:
        entries: Raw entries for one parking spot, or an existing table

    Returns:
        The normalized, immutable tariff table

    Raises:
        TariffValidationError: If any entry is invalid; no entry is dropped
    """
    if isinstance(entries, TariffTable):
        return entries
    if entries is None or isinstance(entries, (str, bytes, Mapping)):
        raise TariffValidationError("Tariff table must be a list of rate entries", value=entries)

    table = TariffTable(tuple(normalize_rate(entry, index) for index, entry in enumerate(entries)))
    log_debug(
        LogEvent.TARIFF_NORMALIZATION,
        "Tariff table normalized",
        rates=len(table),
        base=len(table.base_rates),
        progressive=len(table.progressive_rates),
        max=len(table.max_rates),
        conditional_free=len(table.conditional_free_rates),
    )
    return table
