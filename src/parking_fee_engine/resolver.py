"""Segment fee resolution.

For every segment of a span the resolver picks the applicable base,
progressive and max rates, groups consecutive segments with the same
selection into billing runs, prices each run with ceiling unit billing and
clamps each cap window to its max rate.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence, TypeVar, Union

from .config import EngineConfig
from .decomposer import TimeSegment, minutes_between, split_segments
from .logging import LogEvent, log_debug, log_warning
from .rates import BaseRate, MaxRate, ProgressiveRate, Rate, TariffTable
from .results import Diagnostic, DiagnosticKind

R = TypeVar("R", bound=Rate)


def specificity(rate: Rate) -> int:
    """Score a rate: a time range outranks a day type, which outranks neither."""
    return 2 * int(rate.has_time_range) + int(rate.has_day_type)


def select_most_specific(candidates: Sequence[R]) -> Optional[R]:
    """Pick the most specific rate; ties go to the lower price, then to table order.

    This is the only place the specificity tie-break is defined.
    """
    best: Optional[R] = None
    for rate in candidates:
        if best is None or (specificity(rate), -rate.price) > (specificity(best), -best.price):
            best = rate
    return best


def applicable_rates(table: TariffTable, moment: datetime, config: EngineConfig) -> List[Rate]:
    """Rates whose day type and time range cover ``moment``."""
    minute_of_day = moment.hour * 60 + moment.minute
    day = moment.date()
    return [r for r in table if r.applies_on(day, config) and r.applies_at(minute_of_day)]


@dataclass(frozen=True)
class RateSelection:
    """Rates governing one segment."""

    base: Optional[BaseRate] = None
    progressive: Optional[ProgressiveRate] = None
    max: Optional[MaxRate] = None

    @property
    def is_resolved(self) -> bool:
        return self.base is not None or self.progressive is not None


def resolve_rates(table: TariffTable, moment: datetime, config: EngineConfig) -> RateSelection:
    """Select the base, progressive and max rate in force at ``moment``."""
    rates = applicable_rates(table, moment, config)
    return RateSelection(
        base=select_most_specific([r for r in rates if isinstance(r, BaseRate)]),
        progressive=select_most_specific([r for r in rates if isinstance(r, ProgressiveRate)]),
        max=select_most_specific([r for r in rates if isinstance(r, MaxRate)]),
    )


def unit_fee(minutes: int, rate: Optional[Union[BaseRate, ProgressiveRate]] = None) -> int:
    """Bill ``minutes`` at ``rate``, rounding up to whole units."""
    if rate is None or minutes <= 0:
        return 0
    return -(-minutes // rate.unit_minutes) * rate.price


@dataclass
class BillingRun:
    """Consecutive segments sharing one rate selection."""

    start: datetime
    end: datetime
    selection: RateSelection

    @property
    def minutes(self) -> int:
        return minutes_between(self.start, self.end)


def group_runs(
    table: TariffTable,
    segments: Sequence[TimeSegment],
    config: EngineConfig,
) -> List[BillingRun]:
    runs: List[BillingRun] = []
    for segment in segments:
        selection = resolve_rates(table, segment.start, config)
        if runs and runs[-1].selection == selection:
            runs[-1].end = segment.end
        else:
            runs.append(BillingRun(segment.start, segment.end, selection))
    return runs


def price_run(run: BillingRun, elapsed: int) -> int:
    """Raw fee of a run.

    Args:
        run: The billing run
        elapsed: Minutes of the progressive rate's scope already used
            before the run starts

    Returns:
        Fee before caps
    """
    base, progressive = run.selection.base, run.selection.progressive
    minutes = run.minutes
    if progressive is None or elapsed + minutes <= progressive.apply_after:
        return unit_fee(minutes, base)
    before = min(minutes, max(0, progressive.apply_after - elapsed))
    return unit_fee(before, base) + unit_fee(minutes - before, progressive)


@dataclass
class SpanFee:
    """Fee of one span with segment-level caps applied."""

    fee: int = 0
    resolved: bool = False
    diagnostics: List[Diagnostic] = field(default_factory=list)


class _CapWindow:
    """Consecutive runs that selected the same max rate, up to the cap's window length."""

    def __init__(self, cap: Optional[MaxRate]):
        self.cap = cap
        self.fee = 0
        self.minutes = 0

    @property
    def is_full(self) -> bool:
        cap = self.cap
        return cap is not None and cap.unit_minutes is not None and self.minutes >= cap.unit_minutes

    def pieces(self, run: BillingRun) -> List[BillingRun]:
        """Cut ``run`` wherever this window, and the windows after it, fill up."""
        if self.cap is None or self.cap.unit_minutes is None:
            return [run]
        unit = self.cap.unit_minutes
        room = unit - self.minutes if self.minutes < unit else unit
        pieces: List[BillingRun] = []
        cursor = run.start
        while cursor < run.end:
            stop = min(cursor + timedelta(minutes=room), run.end)
            pieces.append(BillingRun(cursor, stop, run.selection))
            cursor = stop
            room = unit
        return pieces

    def close(self) -> int:
        if self.cap is not None and self.cap.covers(self.minutes) and self.fee > self.cap.price:
            log_debug(
                LogEvent.SEGMENT_RESOLUTION,
                "Segment cap engaged",
                raw_fee=self.fee,
                cap=self.cap.price,
                minutes=self.minutes,
            )
            return self.cap.price
        return self.fee


def price_span(
    table: TariffTable,
    start: datetime,
    end: datetime,
    config: EngineConfig,
) -> SpanFee:
    """Price a span segment by segment.

    Progressive thresholds count from the span start for a progressive rate
    without a time range, otherwise from the moment that rate came into
    force. A bounded cap window closes once it holds ``unit_minutes`` and the
    next minutes under the same cap open a new window. Segments with neither
    a base nor a progressive rate contribute nothing and are reported as
    diagnostics.
    """
    result = SpanFee()
    runs = group_runs(table, split_segments(table, start, end, config), config)

    window = _CapWindow(None)
    scope_rate: Optional[ProgressiveRate] = None
    scope_start = start
    for run in runs:
        selection = run.selection
        if selection.max != window.cap:
            result.fee += window.close()
            window = _CapWindow(selection.max)

        if not selection.is_resolved:
            message = f"No base or progressive rate covers {run.start:%Y-%m-%d %H:%M}-{run.end:%H:%M}"
            log_warning(
                LogEvent.SEGMENT_RESOLUTION,
                message,
                start=run.start.isoformat(),
                end=run.end.isoformat(),
            )
            result.diagnostics.append(
                Diagnostic(DiagnosticKind.UNRESOLVED_SEGMENT, run.start, run.end, message)
            )
            scope_rate = None
        else:
            result.resolved = True
            if selection.progressive is not None and selection.progressive != scope_rate:
                scope_start = run.start if selection.progressive.has_time_range else start
            scope_rate = selection.progressive

        for piece in window.pieces(run):
            if window.is_full:
                result.fee += window.close()
                window = _CapWindow(selection.max)
            if selection.is_resolved:
                window.fee += price_run(piece, minutes_between(scope_start, piece.start))
            window.minutes += piece.minutes

    result.fee += window.close()
    return result


def conditional_free_applies(
    table: TariffTable,
    start: datetime,
    minutes: int,
    config: EngineConfig,
) -> bool:
    """Whether a conditional-free rule in force at ``start`` covers a stay of ``minutes``."""
    day: date = start.date()
    minute_of_day = start.hour * 60 + start.minute
    return any(
        r.applies_on(day, config) and r.applies_at(minute_of_day) and minutes <= r.unit_minutes
        for r in table.conditional_free_rates
    )
