"""Fee aggregation and the public calculation entry points.

The engine normalizes the tariff, decomposes the stay, prices every span
through the resolver and folds the results through an ordered pipeline of
cap stages, innermost first:

1. segment caps (applied by the resolver per cap window)
2. rolling-window caps (each window of a chunk clamped on its own)
3. period cap (every unscoped-by-time cap covering the chunk, matched
   against the day the chunk starts on)
4. chunk cap (the daily cap of a whole-day chunk)

Typical usage:

    from parking_fee_engine import compute_fee

    fee = compute_fee(rates, start, end)
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, Union

from .config import DEFAULT_CONFIG, EngineConfig
from .decomposer import Chunk, ParkingInterval, decompose
from .logging import LogEvent, log_debug, log_info
from .normalizer import normalize_tariff
from .rates import DayClass, MaxRate, Rate, TariffTable, day_class_of
from .resolver import conditional_free_applies, price_span, resolve_rates, select_most_specific
from .results import UNDETERMINED, Diagnostic, FeeCalculation, FeeResult

TariffInput = Union[TariffTable, Iterable[Union[Mapping[str, Any], Rate]]]


@dataclass
class _StageContext:
    """What a cap stage may look at while folding one chunk."""

    table: TariffTable
    chunk: Chunk
    day_class: DayClass
    start_day: date


@dataclass
class _ChunkFee:
    fee: int = 0
    resolved: bool = False
    diagnostics: List[Diagnostic] = field(default_factory=list)


def _period_caps(table: TariffTable, minutes: int, day_class: DayClass, start_day: date, config: EngineConfig) -> List[MaxRate]:
    caps = []
    for rate in table.max_rates:
        if rate.has_time_range or not rate.covers(minutes):
            continue
        day_type = rate.day_type
        if day_type is None or day_type.matches_class(day_class):
            caps.append(rate)
        elif day_type.kind == "days" and day_type.matches(start_day, config):
            caps.append(rate)
    return caps


class FeeEngine:
    """Stateless fee calculator bound to one configuration."""

    def __init__(self, config: Optional[EngineConfig] = None):
        """Initialize the engine.

        Args:
            config: Engine configuration. If None, the default configuration
                    (Saturday/Sunday weekends, no holidays) is used.
        """
        self.config = config or DEFAULT_CONFIG
        self._cap_stages: Tuple[Callable[[int, _StageContext], int], ...] = (
            self._apply_period_cap,
            self._apply_chunk_cap,
        )

    def calculate(self, tariff: TariffInput, start: Any, end: Any) -> FeeCalculation:
        """Calculate the fee for a stay, with diagnostics.

        Args:
            tariff: Tariff table, or raw tariff entries for one spot
            start: Stay start (inclusive)
            end: Stay end (exclusive)

        Returns:
            FeeCalculation with the fee or ``UNDETERMINED``

        Raises:
            TariffValidationError: If the tariff table is malformed
            InvalidIntervalError: If the interval is invalid
        """
        table = normalize_tariff(tariff)
        interval = ParkingInterval.from_timestamps(start, end)
        minutes = interval.minutes

        if minutes == 0:
            return FeeCalculation(fee=0, minutes=0)
        if not table.has_billing_rates and not table.max_rates:
            log_info(LogEvent.FEE_AGGREGATION, "Tariff has no billable rates", rates=len(table))
            return FeeCalculation(fee=UNDETERMINED, minutes=minutes)
        if conditional_free_applies(table, interval.start, minutes, self.config):
            log_debug(LogEvent.FEE_AGGREGATION, "Stay within conditional-free threshold", minutes=minutes)
            return FeeCalculation(fee=0, minutes=minutes)

        if not table.has_billing_rates:
            return FeeCalculation(fee=self._cap_only_fee(table, interval), minutes=minutes)

        chunks = decompose(table, interval.start, interval.end, self.config)

        total = 0
        resolved = False
        diagnostics: List[Diagnostic] = []
        for chunk in chunks:
            chunk_fee = self._chunk_fee(table, chunk)
            total += chunk_fee.fee
            resolved = resolved or chunk_fee.resolved
            diagnostics.extend(chunk_fee.diagnostics)

        if not resolved:
            log_info(
                LogEvent.FEE_AGGREGATION,
                "No rate applies to any part of the stay",
                start=interval.start.isoformat(),
                end=interval.end.isoformat(),
            )
            return FeeCalculation(fee=UNDETERMINED, minutes=minutes, diagnostics=diagnostics)

        log_debug(
            LogEvent.FEE_AGGREGATION,
            "Fee calculated",
            fee=total,
            minutes=minutes,
            chunks=len(chunks),
        )
        return FeeCalculation(fee=total, minutes=minutes, diagnostics=diagnostics)

    def _chunk_fee(self, table: TariffTable, chunk: Chunk) -> _ChunkFee:
        result = _ChunkFee()
        for span in chunk.windows or (chunk,):
            span_fee = price_span(table, span.start, span.end, self.config)
            fee = span_fee.fee
            # rolling windows carry their own cap
            if span is not chunk and span.cap is not None:
                fee = min(fee, span.cap.price)
            result.fee += fee
            result.resolved = result.resolved or span_fee.resolved
            result.diagnostics.extend(span_fee.diagnostics)

        start_day = chunk.start.date()
        context = _StageContext(table, chunk, day_class_of(start_day, self.config), start_day)
        for stage in self._cap_stages:
            result.fee = stage(result.fee, context)
        return result

    def _apply_period_cap(self, fee: int, context: _StageContext) -> int:
        caps = _period_caps(
            context.table,
            context.chunk.minutes,
            context.day_class,
            context.start_day,
            self.config,
        )
        if not caps:
            return fee
        ceiling = min(cap.price for cap in caps)
        if fee > ceiling:
            log_debug(LogEvent.FEE_AGGREGATION, "Period cap engaged", raw_fee=fee, cap=ceiling)
            return ceiling
        return fee

    def _apply_chunk_cap(self, fee: int, context: _StageContext) -> int:
        cap = context.chunk.cap
        if cap is None:
            return fee
        return min(fee, cap.price)

    def _cap_only_fee(self, table: TariffTable, interval: ParkingInterval) -> FeeResult:
        """Fee for a tariff made only of caps: the cap price per started cap window."""
        cap = resolve_rates(table, interval.start, self.config).max
        if cap is None:
            cap = select_most_specific(
                _period_caps(
                    table,
                    interval.minutes,
                    day_class_of(interval.start.date(), self.config),
                    interval.start.date(),
                    self.config,
                )
            )
        if cap is None:
            return UNDETERMINED
        if cap.unit_minutes is None:
            return cap.price
        windows = -(-interval.minutes // cap.unit_minutes)
        return windows * cap.price


def compute_fee(
    tariff: TariffInput,
    start: Any,
    end: Any,
    config: Optional[EngineConfig] = None,
) -> FeeResult:
    """Compute the fee owed for a stay.

    Args:
        tariff: Tariff table, or raw tariff entries for one spot
        start: Stay start (inclusive)
        end: Stay end (exclusive)
        config: Optional engine configuration

    Returns:
        The fee in the minor currency unit, or ``UNDETERMINED``

    Raises:
        TariffValidationError: If the tariff table is malformed
        InvalidIntervalError: If the interval is invalid
    """
    return FeeEngine(config).calculate(tariff, start, end).fee
