"""Fee calculation engine for time-metered parking.

This package computes the fee owed for a stay at a parking spot from the
spot's tariff table: per-unit base rates, progressive rates, maximum-charge
caps, conditional-free thresholds, day-of-week classes and clock-time windows
that may wrap past midnight.
"""

# Version of the package
try:
    from importlib.metadata import version as _version

    __version__ = _version("parking-fee-engine")
except ImportError:
    # Require importlib.metadata which is standard in Python 3.8+
    raise ImportError(
        "Failed to determine package version. This package requires Python 3.8+ "
        "where importlib.metadata is available, or must be installed as a package."
    )

# Import main components for easier access
from .config import EngineConfig
from .constraints import EnumConstraint, NumericConstraint
from .documents import TariffDocument, load_tariff_document, load_tariff_file
from .engine import FeeEngine, compute_fee
from .errors import (
    FeeEngineError,
    InvalidIntervalError,
    TariffDocumentError,
    TariffValidationError,
)
from .normalizer import normalize_rate, normalize_tariff, parse_day_type
from .rates import (
    BaseRate,
    ConditionalFreeRate,
    DayClass,
    DayType,
    MaxRate,
    ProgressiveRate,
    Rate,
    RateKind,
    TariffTable,
    TimeRange,
)
from .resolver import select_most_specific
from .results import (
    UNDETERMINED,
    Diagnostic,
    DiagnosticKind,
    FeeCalculation,
    FeeResult,
    Undetermined,
)

# Define public API
__all__ = [
    # Calculation
    "compute_fee",
    "FeeEngine",
    "EngineConfig",
    "FeeCalculation",
    "FeeResult",
    "UNDETERMINED",
    "Undetermined",
    "Diagnostic",
    "DiagnosticKind",
    # Tariffs
    "normalize_tariff",
    "normalize_rate",
    "parse_day_type",
    "select_most_specific",
    "TariffTable",
    "Rate",
    "RateKind",
    "BaseRate",
    "ProgressiveRate",
    "MaxRate",
    "ConditionalFreeRate",
    "TimeRange",
    "DayType",
    "DayClass",
    # Documents
    "TariffDocument",
    "load_tariff_document",
    "load_tariff_file",
    # Constraints
    "NumericConstraint",
    "EnumConstraint",
    # Errors
    "FeeEngineError",
    "TariffValidationError",
    "InvalidIntervalError",
    "TariffDocumentError",
]
