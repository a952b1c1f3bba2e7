"""Fee calculation result objects.

This module defines the values the engine hands back to its caller: the
``UNDETERMINED`` sentinel, per-segment diagnostics and the detailed
calculation result.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Union


class Undetermined(Enum):
    """Sentinel type for a fee that could not be determined."""

    UNDETERMINED = "undetermined"

    def __repr__(self) -> str:
        return "UNDETERMINED"


UNDETERMINED = Undetermined.UNDETERMINED

FeeResult = Union[int, Undetermined]


class DiagnosticKind(str, Enum):
    """Kinds of non-fatal findings recorded during a calculation."""

    UNRESOLVED_SEGMENT = "unresolved_segment"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal finding about part of a stay.

    Attributes:
        kind: What was found
        start: Start of the affected sub-interval
        end: End of the affected sub-interval
        message: Human readable description
    """

    kind: DiagnosticKind
    start: datetime
    end: datetime
    message: str


@dataclass
class FeeCalculation:
    """Result of a fee calculation.

    Attributes:
        fee: Final fee in the minor currency unit, or ``UNDETERMINED``
        minutes: Billed duration in whole minutes
        diagnostics: Unresolved sub-intervals, so callers can tell a
            confirmed free stay from a gap in the tariff rules
    """

    fee: FeeResult
    minutes: int = 0
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def is_determined(self) -> bool:
        return self.fee is not UNDETERMINED

    @property
    def has_gaps(self) -> bool:
        return any(d.kind is DiagnosticKind.UNRESOLVED_SEGMENT for d in self.diagnostics)
