"""Error types for the parking fee engine.

This module defines the error types raised when a tariff table, a parking
interval or a tariff document cannot be used for a fee calculation.
"""

from datetime import datetime
from typing import Any, Optional


class FeeEngineError(Exception):
    """Base class for all fee-engine errors.

    This is the parent class for all engine-specific exceptions.
    """

    pass


class TariffValidationError(FeeEngineError):
    """Raised when a raw tariff entry cannot be normalized into a rate.

    A rejected entry is never dropped or repaired with a guessed price or
    billing unit; the whole table is refused instead.

    Examples:
        >>> try:
        ...     normalize_tariff([{"type": "base", "price": 200}])
        ... except TariffValidationError as e:
        ...     print(f"Entry {e.index}: bad {e.field}")
    """

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        field: Optional[str] = None,
        value: Any = None,
    ) -> None:
        """Initialize tariff validation error.

        Args:
            message: Error message
            index: Position of the offending entry in the raw table
            field: Name of the offending field, if any
            value: The value that failed validation
        """
        super().__init__(message)
        self.message = message
        self.index = index
        self.field = field
        self.value = value

    def __str__(self) -> str:
        """Return string representation of the error.

        Returns:
            Error message, prefixed with the entry position when known
        """
        if self.index is None:
            return self.message
        return f"rate #{self.index}: {self.message}"


class InvalidIntervalError(FeeEngineError):
    """Raised when a parking interval cannot be billed.

    Examples:
        >>> try:
        ...     compute_fee(table, end, start)
        ... except InvalidIntervalError as e:
        ...     print(f"Invalid interval: {e.start} -> {e.end}")
    """

    def __init__(
        self,
        message: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> None:
        """Initialize invalid interval error.

        Args:
            message: Error message
            start: Requested start of the stay
            end: Requested end of the stay
        """
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end


class TariffDocumentError(FeeEngineError):
    """Raised when a tariff document cannot be read or is unsupported.

    Examples:
        >>> try:
        ...     load_tariff_file("spot.yml")
        ... except TariffDocumentError as e:
        ...     print(f"Bad tariff document {e.path}: {e}")
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """Initialize tariff document error.

        Args:
            message: Error message
            path: Optional path to the document that caused the error
        """
        super().__init__(message)
        self.message = message
        self.path = path
