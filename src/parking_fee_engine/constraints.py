"""Field constraints for raw tariff entries.

This module defines the constraint types the normalizer uses to validate the
numeric and enumerated fields of a tariff entry before building a rate.
"""

import math
from typing import Any, List, Optional

from .errors import TariffValidationError


class NumericConstraint:
    """Constraint for numeric tariff fields."""

    def __init__(
        self,
        min_value: float = 0.0,
        max_value: Optional[float] = None,
        allow_float: bool = True,
        description: str = "",
    ):
        """Initialize numeric constraint.

        Args:
            min_value: Minimum allowed value
            max_value: Maximum allowed value, or None for no upper limit
            allow_float: Whether fractional values are allowed
            description: Description of the field
        """
        self.min_value = min_value
        self.max_value = max_value
        self.allow_float = allow_float
        self.description = description

    def validate(self, name: str, value: Any, index: Optional[int] = None) -> None:
        """Validate a value against this constraint.

        Args:
            name: Field name for error messages
            value: Value to validate
            index: Position of the entry in the raw table

        Raises:
            TariffValidationError: If validation fails
        """
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TariffValidationError(
                f"Field '{name}' must be a number, got {type(value).__name__}.",
                index=index,
                field=name,
                value=value,
            )

        if isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                raise TariffValidationError(
                    f"Field '{name}' must be a finite number.",
                    index=index,
                    field=name,
                    value=value,
                )
            if not self.allow_float and not value.is_integer():
                raise TariffValidationError(
                    f"Field '{name}' must be a whole number, got {value}.\n"
                    f"Description: {self.description}",
                    index=index,
                    field=name,
                    value=value,
                )

        if value < self.min_value or (self.max_value is not None and value > self.max_value):
            max_desc = str(self.max_value) if self.max_value is not None else "unlimited"
            raise TariffValidationError(
                f"Field '{name}' must be between {self.min_value} and {max_desc}.\n"
                f"Description: {self.description}\n"
                f"Current value: {value}",
                index=index,
                field=name,
                value=value,
            )


class EnumConstraint:
    """Constraint for enumerated tariff fields."""

    def __init__(
        self,
        allowed_values: List[str],
        description: str = "",
    ):
        """Initialize enum constraint.

        Args:
            allowed_values: List of allowed string values
            description: Description of the field
        """
        self.allowed_values = allowed_values
        self.description = description

    def validate(self, name: str, value: Any, index: Optional[int] = None) -> None:
        """Validate a value against this constraint.

        Args:
            name: Field name for error messages
            value: Value to validate
            index: Position of the entry in the raw table

        Raises:
            TariffValidationError: If validation fails
        """
        if not isinstance(value, str):
            raise TariffValidationError(
                f"Field '{name}' must be a string, got {type(value).__name__}.",
                index=index,
                field=name,
                value=value,
            )

        if value not in self.allowed_values:
            raise TariffValidationError(
                f"Invalid value '{value}' for field '{name}'.\n"
                f"Description: {self.description}\n"
                f"Allowed values: {', '.join(sorted(self.allowed_values))}",
                index=index,
                field=name,
                value=value,
            )
