"""Tests for the constraint classes."""

import pytest

from parking_fee_engine.constraints import EnumConstraint, NumericConstraint
from parking_fee_engine.errors import TariffValidationError


def test_numeric_constraint_initialization() -> None:
    """Test NumericConstraint initialization."""
    constraint = NumericConstraint()
    assert constraint.min_value == 0.0
    assert constraint.max_value is None
    assert constraint.allow_float is True
    assert constraint.description == ""

    constraint = NumericConstraint(
        min_value=1,
        max_value=1440,
        allow_float=False,
        description="Billing unit length in minutes",
    )
    assert constraint.min_value == 1
    assert constraint.max_value == 1440
    assert constraint.allow_float is False
    assert constraint.description == "Billing unit length in minutes"


def test_numeric_constraint_validation() -> None:
    """Test NumericConstraint validation."""
    constraint = NumericConstraint(min_value=1, max_value=100, allow_float=False)

    # Valid values
    constraint.validate("unit_minutes", 1)
    constraint.validate("unit_minutes", 100)
    constraint.validate("unit_minutes", 30.0)

    # Out of range
    with pytest.raises(TariffValidationError) as exc_info:
        constraint.validate("unit_minutes", 0, index=3)
    assert exc_info.value.index == 3
    assert exc_info.value.field == "unit_minutes"
    assert exc_info.value.value == 0
    assert "must be between 1 and 100" in str(exc_info.value)

    with pytest.raises(TariffValidationError):
        constraint.validate("unit_minutes", 101)

    # Fractional
    with pytest.raises(TariffValidationError, match="whole number"):
        constraint.validate("unit_minutes", 30.5)


def test_numeric_constraint_rejects_non_numbers() -> None:
    """Test that booleans, strings and non-finite values are rejected."""
    constraint = NumericConstraint()

    with pytest.raises(TariffValidationError, match="must be a number"):
        constraint.validate("price", True)
    with pytest.raises(TariffValidationError, match="must be a number"):
        constraint.validate("price", "200")
    with pytest.raises(TariffValidationError, match="finite"):
        constraint.validate("price", float("nan"))
    with pytest.raises(TariffValidationError, match="finite"):
        constraint.validate("price", float("inf"))


def test_numeric_constraint_allows_float() -> None:
    """Test that fractional values pass when floats are allowed."""
    constraint = NumericConstraint(min_value=0.0, max_value=1.0)
    constraint.validate("ratio", 0.5)


def test_enum_constraint() -> None:
    """Test EnumConstraint validation."""
    constraint = EnumConstraint(
        allowed_values=["base", "progressive", "max"],
        description="Kind of tariff rule",
    )
    assert constraint.allowed_values == ["base", "progressive", "max"]
    assert constraint.description == "Kind of tariff rule"

    constraint.validate("type", "base")
    constraint.validate("type", "max")

    with pytest.raises(TariffValidationError) as exc_info:
        constraint.validate("type", "hourly", index=0)
    assert exc_info.value.field == "type"
    assert exc_info.value.value == "hourly"
    assert "Allowed values: base, max, progressive" in str(exc_info.value)

    with pytest.raises(TariffValidationError, match="must be a string"):
        constraint.validate("type", 1)
