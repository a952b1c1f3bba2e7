"""Tests for tariff document version validation and compatibility checking."""

from typing import Any, Dict
from unittest.mock import patch

import pytest

from parking_fee_engine.schema_version import SchemaVersionValidator


class TestSchemaVersionValidator:
    """Test suite for SchemaVersionValidator class."""

    def test_get_schema_version_valid(self) -> None:
        """Test getting a valid version from a document."""
        document: Dict[str, Any] = {"version": "1.0.0", "rates": []}
        assert SchemaVersionValidator.get_schema_version(document) == "1.0.0"

    def test_get_schema_version_missing_uses_default(self) -> None:
        """Test that a missing version uses the default with a warning."""
        document: Dict[str, Any] = {"rates": []}
        with patch("parking_fee_engine.schema_version.log_warning") as mock_log:
            version = SchemaVersionValidator.get_schema_version(document)
            assert version == "1.0.0"
            mock_log.assert_called_once()

    def test_get_schema_version_empty_uses_default(self) -> None:
        """Test that an empty version uses the default with a warning."""
        document: Dict[str, Any] = {"version": "", "rates": []}
        with patch("parking_fee_engine.schema_version.log_warning") as mock_log:
            assert SchemaVersionValidator.get_schema_version(document) == "1.0.0"
            mock_log.assert_called_once()

    def test_get_schema_version_invalid_format(self) -> None:
        """Test that an invalid version raises ValueError."""
        document: Dict[str, Any] = {"version": "invalid.version", "rates": []}
        with patch("parking_fee_engine.schema_version.log_error") as mock_log:
            with pytest.raises(ValueError, match="Invalid document version format"):
                SchemaVersionValidator.get_schema_version(document)
            mock_log.assert_called_once()

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (1, "1.0.0"),
            ("1", "1.0.0"),
            (1.2, "1.2.0"),
            ("1.2", "1.2.0"),
            ("1.2.3", "1.2.3"),
        ],
    )
    def test_get_schema_version_shorthands(self, raw: Any, expected: str) -> None:
        """Test that short and non-string versions are normalized."""
        assert SchemaVersionValidator.get_schema_version({"version": raw}) == expected

    def test_is_compatible_schema_valid_1x(self) -> None:
        """Test compatibility check for 1.x versions."""
        assert SchemaVersionValidator.is_compatible_schema("1.0.0") is True
        assert SchemaVersionValidator.is_compatible_schema("1.4.2") is True
        assert SchemaVersionValidator.is_compatible_schema("1.0.0-beta.1") is True

    def test_is_compatible_schema_invalid_versions(self) -> None:
        """Test compatibility check for unsupported and malformed versions."""
        assert SchemaVersionValidator.is_compatible_schema("0.9.9") is False
        assert SchemaVersionValidator.is_compatible_schema("2.0.0") is False
        assert SchemaVersionValidator.is_compatible_schema("invalid") is False
        assert SchemaVersionValidator.is_compatible_schema("") is False

    def test_get_compatible_range(self) -> None:
        """Test getting the compatible range name."""
        assert SchemaVersionValidator.get_compatible_range("1.3.0") == "1.x"
        assert SchemaVersionValidator.get_compatible_range("2.0.0") is None
        assert SchemaVersionValidator.get_compatible_range("invalid") is None
