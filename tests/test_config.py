"""Tests for engine configuration."""

from datetime import date

import pytest

from parking_fee_engine.config import DEFAULT_CONFIG, EngineConfig, parse_minute_of_day


class TestParseMinuteOfDay:
    """Tests for clock time parsing."""

    def test_parse_strings(self) -> None:
        """Test parsing HH:MM strings."""
        assert parse_minute_of_day("0:00") == 0
        assert parse_minute_of_day("08:30") == 510
        assert parse_minute_of_day("23:59") == 1439
        assert parse_minute_of_day(" 7:05 ") == 425

    def test_parse_ints(self) -> None:
        """Test that minute-of-day ints pass through."""
        assert parse_minute_of_day(0) == 0
        assert parse_minute_of_day(1439) == 1439

    def test_end_of_day(self) -> None:
        """Test that 24:00 is only accepted as an end of day."""
        with pytest.raises(ValueError):
            parse_minute_of_day("24:00")
        assert parse_minute_of_day("24:00", allow_end_of_day=True) == 1440
        with pytest.raises(ValueError):
            parse_minute_of_day("24:01", allow_end_of_day=True)

    @pytest.mark.parametrize("value", ["8", "8:60", "ab:cd", "", -1, 1440, True, None, 8.5])
    def test_invalid_values(self, value: object) -> None:
        """Test that malformed clock times raise ValueError."""
        with pytest.raises(ValueError):
            parse_minute_of_day(value)  # type: ignore[arg-type]


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_defaults(self) -> None:
        """Test the default configuration."""
        config = EngineConfig()
        assert config.holidays == frozenset()
        assert config.weekend_days == frozenset({5, 6})
        assert config.fallback_boundaries == ()

        assert DEFAULT_CONFIG.is_weekend_or_holiday(date(2024, 6, 8))  # Saturday
        assert DEFAULT_CONFIG.is_weekend_or_holiday(date(2024, 6, 9))  # Sunday
        assert not DEFAULT_CONFIG.is_weekend_or_holiday(date(2024, 6, 10))  # Monday

    def test_holidays(self) -> None:
        """Test that configured holidays bill as weekend days."""
        holiday = date(2024, 5, 3)  # Friday
        config = EngineConfig(holidays=[holiday])
        assert config.is_holiday(holiday)
        assert config.is_weekend_or_holiday(holiday)
        assert not config.is_holiday(date(2024, 5, 4))

    def test_custom_weekend(self) -> None:
        """Test a non-default weekend."""
        config = EngineConfig(weekend_days=[4, 5])
        assert config.is_weekend_or_holiday(date(2024, 6, 7))  # Friday
        assert not config.is_weekend_or_holiday(date(2024, 6, 9))  # Sunday

    def test_fallback_boundaries_sorted_and_deduplicated(self) -> None:
        """Test fallback boundary normalization."""
        config = EngineConfig(fallback_boundaries=["22:00", 480, "8:00"])
        assert config.fallback_boundaries == (480, 1320)

    def test_invalid_holidays(self) -> None:
        """Test that non-date holidays are rejected."""
        with pytest.raises(ValueError, match="holidays must contain dates"):
            EngineConfig(holidays=["2024-05-03"])  # type: ignore[list-item]

    def test_invalid_weekend_days(self) -> None:
        """Test that weekday indexes are validated."""
        with pytest.raises(ValueError, match="weekend_days"):
            EngineConfig(weekend_days=[7])
        with pytest.raises(ValueError, match="weekend_days"):
            EngineConfig(weekend_days=[True])

    def test_invalid_fallback_boundaries(self) -> None:
        """Test that fallback boundaries are validated."""
        with pytest.raises(ValueError):
            EngineConfig(fallback_boundaries=["25:00"])
