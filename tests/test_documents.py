"""Tests for tariff documents."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from parking_fee_engine import compute_fee
from parking_fee_engine.documents import TariffDocument, load_tariff_document, load_tariff_file
from parking_fee_engine.errors import TariffDocumentError, TariffValidationError
from parking_fee_engine.rates import BaseRate, MaxRate


@pytest.fixture
def document_data() -> Dict[str, Any]:
    """A valid tariff document."""
    return {
        "version": "1.0.0",
        "spot_id": "shinjuku-3",
        "rates": [
            {"type": "base", "unitMinutes": 30, "price": 200},
            {"type": "max", "unitMinutes": 1440, "price": 2000},
        ],
    }


@pytest.fixture
def document_file(tmp_path: Path, document_data: Dict[str, Any]) -> Path:
    """The valid tariff document written to disk."""
    path = tmp_path / "shinjuku-3.yml"
    with open(path, "w") as f:
        yaml.dump(document_data, f)
    return path


class TestLoadTariffDocument:
    """Tests for parsing tariff documents."""

    def test_load_yaml(self, document_data: Dict[str, Any]) -> None:
        """Test a YAML document."""
        document = load_tariff_document(yaml.dump(document_data))
        assert isinstance(document, TariffDocument)
        assert document.spot_id == "shinjuku-3"
        assert document.version == "1.0.0"
        assert document.table.rates == (BaseRate(30, 200), MaxRate(1440, 2000))

    def test_load_json(self, document_data: Dict[str, Any]) -> None:
        """Test that JSON documents load too."""
        document = load_tariff_document(json.dumps(document_data))
        assert len(document.table) == 2

    def test_japanese_labels(self) -> None:
        """Test labels as they appear in scraped tariffs."""
        content = "\n".join(
            [
                "version: 1",
                "rates:",
                "  - {type: base, minutes: 40, price: 200, time_range: '8:00～20:00', day_type: 平日}",
                "  - {type: max, minutes: 1440, price: '¥1,000'}",
            ]
        )
        document = load_tariff_document(content)
        assert document.version == "1.0.0"
        assert document.spot_id is None
        assert document.table.max_rates == (MaxRate(1440, 1000),)

    def test_document_drives_calculation(self, document_data: Dict[str, Any]) -> None:
        """Test that a loaded table can be billed."""
        document = load_tariff_document(yaml.dump(document_data))
        start = datetime(2024, 6, 10, 9, 0)
        assert compute_fee(document.table, start, datetime(2024, 6, 10, 14, 0)) == 2000

    @pytest.mark.parametrize("content", ["", "   \n"])
    def test_empty_document(self, content: str) -> None:
        """Test empty documents."""
        with pytest.raises(TariffDocumentError, match="empty"):
            load_tariff_document(content)

    def test_invalid_yaml(self) -> None:
        """Test unparseable documents."""
        with pytest.raises(TariffDocumentError, match="not valid YAML"):
            load_tariff_document("rates: [unclosed", path="broken.yml")

    def test_not_a_mapping(self) -> None:
        """Test documents that are not mappings."""
        with pytest.raises(TariffDocumentError, match="must be a mapping"):
            load_tariff_document("- type: base\n")

    def test_unsupported_version(self, document_data: Dict[str, Any]) -> None:
        """Test documents from an unsupported major version."""
        document_data["version"] = "2.0.0"
        with pytest.raises(TariffDocumentError, match="Unsupported") as exc_info:
            load_tariff_document(yaml.dump(document_data), path="spot.yml")
        assert exc_info.value.path == "spot.yml"

    def test_invalid_version(self, document_data: Dict[str, Any]) -> None:
        """Test documents with a malformed version."""
        document_data["version"] = "one"
        with pytest.raises(TariffDocumentError, match="Invalid document version"):
            load_tariff_document(yaml.dump(document_data))

    def test_missing_rates(self, document_data: Dict[str, Any]) -> None:
        """Test documents without a rates list."""
        del document_data["rates"]
        with pytest.raises(TariffDocumentError, match="'rates' list"):
            load_tariff_document(yaml.dump(document_data))

    def test_invalid_rate(self, document_data: Dict[str, Any]) -> None:
        """Test that malformed rates surface as validation errors."""
        document_data["rates"].append({"type": "base", "unitMinutes": 30})
        with pytest.raises(TariffValidationError) as exc_info:
            load_tariff_document(yaml.dump(document_data))
        assert exc_info.value.index == 2


class TestLoadTariffFile:
    """Tests for reading tariff documents from disk."""

    def test_load_file(self, document_file: Path) -> None:
        """Test reading a document file."""
        document = load_tariff_file(document_file)
        assert document.spot_id == "shinjuku-3"
        assert len(document.table) == 2

    def test_load_file_from_string_path(self, document_file: Path) -> None:
        """Test that string paths work."""
        assert load_tariff_file(str(document_file)).version == "1.0.0"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file."""
        path = tmp_path / "missing.yml"
        with pytest.raises(TariffDocumentError, match="Cannot read") as exc_info:
            load_tariff_file(path)
        assert exc_info.value.path == str(path)

    def test_error_carries_path(self, tmp_path: Path) -> None:
        """Test that parse errors report the file."""
        path = tmp_path / "empty.yml"
        path.write_text("")
        with pytest.raises(TariffDocumentError) as exc_info:
            load_tariff_file(path)
        assert exc_info.value.path == str(path)
