"""Tariff documents.

A tariff document is the YAML (or JSON) form in which a calling service
stores the tariff of one parking spot:

.. code-block:: yaml

    version: "1.0.0"
    spot_id: shinjuku-3
    rates:
      - type: base
        unitMinutes: 30
        price: 200
      - type: max
        unitMinutes: 1440
        price: 2000

Loading a document validates its version, then normalizes ``rates`` into a
:class:`TariffTable`.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .errors import TariffDocumentError, TariffValidationError
from .logging import LogEvent, log_debug, log_error
from .normalizer import normalize_tariff
from .rates import TariffTable
from .schema_version import SchemaVersionValidator


@dataclass(frozen=True)
class TariffDocument:
    """A parsed tariff document.

    Attributes:
        spot_id: Identifier of the parking spot, if the document names one
        version: Normalized document version
        table: Normalized tariff table
    """

    spot_id: Optional[str]
    version: str
    table: TariffTable


def load_tariff_document(content: str, path: Optional[str] = None) -> TariffDocument:
    """Parse a tariff document.

    Args:
        content: YAML or JSON text
        path: Where the text came from, for error reports

    Returns:
        The parsed document

    Raises:
        TariffDocumentError: If the text is not a supported tariff document
        TariffValidationError: If a rate in the document is malformed
    """
    if not content or not content.strip():
        log_error(LogEvent.TARIFF_DOCUMENT, "Tariff document is empty", path=path)
        raise TariffDocumentError("Tariff document is empty", path=path)

    try:
        data: Any = yaml.safe_load(content)
    except yaml.YAMLError as e:
        log_error(LogEvent.TARIFF_DOCUMENT, "Tariff document is not valid YAML", path=path, error=str(e))
        raise TariffDocumentError(f"Tariff document is not valid YAML: {e}", path=path) from e

    if not isinstance(data, dict):
        raise TariffDocumentError(
            f"Tariff document must be a mapping, got {type(data).__name__}",
            path=path,
        )

    try:
        version = SchemaVersionValidator.get_schema_version(data)
    except ValueError as e:
        raise TariffDocumentError(str(e), path=path) from e
    if not SchemaVersionValidator.is_compatible_schema(version):
        log_error(
            LogEvent.TARIFF_DOCUMENT,
            "Unsupported document version",
            version=version,
            supported_ranges=list(SchemaVersionValidator.SUPPORTED_SCHEMA_VERSIONS.values()),
            path=path,
        )
        raise TariffDocumentError(f"Unsupported tariff document version: {version}", path=path)

    rates = data.get("rates")
    if not isinstance(rates, list):
        raise TariffDocumentError("Tariff document must have a 'rates' list", path=path)

    spot_id = data.get("spot_id")
    if spot_id is not None:
        spot_id = str(spot_id)

    try:
        table = normalize_tariff(rates)
    except TariffValidationError as e:
        log_error(LogEvent.TARIFF_DOCUMENT, "Invalid rate in tariff document", path=path, error=str(e))
        raise

    log_debug(
        LogEvent.TARIFF_DOCUMENT,
        "Tariff document loaded",
        spot_id=spot_id,
        version=version,
        compatible_range=SchemaVersionValidator.get_compatible_range(version),
        rates=len(table),
        path=path,
    )
    return TariffDocument(spot_id=spot_id, version=version, table=table)


def load_tariff_file(path: Union[str, Path]) -> TariffDocument:
    """Read and parse a tariff document from disk.

    Raises:
        TariffDocumentError: If the file cannot be read or is not a supported
            tariff document
        TariffValidationError: If a rate in the document is malformed
    """
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        log_error(LogEvent.TARIFF_DOCUMENT, "Cannot read tariff document", path=str(file_path), error=str(e))
        raise TariffDocumentError(f"Cannot read tariff document: {e}", path=str(file_path)) from e
    return load_tariff_document(content, path=str(file_path))
