"""Tariff document version validation and compatibility checking using semver."""

from typing import Any, Dict, Optional

import semver

from .logging import LogEvent, log_error, log_warning


class SchemaVersionValidator:
    """Handles tariff document version validation and compatibility checking."""

    SUPPORTED_SCHEMA_VERSIONS = {
        "1.x": ">=1.0.0,<2.0.0",
    }

    DEFAULT_SCHEMA_VERSION = "1.0.0"

    @classmethod
    def _check_version_range(cls, version: str, range_spec: str) -> bool:
        """Check if a version satisfies a range specification.

        Args:
            version: Version string to check
            range_spec: Range specification like ">=1.0.0,<2.0.0"

        Returns:
            True if version satisfies the range
        """
        try:
            parsed_version = semver.Version.parse(version)
        except ValueError:
            return False

        for condition in (cond.strip() for cond in range_spec.split(",")):
            # a pre-release of 1.0.0 still belongs to the 1.x documents
            if condition.startswith(">=") and parsed_version.prerelease:
                parsed_base = parsed_version.replace(prerelease=None, build=None)
                if not parsed_base.match(condition):
                    return False
            elif not parsed_version.match(condition):
                return False
        return True

    @classmethod
    def get_schema_version(cls, document: Dict[str, Any]) -> str:
        """Extract and normalize the version of a tariff document.

        ``1`` and ``1.0`` are accepted as shorthands for ``1.0.0``.

        Args:
            document: Parsed tariff document

        Returns:
            Valid semver version string

        Raises:
            ValueError: If the version cannot be parsed
        """
        version = document.get("version")

        if version is None or version == "":
            log_warning(
                LogEvent.TARIFF_DOCUMENT,
                "Missing document version, using default",
                default_version=cls.DEFAULT_SCHEMA_VERSION,
            )
            return cls.DEFAULT_SCHEMA_VERSION

        version_str = str(version).strip()
        try:
            semver.Version.parse(version_str)
            return version_str
        except ValueError:
            pass

        parts = version_str.split(".")
        if len(parts) == 2:
            candidate = f"{parts[0]}.{parts[1]}.0"
        elif len(parts) == 1:
            candidate = f"{parts[0]}.0.0"
        else:
            candidate = None

        if candidate is not None:
            try:
                semver.Version.parse(candidate)
                return candidate
            except ValueError:
                pass

        log_error(LogEvent.TARIFF_DOCUMENT, "Invalid document version format", version=version_str)
        raise ValueError(f"Invalid document version format: {version_str}")

    @classmethod
    def is_compatible_schema(cls, version: str) -> bool:
        """Check if a document version is supported by this engine.

        Args:
            version: Version string

        Returns:
            True if version is supported, False otherwise
        """
        return cls.get_compatible_range(version) is not None

    @classmethod
    def get_compatible_range(cls, version: str) -> Optional[str]:
        """Get the supported range name (``"1.x"``) a version falls in.

        Args:
            version: Version string

        Returns:
            Range name if compatible, None otherwise
        """
        for range_name, range_spec in cls.SUPPORTED_SCHEMA_VERSIONS.items():
            if cls._check_version_range(version, range_spec):
                return range_name
        return None
