# mcp_registry/schema_support.py
"""Known ``server.json`` schema versions and the ``$schema`` gate."""
from __future__ import annotations

from typing import Tuple

from .errors import ErrorKind, ManifestValidationError

CURRENT_SCHEMA_VERSION = "2025-10-17"
LEGACY_SCHEMA_VERSION_2025_09_29 = "2025-09-29"

CURRENT_SCHEMA_URL = (
    f"https://static.modelcontextprotocol.io/schemas/{CURRENT_SCHEMA_VERSION}/server.schema.json"
)

SUPPORTED_SCHEMA_VERSIONS: Tuple[str, ...] = (
    CURRENT_SCHEMA_VERSION,
    LEGACY_SCHEMA_VERSION_2025_09_29,
)


def is_supported_schema_version(schema_url: str) -> bool:
    """True if ``schema_url`` references one of the supported versions."""
    if not schema_url:
        return False
    return any(version in schema_url for version in SUPPORTED_SCHEMA_VERSIONS)


def validate_schema(schema_url: str) -> None:
    if not schema_url:
        raise ManifestValidationError(
            ErrorKind.SCHEMA_MISSING, "$schema field is required", field="$schema"
        )
    if not is_supported_schema_version(schema_url):
        raise ManifestValidationError(
            ErrorKind.SCHEMA_UNSUPPORTED,
            f"schema version {schema_url} is not supported. "
            f"Supported versions: {', '.join(SUPPORTED_SCHEMA_VERSIONS)}",
            field="$schema",
        )
