# -*- coding: utf-8 -*-
"""
mcp_registry.__init__

Public surface of the MCP server registry core.

Exports:
    - ServerJSON             : Pydantic model of a server manifest (server.json).
    - validate_manifest      : Fail-fast validation of one manifest.
    - validate_publish_request : Publish-time superset (extensions + ownership).
    - SeedImporter           : Bulk import from a file, URL or catalog listing.
    - RegistryConfig         : Env/TOML backed configuration.
    - ManifestValidationError, SeedImportError : Error types carrying an ErrorKind.
"""

from .bulk.importer import ImportReport, SeedImporter, import_seed
from .config import RegistryConfig
from .errors import ErrorKind, ManifestValidationError, RegistryError, SeedImportError
from .schemas import ServerJSON
from .validators.manifest import validate_manifest, validate_publish_request

__all__ = [
    "ErrorKind",
    "ImportReport",
    "ManifestValidationError",
    "RegistryConfig",
    "RegistryError",
    "SeedImportError",
    "SeedImporter",
    "ServerJSON",
    "import_seed",
    "validate_manifest",
    "validate_publish_request",
]
