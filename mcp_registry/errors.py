# SPDX-License-Identifier: MIT
"""
mcp_registry.errors

Exception types shared by the validators and the seed importer.

Every failure carries an ``ErrorKind`` so callers (HTTP handlers, the import
report, tests) can branch on the kind without parsing messages, plus a
human-readable message that names the offending field.
"""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .bulk.importer import ImportReport

__all__ = [
    "ErrorKind",
    "RegistryError",
    "ManifestValidationError",
    "RegistryOwnershipError",
    "ConfigurationError",
    "SeedImportError",
    "ImportSourceUnreachable",
    "ImportDecodeFailure",
    "SeedImportFailed",
]


class ErrorKind(str, Enum):
    """Stable identifiers for every failure the registry core can report."""

    # schema gate
    SCHEMA_MISSING = "SchemaMissing"
    SCHEMA_UNSUPPORTED = "SchemaUnsupported"

    # server name
    NAME_REQUIRED = "NameRequired"
    NAME_MULTIPLE_SLASHES = "NameMultipleSlashes"
    NAME_MALFORMED = "NameMalformed"

    # versions
    VERSION_RESERVED = "VersionReserved"
    VERSION_LOOKS_LIKE_RANGE = "VersionLooksLikeRange"

    # repository / website / title / icons
    REPOSITORY_INVALID_URL = "RepositoryInvalidURL"
    REPOSITORY_INVALID_SUBFOLDER = "RepositoryInvalidSubfolder"
    WEBSITE_URL_INVALID = "WebsiteURLInvalid"
    TITLE_BLANK = "TitleBlank"
    ICON_INVALID = "IconInvalid"

    # packages and arguments
    PACKAGE_IDENTIFIER_HAS_SPACES = "PackageIdentifierHasSpaces"
    ARGUMENT_NAME_REQUIRED = "ArgumentNameRequired"
    ARGUMENT_INVALID_CHARACTERS = "ArgumentInvalidCharacters"
    ARGUMENT_VALUE_STARTS_WITH_NAME = "ArgumentValueStartsWithName"

    # transports
    TRANSPORT_UNSUPPORTED_TYPE = "TransportUnsupportedType"
    TRANSPORT_URL_REQUIRED = "TransportURLRequired"
    TRANSPORT_URL_NOT_ALLOWED = "TransportURLNotAllowed"
    TRANSPORT_INVALID_URL = "TransportInvalidURL"
    TRANSPORT_UNDEFINED_TEMPLATE_VARIABLE = "TransportUndefinedTemplateVariable"

    # namespace ownership
    NAMESPACE_MISMATCH = "NamespaceMismatch"
    INVALID_NAMESPACE_FORMAT = "InvalidNamespaceFormat"

    # publish-time checks
    EXTENSION_TOO_LARGE = "ExtensionTooLarge"
    REGISTRY_OWNERSHIP_VIOLATION = "RegistryOwnershipViolation"

    # import pipeline
    IMPORT_SOURCE_UNREACHABLE = "ImportSourceUnreachable"
    IMPORT_DECODE_FAILURE = "ImportDecodeFailure"
    IMPORT_RECORD_INVALID = "ImportRecordInvalid"
    IMPORT_RECORD_CREATE_FAILED = "ImportRecordCreateFailed"

    # configuration
    CONFIGURATION_INVALID = "ConfigurationInvalid"


class RegistryError(RuntimeError):
    """
    Base exception for the registry core.

    Attributes:
        message: Error message
        kind: ErrorKind identifying the failure
        context: Optional dictionary with additional context (server name,
                 field path, source locator, ...)
    """

    kind: Optional[ErrorKind] = None

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[ErrorKind] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ManifestValidationError(RegistryError, ValueError):
    """
    Raised when a server manifest breaks one of the validation rules.

    Attributes:
        kind: ErrorKind of the failed rule
        detail: Human-readable reason, already prefixed with the field path
        field: Dotted/indexed path of the offending field (e.g. ``packages[1]``)
        server_name: Manifest name, when known
    """

    def __init__(
        self,
        kind: ErrorKind,
        detail: str,
        *,
        field: Optional[str] = None,
        server_name: Optional[str] = None,
    ) -> None:
        super().__init__(detail, kind=kind)
        self.detail = detail
        self.field = field
        self.server_name = server_name

    def __str__(self) -> str:
        return self.detail

    def at(self, field: str, server_name: Optional[str] = None) -> "ManifestValidationError":
        """Return a copy of this error attributed to ``field`` (outermost wins)."""
        return ManifestValidationError(
            self.kind,
            self.detail,
            field=self.field or field,
            server_name=server_name if server_name is not None else self.server_name,
        )


class RegistryOwnershipError(RegistryError):
    """Raised by an ownership collaborator when a publisher may not claim a package."""

    kind = ErrorKind.REGISTRY_OWNERSHIP_VIOLATION


class ConfigurationError(RegistryError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
    """

    kind = ErrorKind.CONFIGURATION_INVALID

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
    ) -> None:
        context: Dict[str, Any] = {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value


# ------------------------------ import errors ------------------------------ #

class SeedImportError(RegistryError):
    """Base class for failures of the seed import pipeline."""

    def __init__(self, message: str, *, source: Optional[str] = None) -> None:
        super().__init__(message, context={"source": source} if source else None)
        self.source = source


class ImportSourceUnreachable(SeedImportError):
    """The seed source could not be read (missing file, HTTP error, deadline)."""

    kind = ErrorKind.IMPORT_SOURCE_UNREACHABLE


class ImportDecodeFailure(SeedImportError):
    """The seed payload is not a decodable manifest array / catalog page."""

    kind = ErrorKind.IMPORT_DECODE_FAILURE


class SeedImportFailed(SeedImportError):
    """One or more valid records could not be created in the registry."""

    kind = ErrorKind.IMPORT_RECORD_CREATE_FAILED

    def __init__(self, report: "ImportReport", *, source: Optional[str] = None) -> None:
        super().__init__(
            f"failed to import {len(report.failed)} servers: {report.summary()}",
            source=source,
        )
        self.report = report
