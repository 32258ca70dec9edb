# SPDX-License-Identifier: MIT
# mcp_registry/validators/manifest.py
"""
Manifest-level validation entry points.

``validate_manifest`` runs ``MANIFEST_CHECKS`` in order and stops at the
first failure. Each check is a plain function of the manifest, so rules can
be tested (and reused) one by one.

``validate_publish_request`` is the superset used on publish: it adds the
``_meta`` publisher extension size limit and, when enabled in the config,
per-package registry ownership checks through a collaborator.
"""
from __future__ import annotations

import json
from typing import Callable, Optional, Protocol, Tuple

from ..config import RegistryConfig
from ..errors import (
    ConfigurationError,
    ErrorKind,
    ManifestValidationError,
    RegistryOwnershipError,
)
from ..schema_support import validate_schema
from ..schemas import PUBLISHER_PROVIDED_KEY, Package, ServerJSON
from .names import parse_server_name
from .packages import validate_package_field, validate_remote_transport
from .urls import (
    validate_icons,
    validate_remote_namespace_match,
    validate_repository,
    validate_title,
    validate_website_namespace_match,
    validate_website_url,
)
from .versions import validate_version

MAX_PUBLISHER_EXTENSION_BYTES = 4 * 1024

# HTML-safe escapes of the registry JSON encoder; each is a 6-byte \uXXXX sequence
_HTML_SAFE_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

ManifestCheck = Callable[[ServerJSON], None]


class PackageOwnershipValidator(Protocol):
    """
    Collaborator that verifies a publisher may publish ``package`` under
    ``server_name`` in the package's registry (npm, PyPI, OCI, ...).

    Returns ``None`` on success and raises ``RegistryOwnershipError`` with a
    descriptive message otherwise. ``deadline`` bounds any registry lookups
    (absolute ``time.monotonic()``, or ``None``).
    """

    def __call__(
        self, package: Package, server_name: str, *, deadline: Optional[float] = None
    ) -> None: ...


# ------------------------------ single checks ------------------------------ #

def _check_packages(server: ServerJSON) -> None:
    for i, package in enumerate(server.packages):
        try:
            validate_package_field(package)
        except ManifestValidationError as e:
            field = f"packages[{i}].{e.field}" if e.field else f"packages[{i}]"
            raise ManifestValidationError(
                e.kind, f"packages[{i}]: {e.detail}", field=field
            ) from e


def _check_remotes(server: ServerJSON) -> None:
    for i, remote in enumerate(server.remotes):
        try:
            validate_remote_transport(remote)
        except ManifestValidationError as e:
            raise ManifestValidationError(
                e.kind, f"remotes[{i}]: {e.detail}", field=f"remotes[{i}]"
            ) from e


MANIFEST_CHECKS: Tuple[Tuple[str, ManifestCheck], ...] = (
    ("$schema", lambda s: validate_schema(s.schema_)),
    ("name", lambda s: parse_server_name(s.name)),
    ("version", lambda s: validate_version(s.version)),
    ("repository", lambda s: validate_repository(s.repository)),
    ("websiteUrl", lambda s: validate_website_url(s.website_url)),
    ("title", lambda s: validate_title(s.title)),
    ("icons", lambda s: validate_icons(s.icons)),
    ("packages", _check_packages),
    ("remotes", _check_remotes),
    ("remotes", validate_remote_namespace_match),
    ("websiteUrl", validate_website_namespace_match),
)


# ------------------------------ entry points ------------------------------- #

def validate_manifest(server: ServerJSON) -> None:
    """
    Validate a manifest; first failing rule wins.

    Raises:
        ManifestValidationError: with ``kind``, ``detail``, ``field`` and
            ``server_name`` set.
    """
    for field, check in MANIFEST_CHECKS:
        try:
            check(server)
        except ManifestValidationError as e:
            raise e.at(field, server.name or None) from None


def check_manifest(server: ServerJSON) -> Optional[ManifestValidationError]:
    """Non-raising form of ``validate_manifest``: the error, or ``None``."""
    try:
        validate_manifest(server)
    except ManifestValidationError as e:
        return e
    return None


def _compact_json(value: object) -> bytes:
    text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in _HTML_SAFE_ESCAPES.items():
        text = text.replace(char, escaped)
    return text.encode("utf-8")


def validate_publisher_extensions(server: ServerJSON) -> None:
    if server.meta is None or server.meta.publisher_provided is None:
        return
    try:
        encoded = _compact_json(server.meta.publisher_provided)
    except (TypeError, ValueError) as e:
        raise ManifestValidationError(
            ErrorKind.EXTENSION_TOO_LARGE,
            f"failed to serialize _meta.{PUBLISHER_PROVIDED_KEY} extension: {e}",
            field=f"_meta.{PUBLISHER_PROVIDED_KEY}",
            server_name=server.name or None,
        ) from e
    if len(encoded) > MAX_PUBLISHER_EXTENSION_BYTES:
        raise ManifestValidationError(
            ErrorKind.EXTENSION_TOO_LARGE,
            f"_meta.{PUBLISHER_PROVIDED_KEY} extension exceeds 4KB limit "
            f"({len(encoded)} bytes)",
            field=f"_meta.{PUBLISHER_PROVIDED_KEY}",
            server_name=server.name or None,
        )


def validate_publish_request(
    server: ServerJSON,
    config: RegistryConfig,
    ownership: Optional[PackageOwnershipValidator] = None,
    *,
    deadline: Optional[float] = None,
) -> None:
    """
    Validate a publish request: extensions, manifest, then (optionally)
    registry ownership of every package.

    Raises:
        ManifestValidationError: any rule failure, including
            REGISTRY_OWNERSHIP_VIOLATION for ownership failures.
        ConfigurationError: ownership validation is enabled but no
            collaborator was supplied.
    """
    validate_publisher_extensions(server)
    validate_manifest(server)

    if not config.enable_registry_validation:
        return
    if ownership is None:
        raise ConfigurationError(
            "registry validation is enabled but no package ownership validator was given",
            config_key="enable_registry_validation",
        )

    for i, package in enumerate(server.packages):
        try:
            ownership(package, server.name, deadline=deadline)
        except RegistryOwnershipError as e:
            raise ManifestValidationError(
                ErrorKind.REGISTRY_OWNERSHIP_VIOLATION,
                f"registry validation failed for package {i} ({package.identifier}): {e}",
                field=f"packages[{i}]",
                server_name=server.name,
            ) from e
