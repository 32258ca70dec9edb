# mcp_registry/validators/names.py
"""
Server name parsing: ``<reverse-dns-namespace>/<name>``.

Examples of valid names: ``io.github.alice/weather``, ``com.example.api/my_server``.
"""
from __future__ import annotations

import re
from typing import Tuple

from ..errors import ErrorKind, ManifestValidationError

NAMESPACE_PATTERN = r"[a-zA-Z0-9][a-zA-Z0-9.-]*[a-zA-Z0-9]"
NAME_PART_PATTERN = r"[a-zA-Z0-9][a-zA-Z0-9._-]*[a-zA-Z0-9]"

_NAMESPACE_RE = re.compile(NAMESPACE_PATTERN)
_NAME_PART_RE = re.compile(NAME_PART_PATTERN)
_SERVER_NAME_RE = re.compile(rf"{NAMESPACE_PATTERN}/{NAME_PART_PATTERN}")


def _fail(kind: ErrorKind, detail: str) -> ManifestValidationError:
    return ManifestValidationError(kind, detail, field="name")


def parse_server_name(name: str) -> Tuple[str, str]:
    """
    Split and validate a server name.

    Returns:
        ``(namespace, name_part)``

    Raises:
        ManifestValidationError: NAME_REQUIRED, NAME_MULTIPLE_SLASHES or
            NAME_MALFORMED (the message says whether the namespace or the
            name part is at fault).
    """
    if not name:
        raise _fail(ErrorKind.NAME_REQUIRED, "server name is required and must be a string")

    if "/" not in name:
        raise _fail(
            ErrorKind.NAME_MALFORMED,
            "server name must be in format 'dns-namespace/name' "
            "(e.g., 'com.example.api/server')",
        )

    if name.count("/") > 1:
        raise _fail(
            ErrorKind.NAME_MULTIPLE_SLASHES,
            f"server name cannot contain multiple slashes: {name}",
        )

    namespace, name_part = name.split("/", 1)
    if not namespace or not name_part:
        raise _fail(
            ErrorKind.NAME_MALFORMED,
            "server name must be in format 'dns-namespace/name' "
            "with non-empty namespace and name parts",
        )

    if not _SERVER_NAME_RE.fullmatch(name):
        if not _NAMESPACE_RE.fullmatch(namespace):
            raise _fail(
                ErrorKind.NAME_MALFORMED,
                f"invalid server name format: namespace '{namespace}' is invalid. "
                "Namespace must start and end with alphanumeric characters, "
                "and may contain dots and hyphens in the middle",
            )
        if not _NAME_PART_RE.fullmatch(name_part):
            raise _fail(
                ErrorKind.NAME_MALFORMED,
                f"invalid server name format: name '{name_part}' is invalid. "
                "Name must start and end with alphanumeric characters, "
                "and may contain dots, underscores, and hyphens in the middle",
            )
        raise _fail(ErrorKind.NAME_MALFORMED, f"invalid server name format: '{name}'")

    return namespace, name_part
