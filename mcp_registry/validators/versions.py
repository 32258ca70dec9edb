# mcp_registry/validators/versions.py
"""
Version string checks.

Versions are not forced to be strict semver, but they must name one specific
release: the reserved word ``latest`` and npm/semver range syntaxes are
rejected.
"""
from __future__ import annotations

import re

from ..errors import ErrorKind, ManifestValidationError

RESERVED_VERSION = "latest"

_VERSION = r"v?\d+(?:\.\d+){0,3}(?:-[0-9A-Za-z.-]+)?"

# "^1.2.3", "~1.2.3", ">=1.0.0", "<=1.0.0", ">1.0.0", "<1.0.0", "=1.0.0"
_COMPARATOR_RANGE_RE = re.compile(rf"^\s*(?:\^|~|>=|<=|>|<|=)\s*{_VERSION}\s*$", re.ASCII)
# "1.2.3 - 2.0.0"
_HYPHEN_RANGE_RE = re.compile(rf"^\s*{_VERSION}\s-\s*{_VERSION}\s*$", re.ASCII)
# "1.2 || 1.3"
_OR_RANGE_RE = re.compile(rf"^\s*(?:{_VERSION}\s*)(?:\|\|\s*{_VERSION}\s*)+$", re.ASCII)
# "1.2.*", "1.2.x", "1.2.X", "1.x"; plain "1.2" / "1.2.3" also match and are
# only treated as ranges when a wildcard is present
_DOTTED_VERSION_LIKE_RE = re.compile(
    r"^\s*(?:v?\d+|x|X|\*)(?:\.(?:\d+|x|X|\*)){1,2}(?:-[0-9A-Za-z.-]+)?\s*$",
    re.ASCII,
)


def looks_like_version_range(version: str) -> bool:
    trimmed = version.strip()
    if not trimmed:
        return False
    if _COMPARATOR_RANGE_RE.match(trimmed):
        return True
    if _HYPHEN_RANGE_RE.match(trimmed):
        return True
    if _OR_RANGE_RE.match(trimmed):
        return True
    if _DOTTED_VERSION_LIKE_RE.match(trimmed):
        return any(wildcard in trimmed for wildcard in ("x", "X", "*"))
    return False


def validate_version(version: str, *, field: str = "version") -> None:
    if version == RESERVED_VERSION:
        raise ManifestValidationError(
            ErrorKind.VERSION_RESERVED,
            f"{field}: version string 'latest' is reserved and cannot be used",
            field=field,
        )
    if looks_like_version_range(version):
        raise ManifestValidationError(
            ErrorKind.VERSION_LOOKS_LIKE_RANGE,
            f"{field}: version must be a specific version, not a range: {version!r}",
            field=field,
        )
