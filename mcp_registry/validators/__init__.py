"""Manifest validation rules and the two validation entry points."""

from .manifest import (
    MANIFEST_CHECKS,
    PackageOwnershipValidator,
    check_manifest,
    validate_manifest,
    validate_publish_request,
    validate_publisher_extensions,
)

__all__ = [
    "MANIFEST_CHECKS",
    "PackageOwnershipValidator",
    "check_manifest",
    "validate_manifest",
    "validate_publish_request",
    "validate_publisher_extensions",
]
