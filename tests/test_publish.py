# tests/test_publish.py
from __future__ import annotations

from typing import List, Optional, Tuple

import pytest

from conftest import make_server, stdio_package
from mcp_registry.config import RegistryConfig
from mcp_registry.errors import ConfigurationError, ErrorKind, ManifestValidationError, RegistryOwnershipError
from mcp_registry.schemas import PUBLISHER_PROVIDED_KEY, Package
from mcp_registry.validators.manifest import (
    MAX_PUBLISHER_EXTENSION_BYTES,
    validate_publish_request,
    validate_publisher_extensions,
)

NO_OWNERSHIP = RegistryConfig(enable_registry_validation=False)


class RecordingOwnership:
    def __init__(self, reject: Tuple[str, ...] = ()) -> None:
        self.reject = reject
        self.calls: List[Tuple[str, str]] = []
        self.deadlines: List[Optional[float]] = []

    def __call__(self, package: Package, server_name: str, *, deadline: Optional[float] = None) -> None:
        self.calls.append((package.identifier, server_name))
        self.deadlines.append(deadline)
        if package.identifier in self.reject:
            raise RegistryOwnershipError(f"{package.identifier} is not owned by {server_name}")


def _with_extension(payload) -> object:
    return make_server(_meta={PUBLISHER_PROVIDED_KEY: payload})


# ---- publisher extension size ----------------------------------------------
def test_extension_at_limit_is_accepted():
    # compact JSON {"k":"..."} adds 8 bytes around the value
    server = _with_extension({"k": "x" * (MAX_PUBLISHER_EXTENSION_BYTES - 8)})
    validate_publisher_extensions(server)


def test_extension_over_limit_is_rejected():
    server = _with_extension({"k": "x" * (MAX_PUBLISHER_EXTENSION_BYTES - 7)})
    with pytest.raises(ManifestValidationError) as ei:
        validate_publisher_extensions(server)
    assert ei.value.kind is ErrorKind.EXTENSION_TOO_LARGE
    assert "4KB" in str(ei.value)


def test_extension_size_counts_utf8_bytes():
    # each "é" is two bytes
    validate_publisher_extensions(_with_extension({"k": "é" * 2044}))
    with pytest.raises(ManifestValidationError):
        validate_publisher_extensions(_with_extension({"k": "é" * 2045}))


def test_no_extension_is_fine(server):
    validate_publisher_extensions(server)
    validate_publisher_extensions(make_server(_meta={"other": {"x": 1}}))


def test_extension_checked_before_manifest():
    server = make_server("bad", _meta={PUBLISHER_PROVIDED_KEY: {"k": "x" * 5000}})
    with pytest.raises(ManifestValidationError) as ei:
        validate_publish_request(server, NO_OWNERSHIP)
    assert ei.value.kind is ErrorKind.EXTENSION_TOO_LARGE


# ---- ownership ---------------------------------------------------------------
def test_publish_runs_manifest_rules():
    with pytest.raises(ManifestValidationError) as ei:
        validate_publish_request(make_server(version="latest"), NO_OWNERSHIP)
    assert ei.value.kind is ErrorKind.VERSION_RESERVED


def test_ownership_called_for_every_package():
    ownership = RecordingOwnership()
    server = make_server(packages=[stdio_package(identifier="a"), stdio_package(identifier="b")])
    validate_publish_request(server, RegistryConfig(), ownership)
    assert ownership.calls == [("a", "com.example/weather"), ("b", "com.example/weather")]


def test_ownership_failure_is_reported_with_package_index():
    ownership = RecordingOwnership(reject=("b",))
    server = make_server(packages=[stdio_package(identifier="a"), stdio_package(identifier="b")])
    with pytest.raises(ManifestValidationError) as ei:
        validate_publish_request(server, RegistryConfig(), ownership)
    assert ei.value.kind is ErrorKind.REGISTRY_OWNERSHIP_VIOLATION
    assert ei.value.field == "packages[1]"
    assert "not owned" in str(ei.value)


def test_ownership_skipped_when_disabled():
    ownership = RecordingOwnership(reject=("a",))
    server = make_server(packages=[stdio_package(identifier="a")])
    validate_publish_request(server, NO_OWNERSHIP, ownership)
    assert ownership.calls == []


def test_ownership_not_called_for_invalid_manifest():
    ownership = RecordingOwnership()
    server = make_server(version="latest", packages=[stdio_package(identifier="a")])
    with pytest.raises(ManifestValidationError):
        validate_publish_request(server, RegistryConfig(), ownership)
    assert ownership.calls == []


def test_enabled_ownership_requires_collaborator(server):
    with pytest.raises(ConfigurationError):
        validate_publish_request(server, RegistryConfig())


def test_ownership_receives_deadline():
    ownership = RecordingOwnership()
    server = make_server(packages=[stdio_package(identifier="a")])
    validate_publish_request(server, RegistryConfig(), ownership, deadline=123.0)
    assert ownership.deadlines == [123.0]


# ---- HTML-safe escaping counts toward the limit -------------------------------
def test_html_characters_count_as_escaped_bytes():
    # "<" is encoded as the 6-byte \u003c, plus 8 bytes of {"k":""}
    validate_publisher_extensions(_with_extension({"k": "<" * 681}))
    with pytest.raises(ManifestValidationError) as ei:
        validate_publisher_extensions(_with_extension({"k": "<" * 682}))
    assert "4100 bytes" in str(ei.value)


def test_escaping_applies_to_keys_and_line_separators():
    with pytest.raises(ManifestValidationError):
        validate_publisher_extensions(_with_extension({"&" * 700: "v"}))
    with pytest.raises(ManifestValidationError):
        validate_publisher_extensions(_with_extension({"k": "\u2028" * 700}))
