# tests/test_importer.py
from __future__ import annotations

import json
import time
from typing import List

import httpx
import pytest

from conftest import InMemoryRegistry, manifest_dict
from mcp_registry.bulk.importer import ImportReport, SeedImporter, import_seed
from mcp_registry.bulk.sources import SourceKind, classify_source, read_seed
from mcp_registry.client import RegistryHTTPClient
from mcp_registry.config import RegistryConfig
from mcp_registry.errors import (
    ErrorKind,
    ImportDecodeFailure,
    ImportSourceUnreachable,
    SeedImportFailed,
)

CATALOG = "https://registry.example.com/v0/servers"


def _importer(registry, mock_transport_factory=None, handler=None, **kwargs) -> SeedImporter:
    client = None
    if handler is not None:
        client = RegistryHTTPClient(transport=mock_transport_factory(handler))
    return SeedImporter(registry, client=client, **kwargs)


# ---- source classification ---------------------------------------------------
@pytest.mark.parametrize(
    "locator, kind",
    [
        ("embedded", SourceKind.EMBEDDED),
        ("data/seed.json", SourceKind.LOCAL_FILE),
        ("/tmp/seed.json", SourceKind.LOCAL_FILE),
        ("https://example.com/seed.json", SourceKind.REMOTE_FILE),
        ("https://registry.example.com/v0/servers", SourceKind.CATALOG),
        ("https://registry.example.com/v0.1/servers?limit=100", SourceKind.CATALOG),
    ],
)
def test_classify_source(locator, kind):
    assert classify_source(locator) is kind


# ---- local / embedded --------------------------------------------------------
def test_mixed_batch_reports_every_outcome(write_seed):
    records = [
        manifest_dict("com.example/a"),
        manifest_dict("not-a-valid-name"),
        manifest_dict("com.example/b"),
        manifest_dict("com.example/c", version="latest"),
        manifest_dict("com.example/d"),
    ]
    registry = InMemoryRegistry(fail_names={"com.example/d"})

    with pytest.raises(SeedImportFailed) as ei:
        SeedImporter(registry).import_from_path(write_seed(records))

    report = ei.value.report
    assert report.created == ["com.example/a", "com.example/b"]
    assert [f.name for f in report.invalid] == ["not-a-valid-name", "com.example/c"]
    assert all(f.kind is ErrorKind.IMPORT_RECORD_INVALID for f in report.invalid)
    assert [f.name for f in report.failed] == ["com.example/d"]
    assert report.failed[0].kind is ErrorKind.IMPORT_RECORD_CREATE_FAILED
    assert "duplicate server" in report.failed[0].reason
    assert not report.ok
    assert registry.names == ["com.example/a", "com.example/b"]
    assert "failed to import 1 servers" in str(ei.value)
    assert "com.example/d" in str(ei.value)


def test_invalid_records_alone_do_not_fail_the_import(write_seed):
    registry = InMemoryRegistry()
    report = SeedImporter(registry).import_from_path(
        write_seed([manifest_dict("com.example/a"), manifest_dict("com.example/b", version="^1.0")])
    )
    assert report.ok
    assert report.created == ["com.example/a"]
    assert report.invalid[0].name == "com.example/b"
    assert "range" in report.invalid[0].reason


def test_empty_seed(write_seed, registry):
    report = SeedImporter(registry).import_from_path(write_seed([]))
    assert report == ImportReport(source=report.source)
    assert report.summary().startswith("0 created, 0 invalid, 0 failed")


def test_missing_file(tmp_path, registry):
    with pytest.raises(ImportSourceUnreachable) as ei:
        SeedImporter(registry).import_from_path(str(tmp_path / "nope.json"))
    assert ei.value.kind is ErrorKind.IMPORT_SOURCE_UNREACHABLE
    assert registry.created == []


@pytest.mark.parametrize(
    "payload",
    [
        {"servers": []},
        "not json at all",
        [{"name": 42}],
    ],
)
def test_undecodable_seed_fails_whole_batch(tmp_path, registry, payload):
    path = tmp_path / "seed.json"
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    with pytest.raises(ImportDecodeFailure):
        SeedImporter(registry).import_from_path(str(path))
    assert registry.created == []


def test_embedded_seed(registry):
    report = SeedImporter(registry).import_from_path("embedded")
    assert report.ok
    assert report.invalid == []
    assert registry.names == [s.name for s in read_seed("embedded")]


# ---- remote file -------------------------------------------------------------
def test_remote_file(mock_transport_factory, registry):
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == "https://example.com/seed.json"
        return httpx.Response(200, json=[manifest_dict("com.example/a"), manifest_dict("com.example/b")])

    report = _importer(registry, mock_transport_factory, handler).import_from_path(
        "https://example.com/seed.json"
    )
    assert report.created == ["com.example/a", "com.example/b"]


def test_remote_file_http_error(mock_transport_factory, registry):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="missing")

    with pytest.raises(ImportSourceUnreachable) as ei:
        _importer(registry, mock_transport_factory, handler).import_from_path(
            "https://example.com/seed.json"
        )
    assert "404" in str(ei.value)


# ---- catalog -----------------------------------------------------------------
def test_catalog_pagination(mock_transport_factory, catalog_page, registry):
    cursors: List[str] = []
    pages = {
        "": catalog_page([manifest_dict("com.example/a")], "eyJwIjoxfQ=="),
        "eyJwIjoxfQ==": catalog_page(
            [manifest_dict("com.example/b"), manifest_dict("com.example/bad", version="latest")],
            "page/2+",
        ),
        "page/2+": catalog_page([manifest_dict("com.example/c")]),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        cursor = request.url.params.get("cursor", "")
        cursors.append(cursor)
        return httpx.Response(200, json=pages[cursor])

    report = _importer(registry, mock_transport_factory, handler).import_from_path(CATALOG)

    assert cursors == ["", "eyJwIjoxfQ==", "page/2+"]
    assert report.created == ["com.example/a", "com.example/b", "com.example/c"]
    assert [f.name for f in report.invalid] == ["com.example/bad"]


def test_catalog_page_failure_creates_nothing(mock_transport_factory, catalog_page, registry):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("cursor"):
            return httpx.Response(500, json={"error": "boom"})
        return httpx.Response(200, json=catalog_page([manifest_dict("com.example/a")], "next"))

    with pytest.raises(ImportSourceUnreachable):
        _importer(registry, mock_transport_factory, handler).import_from_path(CATALOG)
    assert registry.created == []


def test_catalog_repeated_cursor_stops(mock_transport_factory, catalog_page, registry):
    calls: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.params.get("cursor", ""))
        return httpx.Response(200, json=catalog_page([manifest_dict("com.example/a")], "same"))

    with pytest.raises(ImportSourceUnreachable) as ei:
        _importer(registry, mock_transport_factory, handler).import_from_path(CATALOG)
    assert "twice" in str(ei.value)
    assert calls == ["", "same"]
    assert registry.created == []


def test_catalog_page_cap(mock_transport_factory, catalog_page, registry):
    calls: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.params.get("cursor", ""))
        return httpx.Response(200, json=catalog_page([], f"c{len(calls)}"))

    with pytest.raises(ImportSourceUnreachable) as ei:
        _importer(registry, mock_transport_factory, handler, max_pages=2).import_from_path(CATALOG)
    assert "2 pages" in str(ei.value)
    assert len(calls) == 2


def test_expired_deadline(mock_transport_factory, catalog_page, registry):
    calls: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=catalog_page([]))

    with pytest.raises(ImportSourceUnreachable):
        _importer(registry, mock_transport_factory, handler).import_from_path(
            CATALOG, deadline=time.monotonic() - 0.1
        )
    assert calls == []


# ---- config-driven entry point -------------------------------------------------
def test_import_seed_without_source_does_nothing(registry):
    assert import_seed(registry, RegistryConfig()) is None
    assert registry.created == []


def test_import_seed_uses_configured_source(write_seed, registry):
    path = write_seed([manifest_dict("com.example/a")])
    report = import_seed(registry, RegistryConfig(seed_from=path, import_timeout=5))
    assert report is not None and report.created == ["com.example/a"]


# ---- deadline across the create loop -------------------------------------------
def test_expired_deadline_creates_nothing(write_seed, registry):
    path = write_seed([manifest_dict("com.example/a"), manifest_dict("com.example/b")])

    with pytest.raises(SeedImportFailed) as ei:
        SeedImporter(registry).import_from_path(path, deadline=time.monotonic() - 0.1)

    report = ei.value.report
    assert report.created == []
    assert [f.name for f in report.failed] == ["com.example/a", "com.example/b"]
    assert all("deadline" in f.reason for f in report.failed)
    assert registry.created == []


def test_deadline_is_handed_to_storage(write_seed, registry):
    path = write_seed([manifest_dict("com.example/a")])
    deadline = time.monotonic() + 60
    SeedImporter(registry).import_from_path(path, deadline=deadline)
    assert registry.deadlines == [deadline]


def test_deadline_passing_mid_import_stops_creations(write_seed):
    class SlowRegistry(InMemoryRegistry):
        def create_server(self, server, *, deadline=None):
            created = super().create_server(server, deadline=deadline)
            time.sleep(0.3)
            return created

    registry = SlowRegistry()
    path = write_seed([manifest_dict("com.example/a"), manifest_dict("com.example/b")])
    with pytest.raises(SeedImportFailed) as ei:
        SeedImporter(registry).import_from_path(path, deadline=time.monotonic() + 0.2)
    assert ei.value.report.created == ["com.example/a"]
    assert [f.name for f in ei.value.report.failed] == ["com.example/b"]
