# tests/conftest.py
# Shared fixtures: manifest builders, an in-memory registry and httpx mocks.
from __future__ import annotations

import copy
import json
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx
import pytest

from mcp_registry.schema_support import CURRENT_SCHEMA_URL
from mcp_registry.schemas import ServerJSON


# ---- manifest helpers --------------------------------------------------------
def manifest_dict(name: str = "com.example/weather", **overrides: Any) -> Dict[str, Any]:
    """Minimal valid manifest as published JSON; ``overrides`` use wire names."""
    data: Dict[str, Any] = {
        "$schema": CURRENT_SCHEMA_URL,
        "name": name,
        "description": "Weather forecasts",
        "version": "1.0.0",
    }
    data.update(overrides)
    return data


def make_server(name: str = "com.example/weather", **overrides: Any) -> ServerJSON:
    return ServerJSON.model_validate(manifest_dict(name, **overrides))


def stdio_package(**overrides: Any) -> Dict[str, Any]:
    pkg: Dict[str, Any] = {
        "registryType": "npm",
        "identifier": "@example/weather",
        "version": "1.0.0",
        "transport": {"type": "stdio"},
    }
    pkg.update(overrides)
    return pkg


class InMemoryRegistry:
    """Records created servers; raises for names listed in ``fail_names``."""

    def __init__(self, fail_names: Iterable[str] = ()) -> None:
        self.fail_names = set(fail_names)
        self.created: List[ServerJSON] = []
        self.deadlines: List[Optional[float]] = []

    def create_server(self, server: ServerJSON, *, deadline: Optional[float] = None) -> ServerJSON:
        self.deadlines.append(deadline)
        if server.name in self.fail_names:
            raise RuntimeError(f"duplicate server {server.name}")
        self.created.append(server)
        return server

    @property
    def names(self) -> List[str]:
        return [s.name for s in self.created]


# ---- fixtures ----------------------------------------------------------------
@pytest.fixture
def mock_transport_factory() -> (
    Callable[[Callable[[httpx.Request], httpx.Response]], httpx.MockTransport]
):
    """
    Factory returning an httpx.MockTransport from a handler function.

    Usage:
        def handler(request: httpx.Request) -> httpx.Response: ...
        transport = mock_transport_factory(handler)
        client = RegistryHTTPClient(transport=transport)
    """

    def _factory(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> httpx.MockTransport:
        return httpx.MockTransport(handler)

    return _factory


@pytest.fixture
def server() -> ServerJSON:
    return make_server()


@pytest.fixture
def registry() -> InMemoryRegistry:
    return InMemoryRegistry()


@pytest.fixture
def write_seed(tmp_path) -> Callable[[List[Dict[str, Any]]], str]:
    """Write a list of manifest dicts to a seed file and return its path."""

    def _write(records: List[Dict[str, Any]], filename: str = "seed.json") -> str:
        path = tmp_path / filename
        path.write_text(json.dumps(copy.deepcopy(records)), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def catalog_page() -> Callable[[List[Dict[str, Any]], Optional[str]], Dict[str, Any]]:
    """Build one ``/v0/servers`` list response."""

    def _page(records: List[Dict[str, Any]], next_cursor: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "servers": [{"server": r, "_meta": {}} for r in records],
            "metadata": {"count": len(records)},
        }
        if next_cursor:
            body["metadata"]["nextCursor"] = next_cursor
        return body

    return _page
