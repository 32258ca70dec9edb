# SPDX-License-Identifier: MIT
# mcp_registry/bulk/sources.py
"""
Seed source resolution: turn a locator string into a list of manifests.

Supported locators:
  - "embedded"                              → seed.json bundled with this package
  - local path (``data/seed.json``)         → JSON array of manifests
  - http(s) URL to a file                   → JSON array of manifests
  - http(s) URL of a catalog listing
    (path contains ``/v0/servers``)         → paginated ``servers`` envelope

Decoding a seed array is all-or-nothing: one undecodable entry fails the
whole batch. Per-record validation happens later in the importer.
"""
from __future__ import annotations

import logging
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import List, Optional, Set
from urllib.parse import urlsplit

from pydantic import ValidationError

from ..client import RegistryHTTPClient
from ..errors import ImportDecodeFailure, ImportSourceUnreachable
from ..schemas import SERVER_LIST_ADAPTER, ServerJSON

logger = logging.getLogger("mcp_registry.importer")

EMBEDDED_SOURCE = "embedded"
EMBEDDED_SEED_FILE = "seed.json"

CATALOG_PATH_SEGMENTS = ("/v0/servers", "/v0.1/servers")


class SourceKind(str, Enum):
    EMBEDDED = "embedded"
    LOCAL_FILE = "local_file"
    REMOTE_FILE = "remote_file"
    CATALOG = "catalog"


def classify_source(locator: str) -> SourceKind:
    if locator == EMBEDDED_SOURCE:
        return SourceKind.EMBEDDED
    if locator.startswith(("http://", "https://")):
        path = urlsplit(locator).path
        if any(segment in path for segment in CATALOG_PATH_SEGMENTS):
            return SourceKind.CATALOG
        return SourceKind.REMOTE_FILE
    return SourceKind.LOCAL_FILE


# ------------------------------- decoding ---------------------------------- #

def decode_seed(data: bytes, *, source: str) -> List[ServerJSON]:
    """Decode a bare JSON array of manifests."""
    try:
        return SERVER_LIST_ADAPTER.validate_json(data)
    except ValidationError as e:
        raise ImportDecodeFailure(
            f"failed to parse seed data as ServerJSON array format: {e}", source=source
        ) from e


def read_embedded_seed() -> bytes:
    return (resources.files("mcp_registry") / "data" / EMBEDDED_SEED_FILE).read_bytes()


def read_local_seed(path: str) -> bytes:
    p = Path(path).expanduser()
    try:
        return p.read_bytes()
    except OSError as e:
        raise ImportSourceUnreachable(
            f"failed to read seed data from {path}: {e}", source=path
        ) from e


# ------------------------------- catalog ----------------------------------- #

def fetch_catalog(
    client: RegistryHTTPClient,
    url: str,
    *,
    deadline: Optional[float] = None,
    max_pages: int = 1000,
) -> List[ServerJSON]:
    """
    Walk a paginated catalog listing and return every ``server`` in order.

    Stops when a page has no ``metadata.nextCursor``. A page cap and a
    repeated-cursor check stop servers that never end pagination; any page
    failure fails the whole fetch.
    """
    records: List[ServerJSON] = []
    seen_cursors: Set[str] = set()
    cursor = ""
    pages = 0

    while True:
        if pages >= max_pages:
            raise ImportSourceUnreachable(
                f"catalog pagination did not finish within {max_pages} pages", source=url
            )
        page = client.list_servers(url, cursor=cursor, deadline=deadline)
        pages += 1
        records.extend(entry.server for entry in page.servers)
        logger.debug("catalog page %d: %d server(s)", pages, len(page.servers))

        next_cursor = page.next_cursor
        if not next_cursor:
            break
        if next_cursor in seen_cursors:
            raise ImportSourceUnreachable(
                f"catalog returned cursor {next_cursor!r} twice; pagination does not terminate",
                source=url,
            )
        seen_cursors.add(next_cursor)
        cursor = next_cursor

    logger.info("fetched %d server(s) from %d catalog page(s) at %s", len(records), pages, url)
    return records


# ------------------------------- entry point -------------------------------- #

def read_seed(
    locator: str,
    *,
    client: Optional[RegistryHTTPClient] = None,
    deadline: Optional[float] = None,
    max_pages: int = 1000,
) -> List[ServerJSON]:
    """
    Resolve ``locator`` and decode its manifests (no validation).

    Raises:
        ImportSourceUnreachable: file missing, HTTP failure, deadline, runaway pagination.
        ImportDecodeFailure: payload is not a manifest array / catalog page.
    """
    if not locator:
        raise ImportSourceUnreachable("seed source is required")

    kind = classify_source(locator)
    logger.debug("seed source %s classified as %s", locator, kind.value)

    if kind is SourceKind.CATALOG:
        return fetch_catalog(
            client or RegistryHTTPClient(), locator, deadline=deadline, max_pages=max_pages
        )
    if kind is SourceKind.REMOTE_FILE:
        data = (client or RegistryHTTPClient()).fetch_bytes(locator, deadline=deadline)
    elif kind is SourceKind.EMBEDDED:
        data = read_embedded_seed()
    else:
        data = read_local_seed(locator)
    return decode_seed(data, source=locator)
