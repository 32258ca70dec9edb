# SPDX-License-Identifier: MIT
# mcp_registry/bulk/importer.py
"""
SeedImporter reads a seed source, validates every manifest and creates the
valid ones in the registry, one after another.

Outcome per record:
  - invalid  : failed validation; skipped, reported, does not fail the call
  - failed   : valid but ``create_server`` raised; reported, fails the call
  - created  : stored

Source-level problems (unreachable, undecodable, runaway pagination) abort
the whole import before anything is created.
"""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, Tuple

from ..client import RegistryHTTPClient
from ..config import RegistryConfig
from ..errors import ErrorKind, SeedImportFailed
from ..schemas import ServerJSON
from ..validators.manifest import check_manifest
from .sources import read_seed

__all__ = [
    "RegistryService",
    "RecordFailure",
    "ImportReport",
    "SeedImporter",
    "import_seed",
]

# --------------------------------------------------------------------------------------
# Logging (library-safe): use module logger; only attach a handler if MCP_REGISTRY_DEBUG=1
# --------------------------------------------------------------------------------------
logger = logging.getLogger("mcp_registry.importer")


def _maybe_configure_logging() -> None:
    dbg = (os.getenv("MCP_REGISTRY_DEBUG") or "").strip().lower()
    if dbg in ("1", "true", "yes", "on"):
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter("[mcp-registry][importer] %(levelname)s: %(message)s")
            )
            logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)


_maybe_configure_logging()


class RegistryService(Protocol):
    """
    Storage collaborator. Any exception counts as a failed creation.

    ``deadline`` is the import deadline (absolute ``time.monotonic()``), or
    ``None``; storage should give up once it has passed.
    """

    def create_server(self, server: ServerJSON, *, deadline: Optional[float] = None) -> Any: ...


@dataclass(frozen=True)
class RecordFailure:
    name: str
    reason: str
    kind: ErrorKind = ErrorKind.IMPORT_RECORD_INVALID

    def __str__(self) -> str:
        return f"{self.name}: {self.reason}"


@dataclass(frozen=True)
class ImportReport:
    source: str = ""
    created: List[str] = field(default_factory=list)
    invalid: List[RecordFailure] = field(default_factory=list)
    failed: List[RecordFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        text = f"{len(self.created)} created, {len(self.invalid)} invalid, {len(self.failed)} failed"
        if self.created:
            text += f"; created: {self.created}"
        if self.failed:
            text += f"; failed: {[str(f) for f in self.failed]}"
        return text


class SeedImporter:
    """
    Usage:
        importer = SeedImporter(registry)
        report = importer.import_from_path("data/seed.json")
    """

    def __init__(
        self,
        registry: RegistryService,
        *,
        client: Optional[RegistryHTTPClient] = None,
        timeout: float = 20.0,
        max_pages: int = 1000,
    ) -> None:
        self.registry = registry
        self.client = client or RegistryHTTPClient(timeout=timeout)
        self.max_pages = max_pages

    def import_from_path(self, path: str, *, deadline: Optional[float] = None) -> ImportReport:
        """
        Import every valid manifest found at ``path``.

        Returns:
            ImportReport when every valid record was created.

        Raises:
            ImportSourceUnreachable / ImportDecodeFailure: batch-fatal source errors.
            SeedImportFailed: at least one valid record could not be created;
                ``.report`` holds the full outcome.
        """
        servers = read_seed(path, client=self.client, deadline=deadline, max_pages=self.max_pages)
        valid, invalid = self._validate(servers)

        created: List[str] = []
        failed: List[RecordFailure] = []
        for server in valid:
            if deadline is not None and time.monotonic() >= deadline:
                failed.append(
                    RecordFailure(
                        server.name,
                        "import deadline exceeded before creation",
                        ErrorKind.IMPORT_RECORD_CREATE_FAILED,
                    )
                )
                logger.warning("Deadline exceeded, not creating server %s", server.name)
                continue
            try:
                self.registry.create_server(server, deadline=deadline)
            except Exception as e:
                # a single bad record must not stop the rest of the batch
                failed.append(RecordFailure(server.name, str(e), ErrorKind.IMPORT_RECORD_CREATE_FAILED))
                logger.warning("Failed to create server %s: %s", server.name, e)
            else:
                created.append(server.name)

        report = ImportReport(source=path, created=created, invalid=invalid, failed=failed)

        if failed:
            logger.error(
                "Import completed with errors: %d servers created successfully, %d servers failed",
                len(created),
                len(failed),
            )
            if created:
                logger.info("Successfully created servers: %s", created)
            logger.error("Failed servers: %s", [str(f) for f in failed])
            raise SeedImportFailed(report, source=path)

        logger.info("Import completed successfully: all %d servers created", len(created))
        if created:
            logger.info("Successfully created servers: %s", created)
        return report

    def _validate(self, servers: List[ServerJSON]) -> Tuple[List[ServerJSON], List[RecordFailure]]:
        valid: List[ServerJSON] = []
        invalid: List[RecordFailure] = []
        for server in servers:
            error = check_manifest(server)
            if error is not None:
                invalid.append(RecordFailure(server.name, str(error)))
                logger.warning("Skipping invalid server '%s': %s", server.name, error)
                continue
            valid.append(server)

        if invalid:
            logger.warning(
                "Validation summary: %d servers passed validation, %d invalid servers skipped",
                len(valid),
                len(invalid),
            )
            for failure in invalid:
                logger.warning("  - Server '%s': %s", failure.name, failure.reason)
        else:
            logger.info("Validation summary: All %d servers passed validation", len(valid))
        return valid, invalid


def import_seed(registry: RegistryService, config: RegistryConfig) -> Optional[ImportReport]:
    """
    Run the import configured by ``config.seed_from`` within
    ``config.import_timeout`` seconds. Returns ``None`` when no seed source
    is configured.
    """
    if not config.seed_from:
        return None
    logger.info("Importing data from %s...", config.seed_from)
    importer = SeedImporter(
        registry,
        timeout=config.request_timeout,
        max_pages=config.max_catalog_pages,
    )
    deadline = time.monotonic() + config.import_timeout
    return importer.import_from_path(config.seed_from, deadline=deadline)
