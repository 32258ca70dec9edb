# -*- coding: utf-8 -*-
"""
examples/seed_import_example.py

Validate and import MCP server manifests into an in-memory registry.

Env (override as needed):
  MCP_REGISTRY_SEED_FROM="embedded"     # path, file URL or https://host/v0/servers
  MCP_REGISTRY_IMPORT_TIMEOUT="300"
  MCP_REGISTRY_CONFIG="registry.toml"   # optional TOML with an [mcp_registry] table
  MCP_REGISTRY_DEBUG="1"                # verbose logs

Usage:
  python -m examples.seed_import_example
"""
from __future__ import annotations

import json
import sys
from typing import Dict, Optional

from mcp_registry import RegistryConfig, ServerJSON, import_seed
from mcp_registry.errors import SeedImportError, SeedImportFailed


class DictRegistry:
    """Stores manifests by name; a second manifest with the same name is rejected."""

    def __init__(self) -> None:
        self.servers: Dict[str, ServerJSON] = {}

    def create_server(self, server: ServerJSON, *, deadline: Optional[float] = None) -> ServerJSON:
        if server.name in self.servers:
            raise ValueError(f"server {server.name} already exists")
        self.servers[server.name] = server
        return server


def main() -> int:
    config = RegistryConfig.from_env()
    if not config.seed_from:
        config = RegistryConfig.from_mapping({"seed_from": "embedded"}, base=config)

    registry = DictRegistry()
    try:
        report = import_seed(registry, config)
    except SeedImportFailed as e:
        print(f"[import] partial failure: {e.report.summary()}", file=sys.stderr)
        return 1
    except SeedImportError as e:
        print(f"[import] aborted: {e}", file=sys.stderr)
        return 2

    assert report is not None
    print(f"[import] {report.summary()}")
    for failure in report.invalid:
        print(f"  skipped {failure}")
    print(json.dumps([s.to_jsonable() for s in registry.servers.values()], indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
