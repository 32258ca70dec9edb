# SPDX-License-Identifier: MIT
# mcp_registry/config.py
"""
Runtime configuration for validation and seed import.

Values are resolved in this order (later wins):
  1. built-in defaults
  2. ``[mcp_registry]`` table of the TOML file named by ``MCP_REGISTRY_CONFIG``
  3. ``MCP_REGISTRY_*`` environment variables

Env:
  MCP_REGISTRY_SEED_FROM                    path, URL or "embedded" (default: unset)
  MCP_REGISTRY_ENABLE_REGISTRY_VALIDATION   true/false (default: true)
  MCP_REGISTRY_IMPORT_TIMEOUT               seconds for a whole import (default: 300)
  MCP_REGISTRY_REQUEST_TIMEOUT              seconds per HTTP request (default: 20)
  MCP_REGISTRY_MAX_CATALOG_PAGES            page cap for catalog sources (default: 1000)
"""
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import tomli

from .errors import ConfigurationError

__all__ = ["RegistryConfig", "ENV_PREFIX", "CONFIG_FILE_ENV"]

ENV_PREFIX = "MCP_REGISTRY_"
CONFIG_FILE_ENV = "MCP_REGISTRY_CONFIG"
TOML_TABLE = "mcp_registry"

_FIELD_TYPES = {"str": str, "bool": bool, "float": float, "int": int}


def _to_bool(v: Any) -> Optional[bool]:
    if v is None:
        return None
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in ("true", "1", "yes", "on"):
        return True
    if s in ("false", "0", "no", "off"):
        return False
    return None


@dataclass(frozen=True)
class RegistryConfig:
    seed_from: str = ""
    enable_registry_validation: bool = True
    import_timeout: float = 300.0
    request_timeout: float = 20.0
    max_catalog_pages: int = 1000

    def __post_init__(self) -> None:
        if self.import_timeout <= 0:
            raise ConfigurationError(
                "import_timeout must be positive",
                config_key="import_timeout",
                config_value=self.import_timeout,
            )
        if self.request_timeout <= 0:
            raise ConfigurationError(
                "request_timeout must be positive",
                config_key="request_timeout",
                config_value=self.request_timeout,
            )
        if self.max_catalog_pages < 1:
            raise ConfigurationError(
                "max_catalog_pages must be at least 1",
                config_key="max_catalog_pages",
                config_value=self.max_catalog_pages,
            )

    # ------------------------------ loaders -------------------------------- #

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], base: Optional["RegistryConfig"] = None) -> "RegistryConfig":
        """
        Build a config from raw (string or typed) values keyed by field name.
        Unknown keys are ignored; ``None`` values keep the base value.
        """
        base = base or cls()
        changes: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in values or values[f.name] is None:
                continue
            raw = values[f.name]
            changes[f.name] = _coerce(f.name, raw, _FIELD_TYPES[str(f.type)])
        return replace(base, **changes)

    @classmethod
    def from_toml(cls, path: Union[str, Path], base: Optional["RegistryConfig"] = None) -> "RegistryConfig":
        p = Path(path).expanduser()
        try:
            with p.open("rb") as f:
                data = tomli.load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"config file not found: {p}", config_key=CONFIG_FILE_ENV, config_value=str(p)
            ) from e
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(
                f"invalid TOML in {p}: {e}", config_key=CONFIG_FILE_ENV, config_value=str(p)
            ) from e
        table = data.get(TOML_TABLE, {})
        if not isinstance(table, dict):
            raise ConfigurationError(
                f"[{TOML_TABLE}] in {p} must be a table", config_key=TOML_TABLE
            )
        return cls.from_mapping(table, base=base)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> "RegistryConfig":
        env = os.environ if environ is None else environ
        config = cls()

        config_file = config_file or env.get(CONFIG_FILE_ENV)
        if config_file:
            config = cls.from_toml(config_file, base=config)

        overrides = {
            f.name: env.get(ENV_PREFIX + f.name.upper())
            for f in fields(cls)
        }
        return cls.from_mapping(overrides, base=config)


def _coerce(key: str, raw: Any, target: type) -> Any:
    if target is bool:
        b = _to_bool(raw)
        if b is None:
            raise ConfigurationError(f"{key} must be a boolean", config_key=key, config_value=raw)
        return b
    try:
        if target is int:
            return int(raw)
        if target is float:
            return float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"{key} must be a number", config_key=key, config_value=raw
        ) from e
    return str(raw).strip()
