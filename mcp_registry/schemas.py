# mcp_registry/schemas.py
"""
Pydantic models for server manifests (``server.json``) and the catalog
list-response envelope.

Field names follow the published JSON (camelCase, ``$schema``, ``_meta``)
through aliases; Python code uses snake_case. Models are frozen: validation
only reads them.

Enumerated values (transport ``type``, argument ``type``, repository
``source``) are kept as plain strings so that an unknown value reaches the
validators and gets a precise error instead of failing at decode time.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

__all__ = [
    "TRANSPORT_STDIO",
    "TRANSPORT_STREAMABLE_HTTP",
    "TRANSPORT_SSE",
    "ARGUMENT_NAMED",
    "ARGUMENT_POSITIONAL",
    "PUBLISHER_PROVIDED_KEY",
    "Argument",
    "Icon",
    "KeyValueInput",
    "Package",
    "Repository",
    "ServerJSON",
    "ServerListResponse",
    "ServerMeta",
    "ServerResponse",
    "Transport",
    "SERVER_LIST_ADAPTER",
]

TRANSPORT_STDIO = "stdio"
TRANSPORT_STREAMABLE_HTTP = "streamable-http"
TRANSPORT_SSE = "sse"

ARGUMENT_NAMED = "named"
ARGUMENT_POSITIONAL = "positional"

PUBLISHER_PROVIDED_KEY = "io.modelcontextprotocol.registry/publisher-provided"


class _Model(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="allow",
    )

    def to_jsonable(self) -> Dict[str, Any]:
        """JSON-safe dict using the wire field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class KeyValueInput(_Model):
    name: str = ""
    description: Optional[str] = None
    value: str = ""
    default: str = ""
    is_required: bool = Field(False, alias="isRequired")
    is_secret: bool = Field(False, alias="isSecret")


class Argument(_Model):
    type: str = ""
    name: str = ""
    value: str = ""
    default: str = ""
    value_hint: str = Field("", alias="valueHint")
    description: Optional[str] = None
    is_required: bool = Field(False, alias="isRequired")
    is_repeated: bool = Field(False, alias="isRepeated")


class Transport(_Model):
    type: str = ""
    url: str = ""
    headers: List[KeyValueInput] = []


class Package(_Model):
    registry_type: str = Field("", alias="registryType")
    registry_base_url: str = Field("", alias="registryBaseUrl")
    identifier: str = ""
    version: str = ""
    file_sha256: str = Field("", alias="fileSha256")
    runtime_hint: str = Field("", alias="runtimeHint")
    transport: Transport = Field(default_factory=Transport)
    runtime_arguments: List[Argument] = Field(default_factory=list, alias="runtimeArguments")
    package_arguments: List[Argument] = Field(default_factory=list, alias="packageArguments")
    environment_variables: List[KeyValueInput] = Field(
        default_factory=list, alias="environmentVariables"
    )


class Icon(_Model):
    src: str = ""
    mime_type: Optional[str] = Field(None, alias="mimeType")
    sizes: List[str] = []
    theme: Optional[str] = None


class Repository(_Model):
    url: str = ""
    source: str = ""
    id: str = ""
    subfolder: str = ""


class ServerMeta(_Model):
    publisher_provided: Optional[Dict[str, Any]] = Field(None, alias=PUBLISHER_PROVIDED_KEY)


class ServerJSON(_Model):
    schema_: str = Field("", alias="$schema")
    name: str = ""
    description: str = ""
    title: str = ""
    version: str = ""
    website_url: str = Field("", alias="websiteUrl")
    repository: Optional[Repository] = None
    icons: List[Icon] = []
    packages: List[Package] = []
    remotes: List[Transport] = []
    meta: Optional[ServerMeta] = Field(None, alias="_meta")


# ------------------------- catalog list envelope --------------------------- #

class ServerResponse(_Model):
    server: ServerJSON
    meta: Optional[Dict[str, Any]] = Field(None, alias="_meta")


class ListMetadata(_Model):
    next_cursor: str = Field("", alias="nextCursor")
    count: Optional[int] = None


class ServerListResponse(_Model):
    servers: List[ServerResponse] = []
    metadata: Optional[ListMetadata] = None

    @property
    def next_cursor(self) -> str:
        return self.metadata.next_cursor if self.metadata else ""


# A seed file is a bare JSON array of manifests.
SERVER_LIST_ADAPTER: TypeAdapter[List[ServerJSON]] = TypeAdapter(List[ServerJSON])
