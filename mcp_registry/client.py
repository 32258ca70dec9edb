# -*- coding: utf-8 -*-
"""
MCP registry: blocking HTTP client used by the seed importer.

Exposes a small surface over httpx:
- get(...)           → one GET with deadline + consistent error mapping
- fetch_bytes(...)   → body of a direct file URL (seed.json on a web server)
- list_servers(...)  → one decoded page of a catalog ``/v0/servers`` listing

Errors:
- FetchError (an ImportSourceUnreachable) for transport errors, timeouts,
  expired deadlines and non-2xx responses; carries ``status`` (0 when no
  response was received), ``detail`` and ``body``.
- ImportDecodeFailure when a catalog page is not a valid list response.
"""
from __future__ import annotations

import json
import logging
import os
import time
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from .errors import ImportDecodeFailure, ImportSourceUnreachable
from .schemas import ServerListResponse

__all__ = ["RegistryHTTPClient", "FetchError", "DEFAULT_USER_AGENT"]

DEFAULT_USER_AGENT = "mcp-registry-python/0.1 (+python-httpx)"
_WIRE_HEADERS = ("content-encoding", "content-length", "transfer-encoding")

# --------------------------------------------------------------------------------------
# Logging (library-safe): use module logger; only attach a handler if MCP_REGISTRY_DEBUG=1
# --------------------------------------------------------------------------------------
logger = logging.getLogger("mcp_registry.client")


def _maybe_configure_logging() -> None:
    dbg = (os.getenv("MCP_REGISTRY_DEBUG") or "").strip().lower()
    if dbg in ("1", "true", "yes", "on"):
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter("[mcp-registry][client] %(levelname)s: %(message)s")
            )
            logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)


_maybe_configure_logging()


class FetchError(ImportSourceUnreachable):
    """
    Structured fetch error.

    Attributes:
        status (int): HTTP status code (0 for network errors and deadlines).
        detail (str): Short human-friendly explanation.
        body (Any): Parsed error payload (dict/text) returned by the server.
    """

    def __init__(self, status: int, detail: str, *, url: Optional[str] = None, body: Any = None) -> None:
        super().__init__(detail, source=url)
        self.status = status
        self.detail = detail
        self.body = body


class RegistryHTTPClient:
    """
    Thin sync client around httpx for reading seed sources.

    Example:
        c = RegistryHTTPClient(timeout=20.0)
        page = c.list_servers("https://registry.example.com/v0/servers")
    """

    def __init__(
        self,
        *,
        timeout: float = 20.0,
        token: Optional[str] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self._transport = transport
        self._headers: Dict[str, str] = {
            "Accept": "application/json",
            "User-Agent": user_agent or DEFAULT_USER_AGENT,
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    # ------------------------------- public API --------------------------- #

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        deadline: Optional[float] = None,
    ) -> httpx.Response:
        """
        Single GET with consistent error handling.

        ``deadline`` is an absolute ``time.monotonic()`` value. It caps the
        httpx timeout and is re-checked after every body chunk, so a server
        that keeps trickling bytes cannot hold the request past it. Nothing
        is retried.
        """
        timeout = self._timeout_for(url, deadline)
        logger.debug("GET %s params=%s timeout=%.1fs", url, params, timeout)

        try:
            with httpx.Client(
                timeout=timeout,
                headers=self._headers,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                with client.stream("GET", url, params=params) as streamed:
                    chunks: List[bytes] = []
                    for chunk in streamed.iter_bytes():
                        chunks.append(chunk)
                        self._check_deadline(url, deadline)
                    # body is already decoded; drop the headers that describe the wire form
                    headers = [
                        (k, v)
                        for k, v in streamed.headers.multi_items()
                        if k.lower() not in _WIRE_HEADERS
                    ]
                    resp = httpx.Response(
                        streamed.status_code,
                        headers=headers,
                        content=b"".join(chunks),
                        request=streamed.request,
                    )
        except httpx.TimeoutException as e:
            raise FetchError(0, f"GET {url} timed out: {e}", url=url) from e
        except httpx.RequestError as e:
            # surfacing transport errors (DNS, TLS, refused connections, ...)
            raise FetchError(0, f"GET {url} failed: {e}", url=url) from e

        if not resp.is_success:
            body: Any
            try:
                body = resp.json()
            except json.JSONDecodeError:
                body = resp.text
            raise FetchError(
                resp.status_code,
                f"HTTP request failed with status: {resp.status_code}",
                url=url,
                body=body,
            )
        return resp

    def fetch_bytes(self, url: str, *, deadline: Optional[float] = None) -> bytes:
        return self.get(url, deadline=deadline).content

    def list_servers(
        self,
        url: str,
        *,
        cursor: str = "",
        deadline: Optional[float] = None,
    ) -> ServerListResponse:
        """
        Fetch one catalog page. ``cursor`` is sent back exactly as the server
        returned it.
        """
        params = {"cursor": cursor} if cursor else None
        resp = self.get(url, params=params, deadline=deadline)
        try:
            return ServerListResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise ImportDecodeFailure(
                f"failed to parse registry API response: {e}", source=url
            ) from e

    # ------------------------------ internals ------------------------------ #

    def _timeout_for(self, url: str, deadline: Optional[float]) -> float:
        if deadline is None:
            return self.timeout
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise FetchError(0, f"deadline exceeded before GET {url}", url=url)
        return min(self.timeout, remaining)

    @staticmethod
    def _check_deadline(url: str, deadline: Optional[float]) -> None:
        if deadline is not None and time.monotonic() >= deadline:
            raise FetchError(0, f"deadline exceeded while reading {url}", url=url)
