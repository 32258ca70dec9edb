# SPDX-License-Identifier: MIT
# mcp_registry/validators/urls.py
"""
URL-shaped fields of a manifest: repository, website, icons, and the
reverse-DNS ownership rule.

Ownership rule
--------------
A server named ``com.example/weather`` may only point its website and remote
endpoints at ``example.com`` or one of its subdomains. Local development
hosts (``localhost``, ``*.localhost``, ``127.0.0.1``) are exempt.
"""
from __future__ import annotations

import re
from typing import Iterable, Optional
from urllib.parse import SplitResult, urlsplit

from ..errors import ErrorKind, ManifestValidationError
from ..schemas import Icon, Repository, ServerJSON

SCHEME_HTTPS = "https"

REPOSITORY_SOURCE_GITHUB = "github"
REPOSITORY_SOURCE_GITLAB = "gitlab"

_REPOSITORY_URL_RES = {
    REPOSITORY_SOURCE_GITHUB: re.compile(r"https?://(www\.)?github\.com/[\w.-]+/[\w.-]+/?", re.ASCII),
    REPOSITORY_SOURCE_GITLAB: re.compile(r"https?://(www\.)?gitlab\.com/[\w.-]+/[\w.-]+/?", re.ASCII),
}

_SUBFOLDER_CHARS_RE = re.compile(r"[a-zA-Z0-9\-_./]+")
_CONTROL_OR_SPACE_RE = re.compile(r"[\x00-\x20\x7f]")

LOCAL_HOSTS = ("localhost", "127.0.0.1")


# ------------------------------- parsing ----------------------------------- #

def parse_url(raw: str) -> Optional[SplitResult]:
    """
    Parse ``raw`` the way a strict URL parser would; ``None`` when malformed.

    ``urlsplit`` accepts almost anything, so reject control characters and
    spaces, and touch ``.port`` to surface an invalid port.
    """
    if _CONTROL_OR_SPACE_RE.search(raw):
        return None
    try:
        parts = urlsplit(raw)
        parts.port
    except ValueError:
        return None
    return parts


def is_local_host(hostname: str) -> bool:
    return hostname in LOCAL_HOSTS or hostname.endswith(".localhost")


# ------------------------------ repository --------------------------------- #

def is_valid_repository_url(source: str, url: str) -> bool:
    pattern = _REPOSITORY_URL_RES.get(source)
    return bool(pattern and pattern.fullmatch(url))


def is_valid_subfolder_path(path: str) -> bool:
    """Relative path made of safe characters, without empty, ``.`` or ``..`` segments."""
    if not path:
        return True
    if path.startswith("/") or path.endswith("/"):
        return False
    if not _SUBFOLDER_CHARS_RE.fullmatch(path):
        return False
    return all(segment not in ("", ".", "..") for segment in path.split("/"))


def validate_repository(repository: Optional[Repository]) -> None:
    if repository is None or (not repository.url and not repository.source):
        return

    if not is_valid_repository_url(repository.source, repository.url):
        raise ManifestValidationError(
            ErrorKind.REPOSITORY_INVALID_URL,
            f"invalid repository URL: {repository.url}",
            field="repository.url",
        )

    if repository.subfolder and not is_valid_subfolder_path(repository.subfolder):
        raise ManifestValidationError(
            ErrorKind.REPOSITORY_INVALID_SUBFOLDER,
            f"invalid subfolder path: {repository.subfolder}",
            field="repository.subfolder",
        )


# ----------------------------- website / title ----------------------------- #

def validate_website_url(website_url: str) -> None:
    if not website_url:
        return

    def fail(reason: str) -> ManifestValidationError:
        return ManifestValidationError(
            ErrorKind.WEBSITE_URL_INVALID, reason, field="websiteUrl"
        )

    parsed = parse_url(website_url)
    if parsed is None:
        raise fail(f"invalid websiteUrl: {website_url}")
    if not parsed.scheme:
        raise fail(f"websiteUrl must be absolute (include scheme): {website_url}")
    if parsed.scheme != SCHEME_HTTPS:
        raise fail(f"websiteUrl must use https scheme: {website_url}")


def validate_title(title: str) -> None:
    if title and not title.strip():
        raise ManifestValidationError(
            ErrorKind.TITLE_BLANK, "title cannot be only whitespace", field="title"
        )


# --------------------------------- icons ----------------------------------- #

def validate_icon(icon: Icon) -> None:
    parsed = parse_url(icon.src)
    if parsed is None:
        raise ManifestValidationError(
            ErrorKind.ICON_INVALID, f"invalid icon src URL: {icon.src}"
        )
    if not parsed.scheme:
        raise ManifestValidationError(
            ErrorKind.ICON_INVALID,
            f"icon src must be an absolute URL (include scheme): {icon.src}",
        )
    # no http or data: URIs
    if parsed.scheme != SCHEME_HTTPS:
        raise ManifestValidationError(
            ErrorKind.ICON_INVALID,
            f"icon src must use https scheme (got {parsed.scheme}): {icon.src}",
        )


def validate_icons(icons: Iterable[Icon]) -> None:
    for i, icon in enumerate(icons):
        try:
            validate_icon(icon)
        except ManifestValidationError as e:
            raise ManifestValidationError(
                e.kind, f"invalid icon at index {i}: {e.detail}", field=f"icons[{i}]"
            ) from e


# ------------------------- namespace ownership ----------------------------- #

def extract_publisher_domain(namespace: str) -> str:
    """
    Convert a reverse-DNS namespace to a domain: ``com.example`` -> ``example.com``.

    Accepts a full server name; only the text before the first ``/`` is used.
    Returns ``""`` when fewer than two labels are present.
    """
    namespace_part = namespace.split("/", 1)[0]
    labels = namespace_part.split(".")
    if len(labels) < 2:
        return ""
    return ".".join(reversed(labels))


def is_valid_host_for_domain(hostname: str, publisher_domain: str) -> bool:
    return hostname == publisher_domain or hostname.endswith("." + publisher_domain)


def validate_url_matches_namespace(url: str, server_name: str, *, field: str) -> None:
    """
    Check that ``url``'s host belongs to the publisher domain of ``server_name``.

    Raises:
        ManifestValidationError: NAMESPACE_MISMATCH or INVALID_NAMESPACE_FORMAT.
    """
    parsed = parse_url(url)
    if parsed is None:
        raise ManifestValidationError(
            ErrorKind.NAMESPACE_MISMATCH,
            f"{field} {url} does not match namespace {server_name}: invalid URL format",
            field=field,
        )

    hostname = parsed.hostname or ""
    if not hostname:
        raise ManifestValidationError(
            ErrorKind.NAMESPACE_MISMATCH,
            f"{field} {url} does not match namespace {server_name}: "
            "URL must have a valid hostname",
            field=field,
        )

    if is_local_host(hostname):
        return

    publisher_domain = extract_publisher_domain(server_name).lower()
    if not publisher_domain:
        raise ManifestValidationError(
            ErrorKind.INVALID_NAMESPACE_FORMAT,
            f"invalid namespace format: cannot extract domain from {server_name}",
            field=field,
        )

    if not is_valid_host_for_domain(hostname, publisher_domain):
        raise ManifestValidationError(
            ErrorKind.NAMESPACE_MISMATCH,
            f"{field} {url} does not match namespace {server_name}: "
            f"host {hostname} does not match publisher domain {publisher_domain}",
            field=field,
        )


def validate_remote_namespace_match(server: ServerJSON) -> None:
    for i, remote in enumerate(server.remotes):
        validate_url_matches_namespace(remote.url, server.name, field=f"remotes[{i}].url")


def validate_website_namespace_match(server: ServerJSON) -> None:
    if not server.website_url:
        return
    validate_url_matches_namespace(server.website_url, server.name, field="websiteUrl")
