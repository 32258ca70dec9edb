# SPDX-License-Identifier: MIT
# mcp_registry/validators/packages.py
"""
Package, argument and transport validation.

Package transports may use ``{variable}`` placeholders in their URL, as long
as each placeholder is declared on the same package (environment variable,
argument name or argument value hint). Remote transports are published
endpoints: no placeholders, https only, never a local host.
"""
from __future__ import annotations

import re
from typing import FrozenSet, Iterable, List

from ..errors import ErrorKind, ManifestValidationError
from ..schemas import (
    ARGUMENT_NAMED,
    TRANSPORT_SSE,
    TRANSPORT_STDIO,
    TRANSPORT_STREAMABLE_HTTP,
    Argument,
    Package,
    Transport,
)
from .urls import SCHEME_HTTPS, is_local_host, parse_url
from .versions import validate_version

NETWORK_TRANSPORTS = (TRANSPORT_STREAMABLE_HTTP, TRANSPORT_SSE)

# "--directory <path>", "--port 8080" and "$PORT" are descriptions, not flags
_INVALID_NAMED_ARGUMENT_CHARS = ("<", ">", " ", "$")

_TEMPLATE_VARIABLE_RE = re.compile(r"\{([^}]+)\}")

# parseable stand-ins for common placeholders; everything else -> "placeholder"
_TEMPLATE_REPLACEMENTS = {
    "{host}": "example.com",
    "{port}": "8080",
    "{path}": "api",
    "{protocol}": "http",
    "{scheme}": "http",
}


# ------------------------------ templating --------------------------------- #

def extract_template_variables(url: str) -> List[str]:
    """Names of ``{variable}`` placeholders in ``url``, in order of appearance."""
    return _TEMPLATE_VARIABLE_RE.findall(url)


def _replace_template_variables(url: str) -> str:
    result = url
    for placeholder, replacement in _TEMPLATE_REPLACEMENTS.items():
        result = result.replace(placeholder, replacement)
    return _TEMPLATE_VARIABLE_RE.sub("placeholder", result)


def is_valid_url(url: str) -> bool:
    """Syntactic check with placeholders substituted: needs a scheme and a host."""
    parsed = parse_url(_replace_template_variables(url))
    return parsed is not None and bool(parsed.scheme) and bool(parsed.netloc)


def is_valid_templated_url(
    url: str, available_variables: Iterable[str], allow_templates: bool
) -> bool:
    if not is_valid_url(url):
        return False
    template_vars = extract_template_variables(url)
    if not template_vars:
        return True
    if not allow_templates:
        return False
    available = set(available_variables)
    return all(var in available for var in template_vars)


def is_valid_remote_url(url: str) -> bool:
    if not is_valid_templated_url(url, (), allow_templates=False):
        return False
    parsed = parse_url(url)
    if parsed is None or parsed.scheme != SCHEME_HTTPS:
        return False
    return not is_local_host(parsed.hostname or "")


def collect_available_variables(package: Package) -> FrozenSet[str]:
    """Environment variable names, argument names and value hints of ``package``."""
    variables = {env.name for env in package.environment_variables}
    for arg in (*package.runtime_arguments, *package.package_arguments):
        if arg.name:
            variables.add(arg.name)
        if arg.value_hint:
            variables.add(arg.value_hint)
    return frozenset(variables)


# ------------------------------- arguments --------------------------------- #

def validate_named_argument_name(name: str) -> None:
    if not name:
        raise ManifestValidationError(
            ErrorKind.ARGUMENT_NAME_REQUIRED, "named argument name is required"
        )
    if any(ch in name for ch in _INVALID_NAMED_ARGUMENT_CHARS):
        raise ManifestValidationError(
            ErrorKind.ARGUMENT_INVALID_CHARACTERS,
            f"invalid named argument name: {name}",
        )


def validate_argument_value_fields(name: str, value: str, default: str) -> None:
    if value and value.startswith(name):
        raise ManifestValidationError(
            ErrorKind.ARGUMENT_VALUE_STARTS_WITH_NAME,
            f"argument value cannot start with the argument name: "
            f"value starts with argument name '{name}': {value}",
        )
    if default and default.startswith(name):
        raise ManifestValidationError(
            ErrorKind.ARGUMENT_VALUE_STARTS_WITH_NAME,
            f"argument default cannot start with the argument name: "
            f"default starts with argument name '{name}': {default}",
        )


def validate_argument(argument: Argument) -> None:
    if argument.type != ARGUMENT_NAMED:
        return
    validate_named_argument_name(argument.name)
    validate_argument_value_fields(argument.name, argument.value, argument.default)


# ------------------------------- transports -------------------------------- #

def validate_package_transport(transport: Transport, available_variables: FrozenSet[str]) -> None:
    if transport.type == TRANSPORT_STDIO:
        if transport.url:
            raise ManifestValidationError(
                ErrorKind.TRANSPORT_URL_NOT_ALLOWED,
                f"url must be empty for {transport.type} transport type, got: {transport.url}",
            )
        return

    if transport.type not in NETWORK_TRANSPORTS:
        raise ManifestValidationError(
            ErrorKind.TRANSPORT_UNSUPPORTED_TYPE,
            f"unsupported transport type: {transport.type}",
        )

    if not transport.url:
        raise ManifestValidationError(
            ErrorKind.TRANSPORT_URL_REQUIRED,
            f"url is required for {transport.type} transport type",
        )

    if is_valid_templated_url(transport.url, available_variables, allow_templates=True):
        return

    template_vars = extract_template_variables(transport.url)
    undefined = [var for var in template_vars if var not in available_variables]
    if template_vars and undefined and is_valid_url(transport.url):
        raise ManifestValidationError(
            ErrorKind.TRANSPORT_UNDEFINED_TEMPLATE_VARIABLE,
            f"template variables in URL {transport.url} reference undefined variables "
            f"{undefined}. Available variables: {sorted(available_variables)}",
        )
    raise ManifestValidationError(
        ErrorKind.TRANSPORT_INVALID_URL, f"invalid remote URL: {transport.url}"
    )


def validate_remote_transport(transport: Transport) -> None:
    if transport.type not in NETWORK_TRANSPORTS:
        raise ManifestValidationError(
            ErrorKind.TRANSPORT_UNSUPPORTED_TYPE,
            f"unsupported transport type for remotes: {transport.type} "
            "(only streamable-http and sse are supported)",
        )
    if not transport.url:
        raise ManifestValidationError(
            ErrorKind.TRANSPORT_URL_REQUIRED,
            f"url is required for {transport.type} transport type",
        )
    if not is_valid_remote_url(transport.url):
        raise ManifestValidationError(
            ErrorKind.TRANSPORT_INVALID_URL, f"invalid remote URL: {transport.url}"
        )


# -------------------------------- packages --------------------------------- #

def _has_whitespace(value: str) -> bool:
    return any(ch.isspace() for ch in value)


def validate_package_field(package: Package) -> None:
    """
    Field-level validation of one package (no registry lookups).

    Order: identifier, version, runtime arguments, package arguments, transport.
    """
    if _has_whitespace(package.identifier):
        raise ManifestValidationError(
            ErrorKind.PACKAGE_IDENTIFIER_HAS_SPACES,
            f"package identifier cannot contain spaces: {package.identifier!r}",
        )

    validate_version(package.version)

    for label, arguments in (
        ("runtime", package.runtime_arguments),
        ("package", package.package_arguments),
    ):
        for i, arg in enumerate(arguments):
            try:
                validate_argument(arg)
            except ManifestValidationError as e:
                raise ManifestValidationError(
                    e.kind,
                    f"invalid {label} argument at index {i}: {e.detail}",
                    field=f"{label}Arguments[{i}]",
                ) from e

    available = collect_available_variables(package)
    try:
        validate_package_transport(package.transport, available)
    except ManifestValidationError as e:
        raise ManifestValidationError(
            e.kind, f"invalid transport: {e.detail}", field="transport"
        ) from e
