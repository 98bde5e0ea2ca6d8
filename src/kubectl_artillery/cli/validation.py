"""Argument validation for CLI commands."""

from __future__ import annotations

import re
from pathlib import Path

from ..errors import InvalidArgumentError

DNS1123_SUBDOMAIN_MAX_LENGTH = 253
_DNS1123_LABEL = r"[a-z0-9]([-a-z0-9]*[a-z0-9])?"
_DNS1123_SUBDOMAIN = re.compile(rf"^{_DNS1123_LABEL}(\.{_DNS1123_LABEL})*$")


def dns_subdomain_errors(value: str) -> list[str]:
    """Return the reasons ``value`` is not a valid DNS-1123 subdomain."""
    errors = []
    if len(value) > DNS1123_SUBDOMAIN_MAX_LENGTH:
        errors.append(f"must be no more than {DNS1123_SUBDOMAIN_MAX_LENGTH} characters")
    if not _DNS1123_SUBDOMAIN.match(value):
        errors.append(
            "a lowercase RFC 1123 subdomain must consist of lower case alphanumeric "
            "characters, '-' or '.', and must start and end with an alphanumeric character"
        )
    return errors


def validate_name(value: str, kind: str) -> str:
    errors = dns_subdomain_errors(value)
    if errors:
        details = "\n- ".join(errors)
        raise InvalidArgumentError(
            f"{kind} name {value} must be a valid DNS subdomain name, \n- {details}"
        )
    return value


def validate_script_exists(script: str | Path) -> Path:
    path = Path(script).resolve()
    if not path.is_file():
        raise InvalidArgumentError(f"cannot find script file {script}")
    return path
