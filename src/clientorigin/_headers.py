"""Helpers for reading proxy-related request headers."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from starlette.datastructures import Headers

__all__ = [
    "build_headers",
    "flatten_header",
    "normalize_scheme",
    "parse_port",
]

_LEADING_DIGITS_REGEX = re.compile(r"^\s*([0-9]+)")
"""Matches the leading digits of a port value."""


def build_headers(headers: Mapping[str, str | Iterable[str]]) -> Headers:
    """Build case-insensitive request headers from a mapping.

    Parameters
    ----------
    headers
        Mapping of header name to either a single value or a sequence of
        values. A sequence represents a header sent several times, and order
        is preserved.

    Returns
    -------
    starlette.datastructures.Headers
        Headers in the form used by Starlette requests.
    """
    raw = []
    for name, values in headers.items():
        if isinstance(values, str):
            values = [values]
        key = name.lower().encode("latin-1")
        raw.extend((key, v.encode("latin-1")) for v in values)
    return Headers(raw=raw)


def flatten_header(headers: Headers, name: str) -> list[str]:
    """Return the comma-separated elements of a header, in order.

    Every occurrence of the header is split on commas and the results are
    concatenated. Elements are stripped of whitespace and empty elements are
    dropped.
    """
    return [
        element
        for value in headers.getlist(name)
        for element in (e.strip() for e in value.split(","))
        if element
    ]


def normalize_scheme(scheme: str) -> str:
    """Reduce a forwarded scheme to either ``https`` or ``http``."""
    return "https" if scheme.lower() == "https" else "http"


def parse_port(value: str) -> int | None:
    """Parse a forwarded port.

    Only the leading digits are considered, so ``8443abc`` is 8443.

    Returns
    -------
    int or None
        The port, or `None` if there are no leading digits or the value is
        outside the valid port range.
    """
    if m := _LEADING_DIGITS_REGEX.match(value):
        port = int(m.group(1))
        if port <= 65535:
            return port
    return None
