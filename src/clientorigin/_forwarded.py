"""Resolution of the client from the standard ``Forwarded`` header.

See :rfc:`7239` for the header format.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import replace

from starlette.datastructures import Headers

from ._headers import normalize_scheme, parse_port
from ._models import ResolvedOrigin

__all__ = [
    "parse_forwarded",
    "resolve_forwarded",
]

_SEPARATOR_REGEX = re.compile(r"[,;]")
"""Separates forwarded elements (``,``) and pairs within them (``;``)."""


def parse_forwarded(values: Iterable[str]) -> dict[str, list[str]]:
    """Parse the ``Forwarded`` header into parameter lists.

    All occurrences of the header, and all elements within each occurrence,
    are flattened into a single sequence of ``key=value`` pairs.

    Parameters
    ----------
    values
        Every value of the ``Forwarded`` header, in the order received.

    Returns
    -------
    dict of list of str
        Mapping from lowercase parameter name to the values given for that
        parameter, in order. A pair with no ``=`` yields an empty value.
    """
    params: dict[str, list[str]] = {}
    for value in values:
        for pair in _SEPARATOR_REGEX.split(value):
            if not pair.strip():
                continue
            key, _, param = pair.partition("=")
            params.setdefault(key.strip().lower(), []).append(
                param.strip(' \t"')
            )
    return params


def _split_bracketed(value: str) -> tuple[str, str]:
    """Split ``[address]rest`` into the address and the rest."""
    start = value.index("[") + 1
    end = value.find("]", start)
    if end < 0:
        return value[start:], ""
    return value[start:end], value[end + 1 :]


def _parse_node(value: str) -> str:
    """Extract the address from a ``for`` parameter, dropping any port."""
    if "[" in value:
        # Drop an IPv6 zone suffix such as %eth0.
        return _split_bracketed(value)[0].split("%")[0]
    return value.split(":")[0]


def _parse_host(value: str) -> tuple[str, int | None]:
    """Split a ``host`` parameter into host and optional port."""
    if "[" in value:
        host, rest = _split_bracketed(value)
        parts = rest.split(":")
    else:
        parts = value.split(":")
        host = parts[0]
    port = parse_port(parts[1]) if len(parts) > 1 else None
    return host, port


def resolve_forwarded(
    origin: ResolvedOrigin, headers: Headers
) -> ResolvedOrigin:
    """Resolve the client using the ``Forwarded`` header.

    Only called once the immediate peer is known to be a trusted proxy.

    Parameters
    ----------
    origin
        Origin as seen by the server.
    headers
        Request headers, which must include ``Forwarded``.

    Returns
    -------
    ResolvedOrigin
        New origin. The address comes from the first ``for`` parameter. Host,
        port and scheme come from ``host`` and ``proto`` only if those were
        given exactly once, and the scheme falls back to ``http`` otherwise.
    """
    params = parse_forwarded(headers.getlist("Forwarded"))

    if params.get("for"):
        origin = replace(origin, remote_addr=_parse_node(params["for"][0]))

    hosts = params.get("host", [])
    if len(hosts) == 1:
        host, port = _parse_host(hosts[0])
        origin = replace(origin, remote_host=host, host=host)
        if port is not None:
            origin = replace(origin, port=port)

    protos = params.get("proto", [])
    scheme = protos[0] if len(protos) == 1 else "http"
    return replace(origin, scheme=normalize_scheme(scheme))
