"""Resolution of the client from the ``X-Forwarded-*`` headers."""

from __future__ import annotations

from dataclasses import replace

from starlette.datastructures import Headers

from ._headers import flatten_header, normalize_scheme, parse_port
from ._ipmatch import ProxyRangeSet, is_ip_address
from ._models import DEFAULT_PORTS, ResolvedOrigin

__all__ = ["find_client_index", "resolve_x_forwarded"]


def find_client_index(
    forwarded_for: list[str], proxies: ProxyRangeSet
) -> int | None:
    """Find the client entry in an ``X-Forwarded-For`` chain.

    Parameters
    ----------
    forwarded_for
        Entries of ``X-Forwarded-For``, left-most (original client) first.
    proxies
        Trusted proxies.

    Returns
    -------
    int or None
        Index of the right-most entry that is not a trusted proxy, or `None`
        if every entry is a trusted proxy.
    """
    for index in range(len(forwarded_for) - 1, -1, -1):
        address = forwarded_for[index].strip()
        if not (is_ip_address(address) and proxies.contains(address)):
            return index
    return None


def resolve_x_forwarded(
    origin: ResolvedOrigin, headers: Headers, proxies: ProxyRangeSet
) -> ResolvedOrigin:
    """Resolve the client using the ``X-Forwarded-*`` headers.

    Only called once the immediate peer is known to be a trusted proxy and
    there is no ``Forwarded`` header.

    ``X-Forwarded-Proto`` sets the scheme and resets the port to the
    scheme's default, which ``X-Forwarded-Port`` may then override. The
    client address is the right-most ``X-Forwarded-For`` entry that is not a
    trusted proxy. ``X-Forwarded-Host`` is only used if it has an entry at
    the same position as that address.

    Parameters
    ----------
    origin
        Origin as seen by the server.
    headers
        Request headers.
    proxies
        Trusted proxies, used to skip proxy hops in ``X-Forwarded-For``.

    Returns
    -------
    ResolvedOrigin
        New origin.
    """
    protos = flatten_header(headers, "X-Forwarded-Proto")
    if protos:
        scheme = normalize_scheme(protos[0])
        origin = replace(origin, scheme=scheme, port=DEFAULT_PORTS[scheme])

    ports = flatten_header(headers, "X-Forwarded-Port")
    if ports:
        port = parse_port(ports[0])
        if port is not None:
            origin = replace(origin, port=port)

    forwarded_for = flatten_header(headers, "X-Forwarded-For")
    index = find_client_index(forwarded_for, proxies)
    if index is None:
        return origin
    origin = replace(origin, remote_addr=forwarded_for[index].strip())

    # Hosts correlate with X-Forwarded-For by position, not by value.
    forwarded_host = flatten_header(headers, "X-Forwarded-Host")
    if index < len(forwarded_host):
        host = forwarded_host[index].strip()
        origin = replace(origin, remote_host=host, host=host)

    return origin
