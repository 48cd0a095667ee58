"""Resolution of client attributes for requests relayed by proxies."""

from __future__ import annotations

from collections.abc import Iterable

import structlog
from starlette.datastructures import Headers
from structlog.stdlib import BoundLogger

from ._forwarded import resolve_forwarded
from ._ipmatch import ProxyRangeSet
from ._models import ResolvedOrigin, Url
from ._xforwarded import resolve_x_forwarded

__all__ = ["ClientAttributeResolver"]


class ClientAttributeResolver:
    """Determine the real client of a request behind trusted proxies.

    Proxy headers are only believed if the request came directly from one of
    the trusted proxies. In that case, the ``Forwarded`` header is used if
    present and the ``X-Forwarded-*`` headers otherwise, never both.

    The resolver holds no per-request state and may be shared between
    concurrent requests, as long as the proxies are not replaced while a
    resolution is in progress.

    Parameters
    ----------
    proxies
        Trusted proxies, as IP addresses or CIDR blocks.
    logger
        Logger to use for debug messages. Defaults to the ``clientorigin``
        logger.

    Raises
    ------
    InvalidProxyPatternError
        Raised if one of the proxies is not a valid address or network.
    """

    def __init__(
        self,
        proxies: Iterable[str] | ProxyRangeSet = (),
        *,
        logger: BoundLogger | None = None,
    ) -> None:
        self._logger = logger or structlog.get_logger("clientorigin")
        self._proxies = ProxyRangeSet()
        self.set_proxies(proxies)

    @property
    def proxies(self) -> ProxyRangeSet:
        """Trusted proxies."""
        return self._proxies

    @proxies.setter
    def proxies(self, proxies: Iterable[str] | ProxyRangeSet) -> None:
        self.set_proxies(proxies)

    def set_proxies(self, proxies: Iterable[str] | ProxyRangeSet) -> None:
        """Replace the trusted proxies.

        Raises
        ------
        InvalidProxyPatternError
            Raised if one of the proxies is not a valid address or network.
        """
        if not isinstance(proxies, ProxyRangeSet):
            proxies = ProxyRangeSet(proxies)
        self._proxies = proxies

    def is_trusted(self, remote_addr: str | None) -> bool:
        """Return whether the immediate peer is a trusted proxy."""
        return self._proxies.contains(remote_addr)

    def resolve(
        self,
        url: Url,
        headers: Headers,
        remote_addr: str | None,
        remote_host: str | None,
    ) -> ResolvedOrigin:
        """Resolve the client address, host, scheme, and port.

        Parameters
        ----------
        url
            Request URL as seen by the server.
        headers
            Request headers.
        remote_addr
            Address of the immediate peer.
        remote_host
            Host name of the immediate peer, if known.

        Returns
        -------
        ResolvedOrigin
            The resolved origin. If the peer is not a trusted proxy, this is
            the peer and the URL unchanged.
        """
        origin = ResolvedOrigin.from_url(url, remote_addr, remote_host)
        if not self.is_trusted(remote_addr):
            return origin

        if any(headers.getlist("Forwarded")):
            resolved = resolve_forwarded(origin, headers)
            source = "Forwarded"
        else:
            resolved = resolve_x_forwarded(origin, headers, self._proxies)
            source = "X-Forwarded"
        self._logger.debug(
            "Resolved client behind trusted proxy",
            proxy=remote_addr,
            source=source,
            remote_addr=resolved.remote_addr,
            remote_host=resolved.remote_host,
            scheme=resolved.scheme,
            host=resolved.host,
            port=resolved.port,
        )
        return resolved
