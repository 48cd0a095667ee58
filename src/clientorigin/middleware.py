"""ASGI middleware to update the request based on trusted proxy headers."""

from __future__ import annotations

from collections.abc import Iterable
from copy import copy

from starlette.datastructures import URL, Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from ._ipmatch import ProxyRangeSet
from ._models import DEFAULT_PORTS, Url
from ._resolver import ClientAttributeResolver

__all__ = ["ProxyOriginMiddleware"]

_WEBSOCKET_SCHEMES = {"http": "ws", "https": "wss"}
"""Mapping of resolved schemes to WebSocket schemes."""


class ProxyOriginMiddleware:
    """ASGI middleware to replace the client and URL with the proxied ones.

    If the request came from one of the trusted proxies, the client address,
    scheme, server host and port, and ``Host`` header in the request scope
    are replaced with those resolved from the ``Forwarded`` header or, if
    that is absent, the ``X-Forwarded-*`` headers. Requests from any other
    peer are passed through unchanged.

    In either case, the resolved `~clientorigin.ResolvedOrigin` is stored
    as ``origin`` in the request state.

    Parameters
    ----------
    proxies
        The trusted proxies, as IP addresses or CIDR blocks. If not
        specified, no proxy is trusted and the middleware only records the
        origin.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        proxies: Iterable[str] | ProxyRangeSet | None = None,
    ) -> None:
        self._app = app
        self._resolver = ClientAttributeResolver(proxies or ())

    async def __call__(
        self, scope: Scope, receive: Receive, send: Send
    ) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self._app(scope, receive, send)
            return
        scope = copy(scope)
        scope.setdefault("state", {})

        client = scope.get("client")
        remote_addr = client[0] if client else None
        headers = Headers(scope=scope)
        url = self._build_url(scope)
        origin = self._resolver.resolve(url, headers, remote_addr, None)
        scope["state"]["origin"] = origin
        if not self._resolver.is_trusted(remote_addr):
            await self._app(scope, receive, send)
            return

        # Update the request's understanding of the client.
        client_port = client[1] if client else 0
        scope["client"] = (origin.remote_addr, client_port)
        if scope["type"] == "websocket":
            scope["scheme"] = _WEBSOCKET_SCHEMES[origin.scheme]
        else:
            scope["scheme"] = origin.scheme

        resolved = origin.apply_to(url)
        if resolved.host:
            scope["server"] = (resolved.host, resolved.effective_port)
            host_header = resolved.authority.encode("latin-1")
            scope["headers"] = [
                (k, v) for k, v in scope["headers"] if k.lower() != b"host"
            ]
            scope["headers"].append((b"host", host_header))

        await self._app(scope, receive, send)

    def _build_url(self, scope: Scope) -> Url:
        """Build the URL as seen by the server, with an HTTP scheme."""
        url = URL(scope=scope)
        scheme = "https" if url.scheme in ("https", "wss") else "http"
        port = url.port
        if port == DEFAULT_PORTS[scheme]:
            port = None
        return Url(
            scheme=scheme,
            host=url.hostname or "",
            port=port,
            path=url.path,
            query=url.query,
        )
