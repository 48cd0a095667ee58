"""Construction of `Request` objects from incoming server requests."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog
from starlette.datastructures import URL, Headers
from structlog.stdlib import BoundLogger

from ._exceptions import ServerRequestNotSetError
from ._ipmatch import ProxyRangeSet
from ._models import FileUpload, Request, UploadedFile, Url, UrlScript
from ._paths import get_script_path, split_user_info
from ._resolver import ClientAttributeResolver

__all__ = ["RequestFactory", "ServerRequest"]


def _empty_body() -> bytes:
    return b""


@dataclass
class ServerRequest:
    """An incoming request as delivered by the server.

    Server parameters follow CGI naming. ``REMOTE_ADDR``, ``REMOTE_HOST`` and
    ``SCRIPT_NAME`` are the ones that matter here.
    """

    method: str
    """HTTP method."""

    uri: URL | str
    """Request URI as seen by the server, including any user information."""

    headers: Headers = field(default_factory=Headers)
    """Request headers."""

    server_params: Mapping[str, str | None] = field(default_factory=dict)
    """CGI-style server parameters."""

    cookies: Mapping[str, str] = field(default_factory=dict)
    """Request cookies."""

    parsed_body: Mapping[str, Any] | None = None
    """Decoded body fields, if the body was a form."""

    uploaded_files: Mapping[str, UploadedFile] = field(default_factory=dict)
    """Uploaded files keyed by form field name."""

    body: Callable[[], bytes] = field(default=_empty_body, repr=False)
    """Reads the raw request body."""


class RequestFactory:
    """Build `Request` objects with the client resolved behind proxies.

    A factory is normally created once at application startup and then used
    for every request.

    Parameters
    ----------
    proxies
        Trusted proxies, as IP addresses or CIDR blocks.
    logger
        Logger to use for debug messages. Defaults to the ``clientorigin``
        logger.

    Examples
    --------
    .. code-block:: python

       factory = RequestFactory(["10.0.0.0/8"])
       request = factory.create_request(server_request)
       print(request.remote_address)
    """

    def __init__(
        self,
        proxies: Iterable[str] | ProxyRangeSet = (),
        *,
        logger: BoundLogger | None = None,
    ) -> None:
        self._logger = logger or structlog.get_logger("clientorigin")
        self._resolver = ClientAttributeResolver(proxies, logger=self._logger)
        self._server_request: ServerRequest | None = None

    @property
    def proxies(self) -> ProxyRangeSet:
        """Trusted proxies."""
        return self._resolver.proxies

    def set_proxies(self, proxies: Iterable[str] | ProxyRangeSet) -> None:
        """Replace the trusted proxies."""
        self._resolver.set_proxies(proxies)

    def set_server_request(self, request: ServerRequest) -> None:
        self._server_request = request

    def get_server_request(self) -> ServerRequest:
        """Return the current server request.

        Raises
        ------
        ServerRequestNotSetError
            Raised if no server request has been set yet.
        """
        if self._server_request is None:
            raise ServerRequestNotSetError
        return self._server_request

    def create_request(
        self, server_request: ServerRequest | None = None
    ) -> Request:
        """Create a `Request` from the server request.

        Parameters
        ----------
        server_request
            If given, becomes the current server request first.

        Returns
        -------
        Request
            The request, with remote address, remote host, and URL scheme,
            host, and port taken from proxy headers if the request came from
            a trusted proxy.

        Raises
        ------
        ServerRequestNotSetError
            Raised if no server request was given or set earlier.
        """
        if server_request is not None:
            self.set_server_request(server_request)
        request = self.get_server_request()

        url = self._create_url(request)
        origin = self._resolver.resolve(
            url,
            request.headers,
            self._get_param(request, "REMOTE_ADDR"),
            self._get_param(request, "REMOTE_HOST"),
        )
        url = origin.apply_to(url)
        script_name = request.server_params.get("SCRIPT_NAME") or ""

        return Request(
            url=UrlScript(url, get_script_path(url.path, script_name)),
            post=dict(request.parsed_body or {}),
            files={
                k: FileUpload(
                    name=f.client_filename,
                    size=f.size,
                    error=f.error,
                    tmp_name=f.stream_uri,
                )
                for k, f in request.uploaded_files.items()
            },
            cookies=dict(request.cookies),
            headers=self._flatten_headers(request.headers),
            method=request.method,
            remote_address=origin.remote_addr,
            remote_host=origin.remote_host,
            raw_body_callback=request.body,
        )

    def _create_url(self, request: ServerRequest) -> Url:
        uri = request.uri
        if isinstance(uri, str):
            uri = URL(uri)
        user_info = ""
        if "@" in uri.netloc:
            user_info = uri.netloc.rpartition("@")[0]
        user, password = split_user_info(user_info)
        return Url(
            scheme=uri.scheme,
            user=user,
            password=password,
            host=uri.hostname or "",
            port=uri.port,
            path=uri.path or ("/" if uri.hostname else ""),
            query=uri.query,
        )

    def _flatten_headers(self, headers: Headers) -> dict[str, str]:
        values: dict[str, list[str]] = {}
        for name, value in headers.items():
            values.setdefault(name.lower(), []).append(value)
        return {k: "\n".join(v) for k, v in values.items()}

    def _get_param(self, request: ServerRequest, name: str) -> str | None:
        """Get a server parameter, falling back on a header of that name."""
        value = request.server_params.get(name)
        if value is None:
            value = request.headers.get(name)
        return value
