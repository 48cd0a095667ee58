"""Value objects for URLs, resolved origins, and requests."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import Any, Self

__all__ = [
    "DEFAULT_PORTS",
    "FileUpload",
    "Request",
    "ResolvedOrigin",
    "UploadedFile",
    "Url",
    "UrlScript",
]

DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443}
"""Conventional ports for the URL schemes this package deals with."""


@dataclass(frozen=True)
class Url:
    """An absolute URL.

    Instances are immutable. Use the ``with_*`` methods to derive a modified
    copy.
    """

    scheme: str = ""
    """URL scheme, such as ``http`` or ``https``."""

    user: str = ""
    """User name from the user information, or the empty string."""

    password: str = ""
    """Password from the user information, or the empty string."""

    host: str = ""
    """Host name or IP address, without brackets for IPv6."""

    port: int | None = None
    """Explicit port, or `None` to use the default port of the scheme."""

    path: str = ""
    """URL path."""

    query: str = ""
    """Query string without the leading ``?``."""

    fragment: str = ""
    """Fragment without the leading ``#``."""

    @property
    def default_port(self) -> int | None:
        """Conventional port for the scheme, if known."""
        return DEFAULT_PORTS.get(self.scheme.lower())

    @property
    def effective_port(self) -> int | None:
        """Explicit port if set, otherwise the scheme default."""
        return self.port if self.port is not None else self.default_port

    @property
    def authority(self) -> str:
        """Host and, if not the default for the scheme, port."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        port = self.effective_port
        if port is not None and port != self.default_port:
            return f"{host}:{port}"
        return host

    @property
    def host_url(self) -> str:
        """Scheme, user information, and authority."""
        if not self.host:
            return ""
        userinfo = ""
        if self.user:
            userinfo = self.user
            if self.password:
                userinfo += f":{self.password}"
            userinfo += "@"
        scheme = f"{self.scheme}:" if self.scheme else ""
        return f"{scheme}//{userinfo}{self.authority}"

    def with_scheme(self, scheme: str) -> Self:
        return replace(self, scheme=scheme)

    def with_host(self, host: str) -> Self:
        return replace(self, host=host)

    def with_port(self, port: int | None) -> Self:
        return replace(self, port=port)

    def with_path(self, path: str) -> Self:
        return replace(self, path=path)

    def with_query(self, query: str) -> Self:
        return replace(self, query=query)

    def with_user_info(self, user: str, password: str = "") -> Self:
        return replace(self, user=user, password=password)

    def __str__(self) -> str:
        url = self.host_url + self.path
        if self.query:
            url += f"?{self.query}"
        if self.fragment:
            url += f"#{self.fragment}"
        return url


@dataclass(frozen=True)
class UrlScript:
    """A URL together with the path of the script handling it.

    The script path is the leading part of the URL path at which the
    application considers itself mounted.

    Raises
    ------
    ValueError
        Raised if the script path is not a prefix of the URL path.
    """

    url: Url
    """The full request URL."""

    script_path: str
    """Path of the front controller, a prefix of the URL path."""

    def __post_init__(self) -> None:
        if not self.url.path.startswith(self.script_path):
            msg = (
                f"Script path {self.script_path!r} is not a prefix of"
                f" {self.url.path!r}"
            )
            raise ValueError(msg)

    @property
    def base_path(self) -> str:
        """Script path up to and including its last ``/``."""
        return self.script_path[: self.script_path.rfind("/") + 1]

    @property
    def base_url(self) -> str:
        """Absolute URL of the base path."""
        return self.url.host_url + self.base_path

    @property
    def relative_path(self) -> str:
        """Part of the URL path below the base path."""
        return self.url.path[len(self.base_path) :]

    @property
    def path_info(self) -> str:
        """Part of the URL path following the script path."""
        return self.url.path[len(self.script_path) :]

    def __str__(self) -> str:
        return str(self.url)


@dataclass(frozen=True)
class ResolvedOrigin:
    """Client identity and request origin after proxy resolution."""

    remote_addr: str | None
    """IP address of the client."""

    remote_host: str | None
    """Host name of the client or, behind proxies, the forwarded host."""

    scheme: str
    """Scheme the client used to reach the outermost proxy."""

    host: str
    """Host the client asked for."""

    port: int | None
    """Port the client connected to, or `None` for the scheme default."""

    @classmethod
    def from_url(
        cls, url: Url, remote_addr: str | None, remote_host: str | None
    ) -> Self:
        """Start resolution from the URL as seen by the server."""
        return cls(
            remote_addr=remote_addr,
            remote_host=remote_host,
            scheme=url.scheme,
            host=url.host,
            port=url.port,
        )

    def apply_to(self, url: Url) -> Url:
        """Return a copy of the URL with this origin's scheme, host and port."""
        return replace(url, scheme=self.scheme, host=self.host, port=self.port)


@dataclass(frozen=True)
class UploadedFile:
    """Uploaded file as described by the incoming request."""

    client_filename: str | None
    """File name supplied by the client."""

    size: int | None
    """Size of the upload in bytes, if known."""

    error: int = 0
    """Upload error code, 0 on success."""

    stream_uri: str | None = None
    """Location of the backing storage, such as a temporary file path."""


@dataclass(frozen=True)
class FileUpload:
    """Uploaded file exposed on a `Request`."""

    name: str | None
    size: int | None
    error: int
    tmp_name: str | None

    @property
    def is_ok(self) -> bool:
        """Whether the file was uploaded without error."""
        return self.error == 0

    @property
    def has_file(self) -> bool:
        """Whether the client actually sent a file."""
        return self.error == 0 and bool(self.name)


@dataclass
class Request:
    """An HTTP request with the client identity already resolved.

    Header names are stored lowercased. Headers that were sent more than once
    are joined with newlines.
    """

    url: UrlScript
    """Request URL and script path."""

    post: Mapping[str, Any] = field(default_factory=dict)
    """Decoded POST fields."""

    files: Mapping[str, FileUpload] = field(default_factory=dict)
    """Uploaded files keyed by form field name."""

    cookies: Mapping[str, str] = field(default_factory=dict)
    """Request cookies."""

    headers: Mapping[str, str] = field(default_factory=dict)
    """Request headers keyed by lowercase name."""

    method: str = "GET"
    """HTTP method."""

    remote_address: str | None = None
    """Resolved IP address of the client."""

    remote_host: str | None = None
    """Resolved host name of the client."""

    raw_body_callback: Callable[[], bytes] | None = field(
        default=None, repr=False, compare=False
    )
    """Deferred accessor for the request body."""

    @cached_property
    def raw_body(self) -> bytes | None:
        """The request body, read on first access."""
        if self.raw_body_callback is None:
            return None
        return self.raw_body_callback()

    def get_header(self, name: str, default: str | None = None) -> str | None:
        """Return a header by case-insensitive name."""
        return self.headers.get(name.lower(), default)

    def get_cookie(self, name: str) -> str | None:
        return self.cookies.get(name)

    def get_post(self, name: str) -> Any:
        return self.post.get(name)

    def get_file(self, name: str) -> FileUpload | None:
        return self.files.get(name)

    def is_method(self, method: str) -> bool:
        """Check the HTTP method, ignoring case."""
        return self.method.upper() == method.upper()

    def is_secure(self) -> bool:
        """Whether the client reached the application over HTTPS."""
        return self.url.url.scheme == "https"
