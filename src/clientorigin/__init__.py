"""Resolve the real client of HTTP requests relayed by trusted proxies."""

from ._exceptions import (
    ClientOriginError,
    InvalidProxyPatternError,
    ServerRequestNotSetError,
)
from ._factory import RequestFactory, ServerRequest
from ._forwarded import parse_forwarded, resolve_forwarded
from ._headers import build_headers, parse_port
from ._ipmatch import (
    AddressPattern,
    IPPattern,
    NetworkPattern,
    ProxyRangeSet,
    parse_pattern,
)
from ._models import (
    FileUpload,
    Request,
    ResolvedOrigin,
    UploadedFile,
    Url,
    UrlScript,
)
from ._paths import get_script_path, split_user_info
from ._resolver import ClientAttributeResolver
from ._starlette import server_request_from_starlette
from ._xforwarded import resolve_x_forwarded

__all__ = [
    "AddressPattern",
    "ClientAttributeResolver",
    "ClientOriginError",
    "FileUpload",
    "IPPattern",
    "InvalidProxyPatternError",
    "NetworkPattern",
    "ProxyRangeSet",
    "Request",
    "RequestFactory",
    "ResolvedOrigin",
    "ServerRequest",
    "ServerRequestNotSetError",
    "UploadedFile",
    "Url",
    "UrlScript",
    "build_headers",
    "get_script_path",
    "parse_forwarded",
    "parse_pattern",
    "parse_port",
    "resolve_forwarded",
    "resolve_x_forwarded",
    "server_request_from_starlette",
    "split_user_info",
]
