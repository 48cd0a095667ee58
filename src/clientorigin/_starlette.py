"""Conversion of Starlette requests into `ServerRequest` objects."""

from __future__ import annotations

from typing import Any

from starlette.datastructures import UploadFile
from starlette.requests import Request as StarletteRequest

from ._factory import ServerRequest
from ._models import UploadedFile

__all__ = ["server_request_from_starlette"]

_FORM_CONTENT_TYPES = (
    "application/x-www-form-urlencoded",
    "multipart/form-data",
)
"""Content types whose bodies are decoded into fields and files."""


def _uploaded_file(upload: UploadFile) -> UploadedFile:
    name = getattr(upload.file, "name", None)
    return UploadedFile(
        client_filename=upload.filename,
        size=upload.size,
        error=0,
        stream_uri=name if isinstance(name, str) else None,
    )


async def server_request_from_starlette(
    request: StarletteRequest,
) -> ServerRequest:
    """Convert a Starlette request into a `ServerRequest`.

    The body is read immediately, since Starlette only allows reading it
    asynchronously. Form bodies are also decoded into fields and uploaded
    files.

    Parameters
    ----------
    request
        The incoming Starlette (or FastAPI) request.

    Returns
    -------
    ServerRequest
        The request with CGI-style server parameters derived from the ASGI
        scope. ``REMOTE_ADDR`` is the immediate peer and ``SCRIPT_NAME`` is
        the ASGI root path.
    """
    body = await request.body()

    fields: dict[str, Any] | None = None
    files: dict[str, UploadedFile] = {}
    content_type = request.headers.get("Content-Type", "")
    if content_type.split(";")[0].strip().lower() in _FORM_CONTENT_TYPES:
        form = await request.form()
        fields = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                files[key] = _uploaded_file(value)
            else:
                fields[key] = value

    server = request.scope.get("server")
    server_params = {
        "REMOTE_ADDR": request.client.host if request.client else None,
        "REMOTE_HOST": None,
        "SCRIPT_NAME": request.scope.get("root_path", ""),
        "SERVER_NAME": server[0] if server else None,
        "SERVER_PORT": str(server[1]) if server and server[1] else None,
    }

    return ServerRequest(
        method=request.method,
        uri=request.url,
        headers=request.headers,
        server_params=server_params,
        cookies=dict(request.cookies),
        parsed_body=fields,
        uploaded_files=files,
        body=lambda: body,
    )
