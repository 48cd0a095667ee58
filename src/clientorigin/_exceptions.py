"""Exceptions raised by clientorigin."""

from __future__ import annotations

__all__ = [
    "ClientOriginError",
    "InvalidProxyPatternError",
    "ServerRequestNotSetError",
]


class ClientOriginError(Exception):
    """Base class for clientorigin exceptions."""


class InvalidProxyPatternError(ClientOriginError, ValueError):
    """A trusted proxy pattern is not a valid IP address or network.

    Parameters
    ----------
    pattern
        The pattern that could not be parsed.
    """

    def __init__(self, pattern: str) -> None:
        super().__init__(f"Invalid trusted proxy pattern: {pattern!r}")
        self.pattern = pattern


class ServerRequestNotSetError(ClientOriginError, RuntimeError):
    """The request factory was used before a server request was set."""

    def __init__(self) -> None:
        super().__init__("Server request not set")
