"""Matching of IP addresses against trusted proxy patterns."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from ipaddress import (
    IPv4Address,
    IPv4Network,
    IPv6Address,
    IPv6Network,
    ip_address,
    ip_network,
)
from typing_extensions import override

from ._exceptions import InvalidProxyPatternError

__all__ = [
    "AddressPattern",
    "IPPattern",
    "NetworkPattern",
    "ProxyRangeSet",
    "is_ip_address",
    "parse_address",
    "parse_pattern",
]


def parse_address(address: str) -> IPv4Address | IPv6Address | None:
    """Parse a textual IP address.

    Parameters
    ----------
    address
        IPv4 or IPv6 literal, without brackets or port.

    Returns
    -------
    ipaddress.IPv4Address or ipaddress.IPv6Address or None
        The parsed address, or `None` if the string is not an IP literal.
    """
    try:
        return ip_address(address.strip())
    except ValueError:
        return None


def is_ip_address(address: str) -> bool:
    """Return whether a string is a valid IPv4 or IPv6 literal."""
    return parse_address(address) is not None


class IPPattern(ABC):
    """A single trusted proxy pattern."""

    @abstractmethod
    def matches(self, address: str) -> bool:
        """Check whether an address matches this pattern.

        Addresses that cannot be parsed, or that are of a different IP
        version than the pattern, never match.
        """


class AddressPattern(IPPattern):
    """Pattern matching exactly one IP address.

    Parameters
    ----------
    address
        The trusted address.
    """

    def __init__(self, address: IPv4Address | IPv6Address) -> None:
        self.address = address

    @override
    def matches(self, address: str) -> bool:
        parsed = parse_address(address)
        if parsed is None or parsed.version != self.address.version:
            return False
        # Compare integer values so that an IPv6 zone suffix is ignored.
        return int(parsed) == int(self.address)

    def __repr__(self) -> str:
        return f"AddressPattern({str(self.address)!r})"

    def __str__(self) -> str:
        return str(self.address)


class NetworkPattern(IPPattern):
    """Pattern matching every address in a CIDR block.

    Parameters
    ----------
    network
        The trusted network.
    """

    def __init__(self, network: IPv4Network | IPv6Network) -> None:
        self.network = network

    @override
    def matches(self, address: str) -> bool:
        parsed = parse_address(address)
        if parsed is None or parsed.version != self.network.version:
            return False
        return parsed in self.network

    def __repr__(self) -> str:
        return f"NetworkPattern({str(self.network)!r})"

    def __str__(self) -> str:
        return str(self.network)


def parse_pattern(pattern: str) -> IPPattern:
    """Parse a trusted proxy pattern.

    Parameters
    ----------
    pattern
        A bare IPv4 or IPv6 address, or a CIDR block such as ``10.0.0.0/8``
        or ``2001:db8::/32``. Host bits set in a CIDR block are ignored.

    Returns
    -------
    IPPattern
        `AddressPattern` for a bare address, `NetworkPattern` for a block.

    Raises
    ------
    InvalidProxyPatternError
        Raised if the pattern is neither an address nor a network.
    """
    value = pattern.strip()
    try:
        if "/" in value:
            return NetworkPattern(ip_network(value, strict=False))
        return AddressPattern(ip_address(value))
    except ValueError as e:
        raise InvalidProxyPatternError(pattern) from e


class ProxyRangeSet:
    """Ordered, read-only set of trusted proxy patterns.

    Parameters
    ----------
    patterns
        Pattern strings as accepted by `parse_pattern`.

    Raises
    ------
    InvalidProxyPatternError
        Raised if any of the patterns is invalid.
    """

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self._raw = tuple(patterns)
        self._patterns = tuple(parse_pattern(p) for p in self._raw)

    def __bool__(self) -> bool:
        return bool(self._patterns)

    def __iter__(self) -> Iterator[IPPattern]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __repr__(self) -> str:
        return f"ProxyRangeSet({list(self._raw)!r})"

    @property
    def patterns(self) -> tuple[str, ...]:
        """The pattern strings this set was built from."""
        return self._raw

    def contains(self, address: str | None) -> bool:
        """Return whether an address matches any trusted pattern."""
        if not address:
            return False
        return any(p.matches(address) for p in self._patterns)
