"""Tests for the client attribute resolver."""

from __future__ import annotations

import pytest

from clientorigin import (
    ClientAttributeResolver,
    InvalidProxyPatternError,
    ProxyRangeSet,
    ResolvedOrigin,
    Url,
    build_headers,
)

_URL = Url(scheme="http", host="internal.example.org", path="/")

_ALL_HEADERS = build_headers(
    {
        "Forwarded": "for=203.0.113.5;proto=https;host=example.com:8443",
        "X-Forwarded-For": "192.0.2.1",
        "X-Forwarded-Host": "other.example.com",
        "X-Forwarded-Proto": "https",
        "X-Forwarded-Port": "444",
    }
)


def test_untrusted() -> None:
    resolver = ClientAttributeResolver(["10.0.0.0/8"])
    origin = resolver.resolve(_URL, _ALL_HEADERS, "192.168.0.1", "peer")
    assert origin == ResolvedOrigin(
        remote_addr="192.168.0.1",
        remote_host="peer",
        scheme="http",
        host="internal.example.org",
        port=None,
    )
    assert origin.apply_to(_URL) == _URL


def test_no_remote_addr() -> None:
    resolver = ClientAttributeResolver(["0.0.0.0/0", "::/0"])
    for remote_addr in (None, ""):
        origin = resolver.resolve(_URL, _ALL_HEADERS, remote_addr, None)
        assert origin.remote_addr == remote_addr
        assert origin.host == "internal.example.org"


def test_empty_proxies() -> None:
    resolver = ClientAttributeResolver()
    assert not resolver.proxies
    for remote_addr in ("127.0.0.1", "10.0.0.1", "::1"):
        assert not resolver.is_trusted(remote_addr)
        origin = resolver.resolve(_URL, _ALL_HEADERS, remote_addr, "host")
        assert origin == ResolvedOrigin.from_url(_URL, remote_addr, "host")


def test_forwarded_preferred() -> None:
    resolver = ClientAttributeResolver(["10.0.0.0/8"])
    origin = resolver.resolve(_URL, _ALL_HEADERS, "10.0.0.1", None)
    assert origin == ResolvedOrigin(
        remote_addr="203.0.113.5",
        remote_host="example.com",
        scheme="https",
        host="example.com",
        port=8443,
    )
    url = origin.apply_to(_URL)
    assert str(url) == "https://example.com:8443/"


def test_empty_forwarded() -> None:
    """An empty ``Forwarded`` header falls back to ``X-Forwarded-*``."""
    resolver = ClientAttributeResolver(["10.0.0.0/8"])
    headers = build_headers(
        {
            "Forwarded": "",
            "X-Forwarded-For": "192.0.2.1",
            "X-Forwarded-Host": "other.example.com",
            "X-Forwarded-Proto": "https",
        }
    )
    origin = resolver.resolve(_URL, headers, "10.0.0.1", None)
    assert origin == ResolvedOrigin(
        remote_addr="192.0.2.1",
        remote_host="other.example.com",
        scheme="https",
        host="other.example.com",
        port=443,
    )
    assert str(origin.apply_to(_URL)) == "https://other.example.com/"


def test_ipv6_proxy() -> None:
    resolver = ClientAttributeResolver(["2001:db8::/32"])
    headers = build_headers({"Forwarded": 'for="[2001:db8::1]:420"'})
    origin = resolver.resolve(_URL, headers, "2001:DB8::FFFF", None)
    assert origin.remote_addr == "2001:db8::1"


def test_idempotent() -> None:
    resolver = ClientAttributeResolver(["10.0.0.0/8"])
    first = resolver.resolve(_URL, _ALL_HEADERS, "10.0.0.1", None)
    second = resolver.resolve(_URL, _ALL_HEADERS, "10.0.0.1", None)
    assert first == second


def test_set_proxies() -> None:
    resolver = ClientAttributeResolver()
    assert not resolver.is_trusted("10.0.0.1")

    resolver.set_proxies(["10.0.0.0/8"])
    assert resolver.is_trusted("10.0.0.1")
    assert resolver.proxies.patterns == ("10.0.0.0/8",)

    resolver.proxies = ProxyRangeSet(["192.0.2.0/24"])
    assert not resolver.is_trusted("10.0.0.1")
    assert resolver.is_trusted("192.0.2.200")

    with pytest.raises(InvalidProxyPatternError):
        resolver.set_proxies(["nonsense"])
    assert resolver.is_trusted("192.0.2.200")
