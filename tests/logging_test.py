"""Tests for resolver log messages."""

from __future__ import annotations

import json

from _pytest.logging import LogCaptureFixture
from safir.logging import configure_logging

from clientorigin import ClientAttributeResolver, Url, build_headers


def test_resolver_logging(caplog: LogCaptureFixture) -> None:
    configure_logging(
        name="clientorigin", profile="production", log_level="debug"
    )
    resolver = ClientAttributeResolver(["10.0.0.0/8"])
    url = Url(scheme="http", host="internal", path="/")
    headers = build_headers({"Forwarded": "for=192.0.2.1;host=example.com"})

    # Untrusted requests are not logged.
    resolver.resolve(url, headers, "192.168.0.1", None)
    assert caplog.record_tuples == []

    resolver.resolve(url, headers, "10.0.0.1", None)
    assert len(caplog.record_tuples) == 1
    assert json.loads(caplog.record_tuples[0][2]) == {
        "event": "Resolved client behind trusted proxy",
        "host": "example.com",
        "logger": "clientorigin",
        "port": None,
        "proxy": "10.0.0.1",
        "remote_addr": "192.0.2.1",
        "remote_host": "example.com",
        "scheme": "http",
        "severity": "debug",
        "source": "Forwarded",
    }
