"""Tests for GET request construction."""

import pytest
from aiohttp import BasicAuth, ClientTimeout
from yarl import URL

from src.adapters.driven.http.credentials import StaticCredentialsProvider
from src.core.errors import MalformedURLError
from src.core.request_builder import build_request, build_rest_request
from src.ports.http_input import HttpInputSpec

__all__ = []


def test_timeouts_are_converted_to_milliseconds() -> None:
    """Seconds in the spec should become milliseconds in the descriptor."""
    spec = HttpInputSpec(url="http://localhost:9200/", connection_timeout=5, socket_timeout=10)

    descriptor = build_request(spec)

    assert descriptor.connect_timeout_ms == 5000
    assert descriptor.socket_timeout_ms == 10000
    assert descriptor.method == "GET"
    assert descriptor.url == URL("http://localhost:9200/")


def test_no_authorization_without_credentials() -> None:
    """Without a provider no Authorization header should be sent."""
    descriptor = build_request(HttpInputSpec(url="http://localhost/"))

    assert "Authorization" not in descriptor.headers


def test_authorization_header_from_provider() -> None:
    """Configured credentials should become a basic Authorization header."""
    provider = StaticCredentialsProvider(BasicAuth("monitor", "s3cret"))

    descriptor = build_request(HttpInputSpec(url="http://localhost/"), provider)

    assert descriptor.headers["Authorization"] == BasicAuth("monitor", "s3cret").encode()


def test_provider_returning_none_adds_no_header() -> None:
    """A provider without credentials should leave headers empty."""
    descriptor = build_request(
        HttpInputSpec(url="http://localhost/"), StaticCredentialsProvider(None)
    )

    assert dict(descriptor.headers) == {}


def test_client_timeout_overrides_only_connect_and_socket() -> None:
    """Per-request timeouts should keep the session's pool and total limits."""
    descriptor = build_request(
        HttpInputSpec(url="http://localhost/", connection_timeout=2, socket_timeout=3)
    )
    base = ClientTimeout(total=60, connect=10, sock_connect=5, sock_read=10)

    timeout = descriptor.client_timeout(base)

    assert timeout.total == 60
    assert timeout.connect == 10
    assert timeout.sock_connect == 2
    assert timeout.sock_read == 3


def test_rest_request_is_host_relative() -> None:
    """Secure-client requests should only carry path and query."""
    spec = HttpInputSpec(
        scheme="https",
        host="cluster.local",
        port=9200,
        path="/_cluster/health",
        params={"level": "indices"},
    )

    descriptor = build_rest_request(spec)

    assert not descriptor.url.absolute
    assert descriptor.url.path == "/_cluster/health"
    assert descriptor.url.query["level"] == "indices"
    assert "Authorization" not in descriptor.headers


def test_rest_request_needs_no_host() -> None:
    """A path-only input should build a relative request without a host."""
    spec = HttpInputSpec(path="_cluster/health", params={"level": "indices", "local": "true"})

    descriptor = build_rest_request(spec)

    assert not descriptor.url.absolute
    assert descriptor.url.host is None
    assert descriptor.url.path == "/_cluster/health"
    assert list(descriptor.url.query.items()) == [("level", "indices"), ("local", "true")]


def test_rest_request_from_literal_url_drops_authority() -> None:
    """A literal URL should only contribute its path and query."""
    descriptor = build_rest_request(HttpInputSpec(url="https://cluster.local:9200/_cat?v=true"))

    assert descriptor.url == URL("/_cat?v=true")


def test_user_info_without_credentials_is_kept() -> None:
    """User info in the URL should be left alone when no credentials are configured."""
    descriptor = build_request(HttpInputSpec(url="http://monitor:pw@localhost/"))

    assert descriptor.url.user == "monitor"
    assert "Authorization" not in descriptor.headers


def test_user_info_conflicting_with_credentials_is_rejected() -> None:
    """User info in the URL plus configured credentials should fail before sending."""
    provider = StaticCredentialsProvider(BasicAuth("monitor", "s3cret"))

    with pytest.raises(MalformedURLError, match="user info"):
        build_request(HttpInputSpec(url="http://other:pw@localhost/"), provider)
