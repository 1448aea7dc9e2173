"""HTTP input port definitions (DTOs)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from aiohttp import ClientTimeout
from yarl import URL

__all__ = ["HttpInputSpec", "RequestDescriptor", "ResponseBody"]


@dataclass(slots=True, frozen=True)
class HttpInputSpec:
    """Declarative description of an HTTP GET target.

    Either ``url`` is set, or the target is assembled from the component
    fields. A non-empty ``url`` always takes precedence.

    Attributes:
        url: Literal target URL; empty to use the components.
        scheme: URL scheme (http or https).
        host: Target host name or address.
        port: Target port; None for the scheme default.
        path: URL path.
        params: Query parameters, applied in insertion order.
        connection_timeout: Connect timeout in whole seconds.
        socket_timeout: Socket read timeout in whole seconds.
    """

    url: str = ""
    scheme: str = "http"
    host: str = ""
    port: int | None = None
    path: str = ""
    params: Mapping[str, str] = field(default_factory=dict)
    connection_timeout: int = 5
    socket_timeout: int = 10

    def __post_init__(self) -> None:
        # Read-only copy; later changes to the caller's dict are not seen.
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __hash__(self) -> int:
        return hash(
            (
                self.url,
                self.scheme,
                self.host,
                self.port,
                self.path,
                frozenset(self.params.items()),
                self.connection_timeout,
                self.socket_timeout,
            )
        )


@dataclass(slots=True, frozen=True)
class RequestDescriptor:
    """One GET request, ready to hand to the execution bridge.

    Attributes:
        url: Resolved target URL (host-relative for the secure client).
        connect_timeout_ms: Per-request connect timeout in milliseconds.
        socket_timeout_ms: Per-request socket read timeout in milliseconds.
        headers: Extra request headers.
        method: Always GET.
    """

    url: URL
    connect_timeout_ms: int
    socket_timeout_ms: int
    headers: Mapping[str, str] = field(default_factory=dict)
    method: str = "GET"

    def client_timeout(self, base: ClientTimeout) -> ClientTimeout:
        """Overlay this request's connect/socket timeouts on a session default.

        Pool acquisition and total limits stay as configured on the session.
        """
        return ClientTimeout(
            total=base.total,
            connect=base.connect,
            sock_connect=self.connect_timeout_ms / 1000,
            sock_read=self.socket_timeout_ms / 1000,
        )


@dataclass(slots=True, frozen=True)
class ResponseBody:
    """Raw outcome of a completed GET."""

    url: URL
    status: int
    headers: Mapping[str, Any]
    body: bytes
