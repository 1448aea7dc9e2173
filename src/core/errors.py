"""Error types raised by the HTTP input fetch subsystem."""

import asyncio

__all__ = [
    "HttpInputError",
    "ClientConstructionError",
    "MalformedURLError",
    "RequestFailure",
    "ParseError",
    "RequestCancelledError",
]


class HttpInputError(Exception):
    """Base class for every non-cancellation error of this package."""


class ClientConstructionError(HttpInputError, OSError):
    """TLS trust material or network client could not be built."""


class MalformedURLError(HttpInputError, ValueError):
    """Literal URL or URL components do not form a usable http(s) URL."""


class RequestFailure(HttpInputError):
    """Network, protocol or timeout failure while executing a request."""


class ParseError(HttpInputError, ValueError):
    """Response body is not a UTF-8 JSON object."""


class RequestCancelledError(asyncio.CancelledError):
    """In-flight request was cancelled by the caller or by the engine.

    Not an HttpInputError: it subclasses asyncio.CancelledError, so the
    awaiting task still ends up cancelled.
    """
