"""Target URL construction for HTTP inputs."""

import logging

from yarl import URL

from src.core.errors import MalformedURLError
from src.ports.http_input import HttpInputSpec

__all__ = ["build_url", "normalize_path", "SUPPORTED_SCHEMES"]

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("http", "https")
MAX_PORT = 65535


def build_url(spec: HttpInputSpec) -> URL:
    """Build the target URL of an HTTP input.

    A non-empty ``spec.url`` is parsed as is and the component fields are
    ignored. Otherwise the URL is assembled from scheme, host, port and path,
    with ``spec.params`` appended as query parameters in insertion order.

    Args:
        spec: HTTP input description.

    Returns:
        Absolute http(s) URL.

    Raises:
        MalformedURLError: If the literal URL or the components are invalid.
    """
    if spec.url:
        return _parse_literal(spec.url)
    return _build_from_components(spec)


def _parse_literal(raw: str) -> URL:
    try:
        url = URL(raw)
        # Port is parsed lazily by some yarl versions.
        _ = url.port
    except (TypeError, ValueError) as e:
        raise MalformedURLError(f"Invalid URL {raw!r}: {e}") from e

    if not url.absolute or not url.host:
        raise MalformedURLError(f"URL must be absolute: {raw!r}")
    if url.scheme not in SUPPORTED_SCHEMES:
        raise MalformedURLError(f"Unsupported URL scheme {url.scheme!r} in {raw!r}")
    # URL.port falls back to the scheme default for an explicit port 0.
    if url.explicit_port is not None and not 0 < url.explicit_port <= MAX_PORT:
        raise MalformedURLError(f"Port out of range in {raw!r}: {url.explicit_port}")
    return url


def _build_from_components(spec: HttpInputSpec) -> URL:
    if spec.scheme not in SUPPORTED_SCHEMES:
        raise MalformedURLError(f"Unsupported URL scheme {spec.scheme!r}")
    if not spec.host:
        raise MalformedURLError("Host is required when no literal URL is given")
    if spec.port is not None and not 0 < spec.port <= MAX_PORT:
        raise MalformedURLError(f"Port out of range: {spec.port}")

    try:
        url = URL.build(
            scheme=spec.scheme,
            host=spec.host,
            port=spec.port,
            path=normalize_path(spec.path),
            query=list(spec.params.items()),
        )
    except (TypeError, ValueError) as e:
        raise MalformedURLError(f"Cannot build URL for host {spec.host!r}: {e}") from e

    logger.debug(f"Built URL {url} from components")
    return url


def normalize_path(path: str) -> str:
    """Return ``path`` with a leading slash, or empty for an empty path."""
    if path and not path.startswith("/"):
        return "/" + path
    return path
