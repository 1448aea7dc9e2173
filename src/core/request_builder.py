"""GET request construction for HTTP inputs."""

from yarl import URL

from src.core.errors import MalformedURLError
from src.core.url_builder import build_url, normalize_path
from src.ports.credentials import CredentialsProvider
from src.ports.http_input import HttpInputSpec, RequestDescriptor

__all__ = ["build_request", "build_rest_request"]

MS_PER_SECOND = 1000


def build_request(
    spec: HttpInputSpec,
    credentials: CredentialsProvider | None = None,
) -> RequestDescriptor:
    """Build the GET request for an HTTP input.

    Timeouts are converted from seconds to milliseconds and override the
    session defaults for this request only.

    Args:
        spec: HTTP input description.
        credentials: Optional provider for the Authorization header.

    Returns:
        Request descriptor targeting the absolute URL of the input.

    Raises:
        MalformedURLError: If the target URL cannot be built, or carries
            user info while the provider also supplies credentials.
    """
    url = build_url(spec)
    headers: dict[str, str] = {}
    if credentials is not None:
        auth = credentials.credentials_for(url.host)
        if auth is not None:
            if url.user is not None or url.password is not None:
                raise MalformedURLError(
                    f"URL {url.with_user(None)} carries user info and credentials are configured"
                )
            headers["Authorization"] = auth.encode()

    return RequestDescriptor(
        url=url,
        connect_timeout_ms=spec.connection_timeout * MS_PER_SECOND,
        socket_timeout_ms=spec.socket_timeout * MS_PER_SECOND,
        headers=headers,
    )


def build_rest_request(spec: HttpInputSpec) -> RequestDescriptor:
    """Build a host-relative GET request for the secure client.

    Only path and query of the input are kept; scheme, host and port come
    from the secure client's base URL and credentials from its session.
    Without a literal URL no host is needed.

    Raises:
        MalformedURLError: If the literal URL or the path is invalid.
    """
    if spec.url:
        url = build_url(spec).relative()
    else:
        try:
            url = URL.build(path=normalize_path(spec.path), query=list(spec.params.items()))
        except (TypeError, ValueError) as e:
            raise MalformedURLError(f"Cannot build URL for path {spec.path!r}: {e}") from e
    return RequestDescriptor(
        url=url,
        connect_timeout_ms=spec.connection_timeout * MS_PER_SECOND,
        socket_timeout_ms=spec.socket_timeout * MS_PER_SECOND,
    )
