"""TLS trust strategies for the secure client."""

import logging
import ssl
from collections.abc import Callable

from src.adapters.driven.config.settings import Settings
from src.core.errors import ClientConstructionError

__all__ = [
    "TrustStrategy",
    "trust_system_roots",
    "trust_self_signed",
    "trust_ca_file",
    "build_ssl_context",
    "resolve_trust_strategy",
]

logger = logging.getLogger(__name__)

# Mutates a fresh client-side SSL context to decide which certificates pass.
TrustStrategy = Callable[[ssl.SSLContext], None]


def trust_system_roots(context: ssl.SSLContext) -> None:
    """Trust the platform's default certificate authorities."""
    context.load_default_certs(ssl.Purpose.SERVER_AUTH)


def trust_self_signed(context: ssl.SSLContext) -> None:
    """Accept self-signed certificates.

    The ssl module cannot restrict acceptance to single-certificate chains,
    so chain and hostname verification are disabled altogether.
    """
    logger.warning("TLS certificate verification disabled (self_signed trust strategy)")
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE


def trust_ca_file(path: str) -> TrustStrategy:
    """Trust only the certificates found in a PEM bundle.

    Args:
        path: PEM file, typically holding the server's self-signed certificate.

    Returns:
        Trust strategy loading ``path``.
    """

    def apply(context: ssl.SSLContext) -> None:
        context.load_verify_locations(cafile=path)

    return apply


def build_ssl_context(strategy: TrustStrategy) -> ssl.SSLContext:
    """Create a client SSL context configured by ``strategy``.

    Args:
        strategy: Trust strategy to apply.

    Returns:
        Ready-to-use SSL context.

    Raises:
        ClientConstructionError: If the trust material cannot be loaded.
    """
    try:
        context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        strategy(context)
    except (ssl.SSLError, OSError, ValueError) as e:
        logger.error(f"Failed to build TLS trust material: {e}")
        raise ClientConstructionError(f"Unable to build TLS trust material: {e}") from e
    return context


def resolve_trust_strategy(settings: Settings) -> TrustStrategy:
    """Map configured trust strategy name to its implementation."""
    if settings.trust_strategy == "self_signed":
        return trust_self_signed
    if settings.trust_strategy == "ca_file":
        if not settings.ca_file:
            raise ClientConstructionError("ca_file trust strategy requires a CA file")
        return trust_ca_file(settings.ca_file)
    return trust_system_roots
