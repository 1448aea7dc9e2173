"""Construction of the shared aiohttp sessions."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from aiohttp import ClientTimeout
from yarl import URL

from src.adapters.driven.config.settings import Settings
from src.adapters.driven.http.tls import build_ssl_context, resolve_trust_strategy
from src.ports.credentials import CredentialsProvider

__all__ = [
    "NetworkClients",
    "SecureClient",
    "create_engine",
    "create_secure_client",
    "create_network_clients",
    "default_timeout",
]

logger = logging.getLogger(__name__)


def default_timeout(settings: Settings) -> ClientTimeout:
    """Session-wide timeout policy.

    ``connect`` bounds pool acquisition plus connecting, ``sock_connect`` the
    TCP/TLS connect itself and ``sock_read`` each socket read.
    """
    return ClientTimeout(
        total=None,
        connect=settings.pool_timeout_sec,
        sock_connect=settings.connect_timeout_sec,
        sock_read=settings.socket_timeout_sec,
    )


@dataclass(slots=True, frozen=True)
class SecureClient:
    """TLS-aware session bound to an explicit base URL."""

    session: aiohttp.ClientSession
    base_url: URL

    def resolve(self, url: URL) -> URL:
        """Resolve a host-relative request URL against the base URL."""
        return self.base_url.join(url)


@dataclass(slots=True)
class NetworkClients:
    """Pair of long-lived sessions shared by all requests.

    Also tracks the request tasks running on them, so that shutdown can
    cancel those before the sessions go away.
    """

    engine: aiohttp.ClientSession
    secure: SecureClient
    inflight: set[asyncio.Task[Any]] = field(default_factory=set)
    closed: bool = False

    def track(self, task: asyncio.Task[Any]) -> None:
        """Register an in-flight request task; cancelled at once after close()."""
        if self.closed:
            task.cancel()
            return
        self.inflight.add(task)
        task.add_done_callback(self.inflight.discard)

    async def close(self) -> None:
        """Cancel in-flight requests, then close pooled connections."""
        self.closed = True
        pending = set(self.inflight)
        for task in pending:
            task.cancel()
        if pending:
            logger.info(f"Cancelling {len(pending)} in-flight request(s)")
            await asyncio.wait(pending)

        try:
            await self.engine.close()
        finally:
            await self.secure.session.close()


def create_engine(settings: Settings) -> aiohttp.ClientSession:
    """Create the general-purpose pooled session.

    Must be called from within the running event loop.
    """
    connector = aiohttp.TCPConnector()
    return aiohttp.ClientSession(
        connector=connector,
        timeout=default_timeout(settings),
        trust_env=settings.trust_env,
    )


def create_secure_client(
    settings: Settings,
    credentials: CredentialsProvider,
) -> SecureClient:
    """Create the TLS-aware session with default credentials.

    Args:
        settings: Client configuration (base URL, trust strategy).
        credentials: Provider queried once for the session credentials.

    Returns:
        Secure client targeting ``settings.secure_base_url``.

    Raises:
        ClientConstructionError: If the TLS trust material cannot be built.
    """
    ssl_context = build_ssl_context(resolve_trust_strategy(settings))
    base_url = URL(settings.secure_base_url)

    connector = aiohttp.TCPConnector(ssl=ssl_context)
    session = aiohttp.ClientSession(
        connector=connector,
        timeout=default_timeout(settings),
        auth=credentials.credentials_for(base_url.host),
        trust_env=settings.trust_env,
    )
    return SecureClient(session=session, base_url=base_url)


async def create_network_clients(
    settings: Settings,
    credentials: CredentialsProvider,
) -> NetworkClients:
    """Create the engine and secure sessions together.

    Either both sessions are returned, or the error propagates and nothing
    is left open.

    Raises:
        ClientConstructionError: If the secure client cannot be built.
    """
    engine = create_engine(settings)
    try:
        secure = create_secure_client(settings, credentials)
    except BaseException:
        await engine.close()
        raise

    logger.info(
        f"Network clients ready: secure_base_url={secure.base_url}, "
        f"trust={settings.trust_strategy}"
    )
    return NetworkClients(engine=engine, secure=secure)
