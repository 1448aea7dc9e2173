"""HTTP input client adapter owning the shared sessions."""

import asyncio
import dataclasses
import logging
from types import TracebackType
from typing import Any

import aiohttp

from src.adapters.driven.config.settings import Settings
from src.adapters.driven.http.bridge import execute
from src.adapters.driven.http.client_factory import NetworkClients, create_network_clients
from src.adapters.driven.http.credentials import StaticCredentialsProvider
from src.core.request_builder import build_request, build_rest_request
from src.core.response_decoder import decode_response
from src.ports.credentials import CredentialsProvider
from src.ports.http_input import HttpInputSpec, RequestDescriptor, ResponseBody

__all__ = ["HttpInputClient"]

logger = logging.getLogger(__name__)

FIRST_FAILING_HTTP_CODE = 400


class HttpInputClient:
    """Fetch HTTP inputs through process-wide pooled sessions.

    Features:
    - One engine session and one TLS-aware session, created once.
    - Cancellation-aware execution of each GET.
    - JSON decoding of response bodies.
    - Context manager for explicit shutdown of pooled connections.

    Create a single instance at startup and share it between callers.
    """

    def __init__(
        self,
        settings: Settings,
        credentials: CredentialsProvider | None = None,
    ) -> None:
        """Initialize HTTP input client.

        Args:
            settings: Client configuration.
            credentials: Credentials provider; defaults to the configured
                username/password for any host.
        """
        self.settings = settings
        self.credentials = credentials or StaticCredentialsProvider(settings.basic_auth())
        self._clients: NetworkClients | None = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "HttpInputClient":
        """Enter async context manager (create sessions).

        Returns:
            Self for use in async with statement.
        """
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close sessions)."""
        await self.close()

    async def start(self) -> None:
        """Create the network clients unless they already exist.

        Raises:
            ClientConstructionError: If the TLS-aware client cannot be built.
        """
        async with self._lock:
            if self._clients is None:
                self._clients = await create_network_clients(self.settings, self.credentials)

    async def close(self) -> None:
        """Cancel in-flight requests and close pooled connections.

        Callers still awaiting a request get RequestCancelledError. Safe to
        call more than once.
        """
        async with self._lock:
            clients, self._clients = self._clients, None
        if clients is not None:
            await clients.close()
            logger.info("Network clients closed")

    @property
    def clients(self) -> NetworkClients:
        """Network clients; only available between start() and close()."""
        if self._clients is None:
            raise RuntimeError("Clients not initialized; use 'async with' context manager")
        return self._clients

    async def get_response(self, spec: HttpInputSpec) -> ResponseBody:
        """Perform the GET described by ``spec`` on the engine session.

        Raises:
            MalformedURLError: If the target URL is invalid (nothing is sent).
            RequestFailure: If the request fails.
            RequestCancelledError: If the request is cancelled.
        """
        clients = self.clients
        descriptor = build_request(spec, self.credentials)
        return await self._execute(clients, clients.engine, descriptor)

    async def fetch(self, spec: HttpInputSpec) -> dict[str, Any]:
        """Perform the GET described by ``spec`` and decode its JSON body.

        Raises:
            ParseError: If the body is not a JSON object.
        """
        resp = await self.get_response(spec)
        return decode_response(resp.body)

    async def get_secure_response(self, spec: HttpInputSpec) -> ResponseBody:
        """Perform the GET against the secure client's base URL.

        Only the path and query of ``spec`` are used.
        """
        clients = self.clients
        descriptor = build_rest_request(spec)
        descriptor = dataclasses.replace(descriptor, url=clients.secure.resolve(descriptor.url))
        return await self._execute(clients, clients.secure.session, descriptor)

    async def fetch_secure(self, spec: HttpInputSpec) -> dict[str, Any]:
        """Secure-client counterpart of fetch()."""
        resp = await self.get_secure_response(spec)
        return decode_response(resp.body)

    async def _execute(
        self,
        clients: NetworkClients,
        session: aiohttp.ClientSession,
        descriptor: RequestDescriptor,
    ) -> ResponseBody:
        resp = await execute(
            session,
            descriptor,
            max_content_length=self.settings.max_content_length,
            track=clients.track,
        )
        if resp.status >= FIRST_FAILING_HTTP_CODE:
            logger.warning(f"GET {resp.url} returned status {resp.status}")
        else:
            logger.debug(f"GET {resp.url} returned status {resp.status}")
        return resp
