"""Tests for TLS trust strategies and session construction."""

import asyncio
import ssl
from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import aiohttp
import pytest
from aiohttp import BasicAuth
from yarl import URL

from src.adapters.driven.config.settings import Settings
from src.adapters.driven.http.client_factory import (
    NetworkClients,
    create_network_clients,
    create_secure_client,
    default_timeout,
)
from src.adapters.driven.http.credentials import StaticCredentialsProvider
from src.adapters.driven.http.tls import (
    build_ssl_context,
    resolve_trust_strategy,
    trust_ca_file,
    trust_self_signed,
    trust_system_roots,
)
from src.core.errors import ClientConstructionError

__all__ = []


@pytest.fixture
def broken_ca_file(tmp_path: Path) -> str:
    """PEM file that holds no certificate."""
    path = tmp_path / "broken.pem"
    path.write_text("-----BEGIN CERTIFICATE-----\nnot base64\n-----END CERTIFICATE-----\n")
    return str(path)


def test_self_signed_strategy_disables_verification() -> None:
    """Self-signed trust should accept certificates without chain checks."""
    context = build_ssl_context(trust_self_signed)

    assert context.verify_mode == ssl.CERT_NONE
    assert context.check_hostname is False


def test_system_strategy_keeps_verification() -> None:
    """System trust should keep default certificate verification."""
    context = build_ssl_context(trust_system_roots)

    assert context.verify_mode == ssl.CERT_REQUIRED
    assert context.check_hostname is True


def test_broken_trust_material_raises_construction_error(broken_ca_file: str) -> None:
    """Unloadable trust material should be wrapped in ClientConstructionError."""
    with pytest.raises(ClientConstructionError) as exc_info:
        build_ssl_context(trust_ca_file(broken_ca_file))

    assert isinstance(exc_info.value, OSError)
    assert exc_info.value.__cause__ is not None


def test_missing_trust_material_raises_construction_error(tmp_path: Path) -> None:
    """A missing CA file should be wrapped in ClientConstructionError."""
    with pytest.raises(ClientConstructionError):
        build_ssl_context(trust_ca_file(str(tmp_path / "missing.pem")))


@pytest.mark.parametrize(
    ("name", "expected"),
    [("system", trust_system_roots), ("self_signed", trust_self_signed)],
)
def test_resolve_trust_strategy(name: str, expected: object) -> None:
    """Configured names should map to their strategies."""
    settings = Settings(secure_base_url="https://localhost:9200", trust_strategy=name)

    assert resolve_trust_strategy(settings) is expected


def test_default_timeout_policy() -> None:
    """Session defaults should be 5s connect, 10s pool and 10s socket."""
    timeout = default_timeout(Settings(secure_base_url="https://localhost:9200"))

    assert timeout.sock_connect == 5
    assert timeout.connect == 10
    assert timeout.sock_read == 10
    assert timeout.total is None


@pytest.mark.asyncio
async def test_secure_client_uses_configured_base_url_and_credentials() -> None:
    """Secure client should target the configured base URL with credentials."""
    settings = Settings(
        secure_base_url="https://search.internal:9200",
        trust_strategy="self_signed",
        trust_env=False,
    )
    provider = StaticCredentialsProvider(BasicAuth("monitor", "pw"))

    secure = create_secure_client(settings, provider)
    try:
        assert secure.base_url == URL("https://search.internal:9200")
        assert secure.session.auth == BasicAuth("monitor", "pw")
        assert secure.resolve(URL("/_cluster/health?level=indices")) == URL(
            "https://search.internal:9200/_cluster/health?level=indices"
        )
    finally:
        await secure.session.close()


@pytest.mark.asyncio
async def test_create_network_clients_builds_both_sessions() -> None:
    """Both sessions should be created and closable together."""
    settings = Settings(secure_base_url="https://localhost:9200", trust_env=False)

    clients = await create_network_clients(settings, StaticCredentialsProvider(None))

    assert isinstance(clients.engine, aiohttp.ClientSession)
    assert isinstance(clients.secure.session, aiohttp.ClientSession)
    await clients.close()
    assert clients.engine.closed
    assert clients.secure.session.closed


@pytest.mark.asyncio
async def test_create_network_clients_never_returns_half_built(broken_ca_file: str) -> None:
    """A failing secure client should close the engine and propagate."""
    settings = Settings(
        secure_base_url="https://localhost:9200",
        trust_strategy="ca_file",
        ca_file=broken_ca_file,
    )
    engine = Mock()
    engine.close = AsyncMock()

    with (
        patch("src.adapters.driven.http.client_factory.create_engine", return_value=engine),
        pytest.raises(ClientConstructionError),
    ):
        await create_network_clients(settings, StaticCredentialsProvider(None))

    engine.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_close_cancels_tracked_tasks_before_sessions() -> None:
    """close() should cancel tracked tasks and wait for them first."""
    engine = Mock()
    engine.close = AsyncMock()
    secure_session = Mock()
    secure_session.close = AsyncMock()
    clients = NetworkClients(engine=engine, secure=Mock(session=secure_session))
    task = asyncio.create_task(asyncio.Event().wait())
    clients.track(task)
    await asyncio.sleep(0)

    await clients.close()

    assert task.cancelled()
    assert not clients.inflight
    engine.close.assert_awaited_once()
    secure_session.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_task_tracked_after_close_is_cancelled() -> None:
    """Requests started after close() should be cancelled at once."""
    engine = Mock()
    engine.close = AsyncMock()
    secure_session = Mock()
    secure_session.close = AsyncMock()
    clients = NetworkClients(engine=engine, secure=Mock(session=secure_session))
    await clients.close()

    task = asyncio.create_task(asyncio.Event().wait())
    clients.track(task)

    with pytest.raises(asyncio.CancelledError):
        await task
    assert not clients.inflight
