"""Static credentials provider."""

from __future__ import annotations

from aiohttp import BasicAuth

from src.ports.credentials import CredentialsProvider

__all__ = ["StaticCredentialsProvider"]


class StaticCredentialsProvider(CredentialsProvider):
    """Hand out one username/password pair for any host."""

    def __init__(self, auth: BasicAuth | None) -> None:
        self._auth = auth

    def credentials_for(self, host: str | None) -> BasicAuth | None:
        return self._auth

    def __repr__(self) -> str:
        login = self._auth.login if self._auth else None
        return f"StaticCredentialsProvider(login={login!r})"
