"""Credentials provider port (interface)."""

from __future__ import annotations

from typing import Protocol

from aiohttp import BasicAuth

__all__ = ["CredentialsProvider"]


class CredentialsProvider(Protocol):
    """Source of credentials attached to outbound requests."""

    def credentials_for(self, host: str | None, /) -> BasicAuth | None:
        """Return credentials for ``host``, or None to send none.

        Args:
            host: Target host of the request (None if unknown).

        Returns:
            Basic auth credentials or None.
        """
        ...
