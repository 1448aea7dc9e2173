"""Configuration loading from environment variables."""

import logging
import os
from typing import Literal

from aiohttp import BasicAuth
from dotenv import load_dotenv
from pydantic import (
    BaseModel,
    Field,
    HttpUrl,
    SecretStr,
    TypeAdapter,
    field_validator,
    model_validator,
)

__all__ = ["Settings", "load_settings", "TrustStrategyName"]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)

TrustStrategyName = Literal["system", "self_signed", "ca_file"]

# Response bodies above this size are rejected (100 MiB).
DEFAULT_MAX_CONTENT_LENGTH = 100 * 1024 * 1024


class Settings(BaseModel):
    """Runtime configuration for the HTTP input clients.

    Attributes:
        secure_base_url: Base URL targeted by the TLS-aware client.
        username: Optional basic-auth user for outbound requests.
        password: Password matching ``username``.
        trust_strategy: Which TLS certificates the secure client accepts.
        ca_file: PEM bundle to trust when ``trust_strategy`` is ``ca_file``.
        connect_timeout_sec: Default socket connect timeout.
        pool_timeout_sec: Default timeout for acquiring a pooled connection.
        socket_timeout_sec: Default socket read timeout.
        max_content_length: Largest accepted response body in bytes.
        trust_env: Honour proxy settings from the environment.
    """

    secure_base_url: str = Field(..., description="Base URL of the TLS-aware client.")
    username: str | None = Field(default=None, description="Basic-auth username.")
    password: SecretStr | None = Field(default=None, description="Basic-auth password.")
    trust_strategy: TrustStrategyName = Field(
        default="system",
        description=(
            "TLS trust strategy: 'system' roots, 'self_signed' (accepts any "
            "certificate, local/test use only) or 'ca_file'."
        ),
    )
    ca_file: str | None = Field(default=None, description="PEM file with trusted certificates.")
    connect_timeout_sec: float = Field(default=5, gt=0)
    pool_timeout_sec: float = Field(default=10, gt=0)
    socket_timeout_sec: float = Field(default=10, gt=0)
    max_content_length: int = Field(default=DEFAULT_MAX_CONTENT_LENGTH, gt=0)
    trust_env: bool = Field(default=True, description="Use proxy settings from the environment.")

    @field_validator("secure_base_url")
    @classmethod
    def validate_secure_base_url(cls, v: str) -> str:
        """Validate that the base URL is a valid HTTP(S) URL.

        Args:
            v: Base URL to validate.

        Returns:
            The validated URL.

        Raises:
            ValueError: If URL is invalid or not http(s).
        """
        try:
            url = _http_url_adapter.validate_python(v)
            if url.scheme not in ("http", "https"):
                raise ValueError("Only http:// and https:// base URLs allowed")
        except Exception as e:
            raise ValueError(f"Invalid secure base URL: {e}") from e
        return v

    @model_validator(mode="after")
    def check_consistency(self) -> "Settings":
        """Reject half-configured credentials and trust material."""
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be configured together")
        if self.trust_strategy == "ca_file" and not self.ca_file:
            raise ValueError("ca_file is required for the 'ca_file' trust strategy")
        return self

    def basic_auth(self) -> BasicAuth | None:
        """Return the configured credentials, if any."""
        if self.username is None or self.password is None:
            return None
        return BasicAuth(self.username, self.password.get_secret_value())


def _env_flag(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise RuntimeError(f"HTTP_INPUT_TRUST_ENV must be a boolean (got: {raw})")


def load_settings() -> Settings:
    """Load and validate settings from the environment.

    Required environment variables:
    - HTTP_INPUT_SECURE_BASE_URL: Base URL of the TLS-aware client.

    Optional:
    - HTTP_INPUT_USERNAME / HTTP_INPUT_PASSWORD: Basic-auth credentials.
    - HTTP_INPUT_TRUST_STRATEGY: system, self_signed or ca_file.
    - HTTP_INPUT_CA_FILE: PEM bundle for the ca_file strategy.
    - HTTP_INPUT_TRUST_ENV: Whether to honour proxy variables (default true).

    Returns:
        Validated Settings object.

    Raises:
        RuntimeError: If required env vars are missing or unparsable.
        ValueError: If configuration is invalid.
    """
    try:
        base_url = os.environ["HTTP_INPUT_SECURE_BASE_URL"]
    except KeyError as e:
        raise RuntimeError(f"Missing required environment variable: {e.args[0]}") from e

    settings = Settings(
        secure_base_url=base_url,
        username=os.getenv("HTTP_INPUT_USERNAME"),
        password=os.getenv("HTTP_INPUT_PASSWORD"),
        trust_strategy=os.getenv("HTTP_INPUT_TRUST_STRATEGY", "system"),
        ca_file=os.getenv("HTTP_INPUT_CA_FILE"),
        trust_env=_env_flag(os.getenv("HTTP_INPUT_TRUST_ENV", "true")),
    )

    logger.info(
        f"HTTP input configured: secure_base_url={settings.secure_base_url}, "
        f"trust={settings.trust_strategy}, "
        f"auth={'<set>' if settings.username else '<none>'}"
    )

    return settings
