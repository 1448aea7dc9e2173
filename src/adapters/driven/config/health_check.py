"""Configuration self-check for container orchestration."""

import logging

from src.adapters.driven.config.settings import load_settings
from src.adapters.driven.http.tls import build_ssl_context, resolve_trust_strategy
from src.adapters.driven.logging.logging_config import configure_logs

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Run health check for container orchestration.

    Validates:
    - Required environment variables are set.
    - Configuration can be loaded successfully.
    - TLS trust material for the secure client can be built.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        settings = load_settings()
        build_ssl_context(resolve_trust_strategy(settings))
    except Exception as exc:
        logger.error(f"HTTP input healthcheck FAILED: {exc}")
        return 1

    logger.info("HTTP input healthcheck OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
