"""Console logging setup for the HTTP input client."""

import logging

__all__ = ["configure_logs"]

_HANDLER_NAME = "http-input-console"


def configure_logs(level: int = logging.INFO) -> None:
    """Configure console logging.

    Sets up:
    - Root logger at ``level``.
    - Framework loggers (aiohttp, asyncio) at WARNING level.
    - Application loggers (src) at DEBUG level.
    - Format with timestamp, level, module, and line number.

    Calling it again does not add a second handler.

    Args:
        level: Root logger level.
    """
    root = logging.getLogger()
    root.setLevel(level)

    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
                "%d/%m/%y %H:%M:%S",
            )
        )
        root.addHandler(handler)

    # Request-level chatter from the frameworks is rarely useful
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger("src").setLevel(logging.DEBUG)
