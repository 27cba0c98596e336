"""Console logging setup for the load engine."""

import logging

__all__ = ["configure_logs", "HANDLER_NAME"]

HANDLER_NAME = "surge-console"


def configure_logs(level: int = logging.INFO) -> None:
    """Configure console logging.

    Sets up:
    - Root logger at ``level`` (INFO by default).
    - Framework loggers (aiohttp, asyncio) at WARNING level.
    - Application loggers (surge) at DEBUG level.
    - Structured format with timestamp, level, module, and line number.

    Calling it again replaces the console handler instead of stacking a
    second one, so every record is printed once.

    Args:
        level: Root logger level.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
    date_format = "%d/%m/%y %H:%M:%S"

    formatter = logging.Formatter(log_format, date_format)
    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.setLevel(level)
    root.addHandler(handler)

    # Suppress verbose framework loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger("surge").setLevel(logging.DEBUG)
