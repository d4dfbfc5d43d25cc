"""
Logging for farmcart.

farmcart is embedded in a storefront process, so it configures only its
own ``farmcart`` logger and leaves the root logger to the host app.

Usage:
    from farmcart.logging import get_logger
    logger = get_logger(__name__)

    logger.info("Cart loaded for %s", sanitize_id_for_logging(user_id))
"""

import logging
import os
import sys
from functools import cache

PACKAGE_LOGGER = "farmcart"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _get_log_level() -> int:
    """FARMCART_LOG_LEVEL, then LOG_LEVEL, then INFO."""
    level_name = os.environ.get("FARMCART_LOG_LEVEL") or os.environ.get("LOG_LEVEL", "INFO")
    return getattr(logging, level_name.upper(), logging.INFO)


def _configure_package_logger() -> None:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(_get_log_level())

    # Host app already logs somewhere; propagate to it instead of printing twice
    if package_logger.handlers or logging.getLogger().handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.propagate = False


_configure_package_logger()


@cache
def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the ``farmcart`` namespace.

    Args:
        name: Module name (typically __name__); names outside the
            package are nested under it

    Returns:
        Logger that inherits the package level and handler
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def _escape_control_chars(value: str) -> str:
    """Escape characters that could forge extra log lines (CWE-117)."""
    return (
        value.replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )


def sanitize_id_for_logging(id_value: str | None) -> str:
    """
    Shorten a principal, line or product id to its first 8 characters.

    Returns "N/A" for missing ids.
    """
    if not id_value:
        return "N/A"
    return _escape_control_chars(str(id_value))[:8]


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """Sanitize free text (search queries, product names) for logging."""
    if not value:
        return "N/A"
    safe_value = _escape_control_chars(str(value))
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "LOG_FORMAT",
    "PACKAGE_LOGGER",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
