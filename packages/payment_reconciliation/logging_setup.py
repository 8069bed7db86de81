"""Logging for payment reconciliation runs.

Reconciliation and import code log under ``payment_reconciliation.*``:
dropped rows and pass counts at DEBUG, import progress and results at INFO,
rolled-back payments at ERROR. Nothing is printed until a host configures the
package logger; the ``payment-recon`` CLI does that in its root callback, with
the level taken from ``PAYMENT_RECON_LOG_LEVEL`` (default INFO).

- ``configure_logging(...)`` attaches one ``StreamHandler`` to the
  ``payment_reconciliation`` logger; later calls are no-ops.
- ``get_logger(name)`` returns a module logger and keeps the package silent
  (``NullHandler``) while unconfigured.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "payment_reconciliation"
_LEVEL_ENV_VAR = "PAYMENT_RECON_LOG_LEVEL"
_CONFIGURED = False


def _parse_level(level: int | str | None, *, use_env: bool = True) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        # Numeric strings or standard level names (INFO/DEBUG/etc.).
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
    env_val = os.getenv(_LEVEL_ENV_VAR)
    if use_env and env_val:
        return _parse_level(env_val, use_env=False)
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Configure the package root logger exactly once.

    Parameters
    ----------
    level:
        Logging level as ``int`` or level-name string. When ``None``, the
        ``PAYMENT_RECON_LOG_LEVEL`` environment variable is consulted, then
        ``logging.INFO``.
    fmt:
        Optional format string; defaults to
        ``"%(asctime)s %(name)s %(levelname)s %(message)s"``.
    stream:
        Output stream for the single ``StreamHandler`` (``sys.stderr``).
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    # Drop NullHandlers installed by get_logger() before configuration.
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(
        logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s")
    )

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name with library-safe defaults."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
