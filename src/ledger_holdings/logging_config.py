"""Centralized logging configuration."""

from __future__ import annotations

import logging

from ledger_holdings.config import get_log_level


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger for scripts.

    Uses LEDGER_LOG_LEVEL when no level is given and keeps noisy
    third-party loggers at WARNING.
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
        datefmt="%H:%M:%S",
        level=getattr(logging, (level or get_log_level()).upper()),
        force=True,
    )

    for name in ("yfinance", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)
