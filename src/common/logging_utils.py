"""Centralized logging helpers for nodeplan.

Configures the root logger from NODEPLAN_LOG_LEVEL and provides small helpers
that keep discovery/selection DEBUG traces consistent across modules.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterable, Optional

from constants import Constants

_LEVEL_ENV = "NODEPLAN_LOG_LEVEL"


def configure_logging(log_file: Optional[str] = None, quiet: bool = False) -> None:
    """Configure the root logger.

    Level comes from NODEPLAN_LOG_LEVEL (default INFO). Console output goes to
    stderr so that plans printed on stdout stay machine-readable.

    Args:
        log_file: Optional path for an additional file handler.
        quiet: Suppress the console handler.
    """
    level_name = os.environ.get(_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(level)

    if not quiet:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        root.addHandler(file_handler)

    if not root.handlers:
        root.addHandler(logging.NullHandler())


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by this logger."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build an `extra` dict for structured log records, dropping None values."""
    return {k: v for k, v in kwargs.items() if v is not None}


def log_discovered_files(logger: logging.Logger, provider: str, discovered: Dict[str, Iterable[str]]) -> None:
    """Emit a DEBUG line per kind of discovered file (manifest, lockfile, ...)."""
    for kind, paths in discovered.items():
        paths = list(paths)
        logger.debug(
            "[%s] discovered %s: %s",
            provider,
            kind,
            ", ".join(paths) if paths else "none",
            extra=extra_context(event="discovery", component=provider, action=kind, count=len(paths)),
        )


def log_selection(logger: logging.Logger, provider: str, subject: str, selected: Optional[str], rationale: str) -> None:
    """Record a decision made for a subject (e.g. package manager, runtime)."""
    logger.debug(
        "[%s] %s -> %s (%s)",
        provider,
        subject,
        selected if selected is not None else "none",
        rationale,
        extra=extra_context(event="decision", component=provider, action=subject, outcome=selected),
    )


def log_multiple_lockfiles(logger: logging.Logger, provider: str, selected: str, alternatives: Iterable[str]) -> None:
    """Note that more than one lockfile was found and which one won."""
    alternatives = list(alternatives)
    logger.debug(
        "[%s] multiple lockfiles found, using %s and ignoring %s",
        provider,
        selected,
        ", ".join(alternatives),
        extra=extra_context(event="decision", component=provider, action="lockfile", outcome=selected),
    )
