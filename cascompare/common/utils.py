"""Small helpers shared by every step of a comparison run.

- :func:`get_logger` - stdout logger, one per ``cascompare.*`` module.
- :func:`make_run_id` / :func:`utcnow_iso` - run folder names and metadata timestamps.
- :func:`redact` - config copy that is safe to echo (CAS password masked).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable

SECRET_KEYS = ("cas_password",)


# ---------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------

def get_logger(name: str, level: str | int = "INFO") -> logging.Logger:
    """
    Stdout logger for a ``cascompare`` module; repeated calls reuse the handler.
    """
    logger = logging.getLogger(name)
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.propagate = False
    return logger


# ---------------------------------------------------------------------
# Run metadata
# ---------------------------------------------------------------------

def make_run_id() -> str:
    """Folder name for one comparison run, e.g. 20251104T174530Z."""
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def redact(cfg: Dict[str, Any], secret_keys: Iterable[str] = SECRET_KEYS) -> Dict[str, Any]:
    """Copy of ``cfg`` with secret values masked, for the config echo at start-up."""
    secrets = set(secret_keys)
    return {k: ("***" if k in secrets and v else v) for k, v in cfg.items()}
