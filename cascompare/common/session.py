"""CAS session helpers for the model comparison workflow.

The CAS connection is the single remote resource of a run. It is opened once by
:func:`open_session`, handed explicitly to every step, and terminated when the
``with`` block exits (also on error).

Every action goes through :func:`run_action`, which turns an error severity in
the action result into :class:`CASActionError`. Nothing is retried: a failed
training or scoring call has to be looked at by an operator.

Authentication
--------------
- ``cas_username`` / ``cas_password`` from config or env (CAS_USERNAME / CAS_PASSWORD).
- If both are empty swat falls back to ``~/.authinfo``.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, Optional

import pandas as pd
import swat

from cascompare.common.exceptions import CASActionError
from cascompare.common.utils import get_logger

logger = get_logger("cascompare.common.session")


# ---------------------------------------------------------------------
# Session lifetime
# ---------------------------------------------------------------------

def connect(cfg: Dict[str, Any]) -> swat.CAS:
    """Create a CAS connection from config (connect/auth errors propagate from swat)."""
    kwargs: Dict[str, Any] = {}
    if cfg.get("cas_username"):
        kwargs["username"] = cfg["cas_username"]
    if cfg.get("cas_password"):
        kwargs["password"] = cfg["cas_password"]
    if cfg.get("cas_protocol"):
        kwargs["protocol"] = cfg["cas_protocol"]
    logger.info("Connecting to CAS at %s:%s", cfg["cas_host"], cfg["cas_port"])
    return swat.CAS(cfg["cas_host"], int(cfg["cas_port"]), **kwargs)


@contextmanager
def open_session(cfg: Dict[str, Any], connector=connect) -> Iterator[swat.CAS]:
    """
    Acquire a CAS session for the duration of the block.

    Args:
        cfg: env config (see :func:`cascompare.common.io.load_env_config`).
        connector: callable building the connection; swapped out in tests.
    """
    conn = connector(cfg)
    try:
        yield conn
    finally:
        logger.info("Terminating CAS session")
        conn.terminate()


# ---------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------

def run_action(conn: swat.CAS, action: str, **params: Any):
    """
    Run a CAS action and return its result bundle.

    Raises:
        CASActionError if the action result has severity > 1.
    """
    logger.debug("CAS action %s", action)
    res = conn.retrieve(action, **params)
    severity = getattr(res, "severity", 0) or 0
    if severity > 1:
        raise CASActionError(action, status=getattr(res, "status", None), severity=severity)
    return res


def load_action_sets(conn: swat.CAS, action_sets: Iterable[str]) -> None:
    for name in action_sets:
        run_action(conn, "builtins.loadActionSet", actionSet=name)
        logger.info("Loaded action set %s", name)


def table_ref(name: str, caslib: Optional[str] = None, where: Optional[str] = None) -> Dict[str, Any]:
    """CAS table parameter dict ({name, caslib, where})."""
    ref: Dict[str, Any] = {"name": name}
    if caslib:
        ref["caslib"] = caslib
    if where:
        ref["where"] = where
    return ref


def column_info(conn: swat.CAS, table: str, caslib: Optional[str] = None) -> pd.DataFrame:
    """Column metadata (Column, Type, ...) of a CAS table."""
    res = run_action(conn, "table.columnInfo", table=table_ref(table, caslib))
    return res["ColumnInfo"]


def record_count(conn: swat.CAS, table: str, caslib: Optional[str] = None) -> int:
    res = run_action(conn, "table.recordCount", table=table_ref(table, caslib))
    return int(res["RecordCount"]["N"].iloc[0])


def fetch_table(conn: swat.CAS, table: str, caslib: Optional[str] = None) -> pd.DataFrame:
    """Materialize a full CAS table into a local DataFrame."""
    frame = conn.CASTable(table, caslib=caslib).to_frame()
    logger.info("Fetched %s rows x %s cols from %s", len(frame), frame.shape[1], table)
    return pd.DataFrame(frame)
