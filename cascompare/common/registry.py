"""CAS model store helpers.

Notes
-----
- The winning CAS model table is saved to a ``.sashdat`` file in the model
  caslib (source of truth), then promoted to global scope in the shared caslib
  so other sessions and users can score with it.
- Promotion replaces an existing global table of the same name.
- Any failure raises; a model that was not saved must be visible to the operator.
"""

from __future__ import annotations

from typing import Dict, Optional

import swat

from cascompare.common.session import run_action, table_ref
from cascompare.common.utils import get_logger
from cascompare.training.remote import ModelHandle

logger = get_logger("cascompare.common.registry")


# ---------------------------------------------------------------------
# Save / promote
# ---------------------------------------------------------------------

def saved_name(handle: ModelHandle) -> str:
    return f"{handle.table}.sashdat"


def save_model(conn: swat.CAS, handle: ModelHandle, *, caslib: Optional[str] = None) -> str:
    """Save the model table to ``<table>.sashdat`` in ``caslib``; returns the file name."""
    name = saved_name(handle)
    run_action(
        conn,
        "table.save",
        table=table_ref(handle.table, handle.caslib),
        name=name,
        caslib=caslib or handle.caslib,
        replace=True,
    )
    logger.info("Saved model table %s as %s (caslib=%s)", handle.table, name, caslib or handle.caslib)
    return name


def promote_model(
    conn: swat.CAS,
    handle: ModelHandle,
    *,
    target_caslib: str,
    target_name: Optional[str] = None,
) -> str:
    """
    Promote the model table to global scope in ``target_caslib``.

    Drops any existing global table of the same name first.
    """
    target_name = target_name or handle.table
    run_action(conn, "table.dropTable", name=target_name, caslib=target_caslib, quiet=True)
    params: Dict[str, object] = dict(name=handle.table, target=target_name, targetLib=target_caslib)
    if handle.caslib:
        params["caslib"] = handle.caslib
    run_action(conn, "table.promote", **params)
    logger.info("Promoted %s to %s.%s", handle.table, target_caslib, target_name)
    return target_name


def save_and_promote(
    conn: swat.CAS,
    handle: ModelHandle,
    *,
    save_caslib: Optional[str],
    promote_caslib: str,
) -> Dict[str, str]:
    saved = save_model(conn, handle, caslib=save_caslib)
    promoted = promote_model(conn, handle, target_caslib=promote_caslib)
    return {
        "model": handle.kind.display_name,
        "saved_file": saved,
        "save_caslib": str(save_caslib or handle.caslib or ""),
        "promoted_table": promoted,
        "promote_caslib": promote_caslib,
    }
