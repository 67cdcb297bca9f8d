"""Batch scoring of trained CAS models.

- Each model scores the whole source table (both partitions), so the scored
  table lines up row for row with the source.
- ``assessOneRow`` keeps exactly one output row per input row; the target and
  partition indicator are copied through for assessment.
- Scored tables are named ``<short>_scored`` and replaced on every run.

Outputs:
- Probability columns ``P_<target><event>`` / ``P_<target><non-event>``
  (``encodeName=True``), consumed by :mod:`cascompare.assessment.aggregate`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import swat

from cascompare.common.exceptions import CASActionError
from cascompare.common.session import record_count, run_action, table_ref
from cascompare.common.utils import get_logger
from cascompare.training.remote import ModelHandle

logger = get_logger("cascompare.scoring.score")


def probability_column(target: str, level: str) -> str:
    """Name of the predicted-probability column for a target level."""
    return f"P_{target}{level}"


def score_params(
    handle: ModelHandle,
    *,
    source: str,
    target: str,
    partition: str,
    caslib: Optional[str] = None,
    out_caslib: Optional[str] = None,
) -> Dict[str, Any]:
    return dict(
        table=table_ref(source, caslib),
        modelTable=table_ref(handle.table, handle.caslib),
        casOut=dict(table_ref(handle.kind.spec.scored_table, out_caslib), replace=True),
        copyVars=[target, partition],
        assessOneRow=True,
        encodeName=True,
    )


def score_model(
    conn: swat.CAS,
    handle: ModelHandle,
    *,
    source: str,
    target: str,
    partition: str,
    caslib: Optional[str] = None,
    out_caslib: Optional[str] = None,
) -> str:
    """
    Score ``source`` with one trained model and return the scored table name.

    Raises:
        CASActionError if the score action fails or the row counts differ.
    """
    spec = handle.kind.spec
    params = score_params(
        handle, source=source, target=target, partition=partition,
        caslib=caslib, out_caslib=out_caslib,
    )
    logger.info("Scoring %s with %s -> %s", source, spec.score_action, spec.scored_table)
    run_action(conn, spec.score_action, **params)

    n_in = record_count(conn, source, caslib)
    n_out = record_count(conn, spec.scored_table, out_caslib)
    if n_in != n_out:
        raise CASActionError(
            spec.score_action,
            status=f"scored table has {n_out} rows, source has {n_in}",
        )
    return spec.scored_table


def score_all(
    conn: swat.CAS,
    handles: List[ModelHandle],
    *,
    source: str,
    target: str,
    partition: str,
    caslib: Optional[str] = None,
    out_caslib: Optional[str] = None,
) -> Dict[str, str]:
    """Score every handle; returns {short name: scored table}."""
    return {
        h.name: score_model(
            conn, h, source=source, target=target, partition=partition,
            caslib=caslib, out_caslib=out_caslib,
        )
        for h in handles
    }
