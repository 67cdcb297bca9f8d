"""
Model assessment and comparison.

Key behaviors:
- ROC statistics come from the CAS ``percentile.assess`` action on the
  validation partition of each scored table (one row per cutoff).
- Per-model ROC tables are labelled with the model's display name and stacked
  in model order; rows keep their original order.
- The comparison table holds one row per model at the comparison cutoff with
  ``Misclassification = 1 - Accuracy``, sorted ascending with a stable sort.

The cutoff row is looked up as the nearest ``CutOff`` within an absolute
tolerance; a tolerance of 0 is an exact match. A model without such a row
raises :class:`MissingCutoffError` instead of dropping out of the ranking.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

import pandas as pd
import swat

from cascompare.common.exceptions import MissingCutoffError
from cascompare.common.session import run_action, table_ref
from cascompare.common.utils import get_logger
from cascompare.scoring.score import probability_column

logger = get_logger("cascompare.assessment.aggregate")

# CAS ROCInfo column -> name used across the package
_ROC_RENAMES: Dict[str, str] = {
    "ACC": "Accuracy",
}

ROC_COLUMNS: List[str] = ["CutOff", "TP", "FP", "FN", "TN", "Accuracy", "FPR", "Sensitivity", "C"]
RANKING_COLUMNS: List[str] = ["Model", "Engine", "Accuracy", "Misclassification"]


# -----------------------
# CAS side
# -----------------------

def normalize_roc(roc: pd.DataFrame) -> pd.DataFrame:
    """Rename CAS ROCInfo columns and check the ones the comparison relies on."""
    out = pd.DataFrame(roc).rename(columns=_ROC_RENAMES)
    missing = [c for c in ("CutOff", "Accuracy") if c not in out.columns]
    if missing:
        raise ValueError(f"ROC table lacks required column(s): {missing}")
    return out.reset_index(drop=True)


def assess_model(
    conn: swat.CAS,
    scored_table: str,
    *,
    target: str,
    partition: str,
    event: str = "1",
    non_event: str = "0",
    caslib: Optional[str] = None,
) -> pd.DataFrame:
    """ROC table (one row per cutoff) for one scored table, validation rows only."""
    res = run_action(
        conn,
        "percentile.assess",
        table=table_ref(scored_table, caslib, where=f"{partition} = 1"),
        inputs=probability_column(target, event),
        response=target,
        event=event,
        pVar=[probability_column(target, non_event)],
        pEvent=[non_event],
    )
    roc = normalize_roc(res["ROCInfo"])
    logger.info("Assessed %s: %s ROC rows", scored_table, len(roc))
    return roc


# -----------------------
# Aggregation (pure pandas)
# -----------------------

def combine_roc(rocs: Mapping[str, pd.DataFrame]) -> pd.DataFrame:
    """
    Stack per-model ROC tables, tagging each row with ``Model``.

    Mapping order is model order; rows within a model keep their order.
    """
    frames = []
    for model, roc in rocs.items():
        frames.append(pd.DataFrame(roc).assign(Model=model))
    if not frames:
        return pd.DataFrame(columns=["Model"] + ROC_COLUMNS)
    return pd.concat(frames, axis=0, ignore_index=True)


def compare_at_cutoff(
    combined: pd.DataFrame,
    *,
    cutoff: float = 0.5,
    tolerance: float = 1e-9,
) -> pd.DataFrame:
    """
    One row per model at ``cutoff``, ranked by misclassification.

    Args:
        combined: output of :func:`combine_roc`.
        cutoff: decision threshold to compare at.
        tolerance: max absolute distance between ``CutOff`` and ``cutoff``.

    Raises:
        MissingCutoffError if some model has no row within tolerance.
    """
    df = combined.reset_index(drop=True)
    dist = (pd.to_numeric(df["CutOff"], errors="coerce") - cutoff).abs()
    within = df.loc[dist <= tolerance].assign(_dist=dist[dist <= tolerance])

    models = list(pd.unique(df["Model"]))
    found = set(within["Model"])
    missing = [m for m in models if m not in found]
    if missing:
        raise MissingCutoffError(missing, cutoff)

    # closest row per model; idxmin keeps the first on ties
    best_idx = within.groupby("Model", sort=False)["_dist"].idxmin()
    picked = within.loc[best_idx.values].drop(columns="_dist")
    picked["Misclassification"] = 1 - picked["Accuracy"]

    ordered = ["Model"] + [c for c in picked.columns if c != "Model"]
    return (
        picked[ordered]
        .sort_values("Misclassification", ascending=True, kind="stable")
        .reset_index(drop=True)
    )


def rank_models(
    comparison: pd.DataFrame,
    challengers: Iterable[Mapping[str, object]] = (),
) -> pd.DataFrame:
    """
    Ranking table: remote comparison rows plus local challenger rows.

    Each challenger mapping needs ``Model``, ``Accuracy`` and ``Misclassification``.
    """
    remote = comparison[["Model", "Accuracy", "Misclassification"]].assign(Engine="remote")
    local = pd.DataFrame(list(challengers), columns=["Model", "Accuracy", "Misclassification"])
    local = local.assign(Engine="local")
    frames = [f for f in (remote, local) if not f.empty]
    if not frames:
        return pd.DataFrame(columns=RANKING_COLUMNS)
    ranking = pd.concat(frames, axis=0, ignore_index=True)[RANKING_COLUMNS]
    return ranking.sort_values("Misclassification", ascending=True, kind="stable").reset_index(drop=True)


def best_remote_model(ranking: pd.DataFrame) -> str:
    """Display name of the top-ranked remote model."""
    remote = ranking[ranking["Engine"] == "remote"]
    if remote.empty:
        raise ValueError("Ranking has no remote models.")
    return str(remote.iloc[0]["Model"])
