"""
Local challenger model (XGBoost) trained outside CAS.

Key behaviors:
- Source table materialized locally, categorical inputs one-hot encoded.
- Missing values are not imputed; they are set to a sentinel that XGBoost is
  told to treat as missing.
- Train on partition 0, evaluate on partition 1.
- Fixed hyperparameters: 50 rounds, learning rate 0.1, 50% row and column
  subsampling, log-loss objective.
- Misclassification on validation at a 0.5 probability threshold, the same
  metric used for the CAS models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np
import pandas as pd
import xgboost as xgb
from sklearn.metrics import roc_auc_score, roc_curve

from cascompare.common.catalog import FeatureCatalog, prepare_xy_onehot
from cascompare.common.utils import get_logger
from cascompare.training.models import CHALLENGER_DISPLAY_NAME

logger = get_logger("cascompare.training.challenger")

XGB_PARAMS: Dict[str, Any] = dict(
    n_estimators=50,
    learning_rate=0.1,
    subsample=0.5,
    colsample_bytree=0.5,
    objective="binary:logistic",
    eval_metric="logloss",
    n_jobs=1,
)


def _as_label_pair(y_true, y_pred) -> tuple[np.ndarray, np.ndarray]:
    t = np.asarray(y_true).astype(int)
    p = np.asarray(y_pred).astype(int)
    if len(t) != len(p):
        raise ValueError(f"Length mismatch: {len(t)} labels vs {len(p)} predictions")
    if len(t) == 0:
        raise ValueError("Cannot compute misclassification on an empty set.")
    return t, p


def misclassification_rate(y_true: np.ndarray | pd.Series, y_pred: np.ndarray | pd.Series) -> float:
    """Share of rows where prediction and ground truth differ."""
    t, p = _as_label_pair(y_true, y_pred)
    return float(np.count_nonzero(t != p) / len(t))


def accuracy_rate(y_true: np.ndarray | pd.Series, y_pred: np.ndarray | pd.Series) -> float:
    """Share of rows where prediction and ground truth agree."""
    t, p = _as_label_pair(y_true, y_pred)
    return float(np.count_nonzero(t == p) / len(t))


def roc_frame(y_true: np.ndarray, y_prob: np.ndarray) -> pd.DataFrame:
    """
    ROC points in the same column layout as the CAS assessment (CutOff, FPR, Sensitivity, C).

    A single-class label set has no concordance; ``C`` is NaN and a warning is logged.
    """
    fpr, tpr, thr = roc_curve(y_true, y_prob)
    if len(np.unique(y_true)) < 2:
        logger.warning("Validation labels hold a single class; concordance (C) is undefined.")
        auc = float("nan")
    else:
        auc = float(roc_auc_score(y_true, y_prob))
    return pd.DataFrame({"CutOff": thr, "FPR": fpr, "Sensitivity": tpr, "C": auc})


@dataclass
class ChallengerResult:
    model: xgb.XGBClassifier
    accuracy: float
    misclassification: float
    n_train: int
    n_valid: int
    feature_names: List[str] = field(default_factory=list)
    roc: pd.DataFrame = field(default_factory=pd.DataFrame)
    label: str = CHALLENGER_DISPLAY_NAME

    def ranking_row(self) -> Dict[str, Any]:
        return {
            "Model": self.label,
            "Accuracy": self.accuracy,
            "Misclassification": self.misclassification,
        }


def train_challenger(
    frame: pd.DataFrame,
    catalog: FeatureCatalog,
    *,
    partition: str,
    missing_sentinel: float = -999.0,
    cutoff: float = 0.5,
    random_state: int = 42,
) -> ChallengerResult:
    """
    Train the local XGBoost challenger and score it on the validation partition.

    Raises:
        RuntimeError if either partition has no labelled rows.
    """
    if partition not in frame.columns:
        raise RuntimeError(f"Partition column {partition!r} not in local frame.")

    X, y = prepare_xy_onehot(frame, catalog, missing_sentinel=missing_sentinel)
    part = pd.to_numeric(frame[partition], errors="coerce")
    labelled = y.notna()
    tr = labelled & (part == 0)
    va = labelled & (part == 1)
    if not tr.any() or not va.any():
        raise RuntimeError(
            f"Need rows in both partitions: train={int(tr.sum())} valid={int(va.sum())}"
        )

    model = xgb.XGBClassifier(**XGB_PARAMS, missing=missing_sentinel, random_state=random_state)
    model.fit(X[tr], y[tr].astype(int))

    y_va = y[va].astype(int).values
    p_va = model.predict_proba(X[va])[:, 1]
    pred = (p_va >= cutoff).astype(int)
    # same derivation as the CAS rows: Misclassification = 1 - Accuracy
    acc = accuracy_rate(y_va, pred)
    misc = 1 - acc

    logger.info(
        "Challenger trained | train_rows=%s valid_rows=%s features=%s misclassification=%.4f",
        int(tr.sum()), int(va.sum()), X.shape[1], misc,
    )
    return ChallengerResult(
        model=model,
        accuracy=acc,
        misclassification=misc,
        n_train=int(tr.sum()),
        n_valid=int(va.sum()),
        feature_names=list(X.columns),
        roc=roc_frame(y_va, p_va),
    )
