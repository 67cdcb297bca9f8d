"""Feature catalog and local feature preparation.

The catalog is derived once from the CAS column metadata of the source table:

    * ``inputs``       - numeric columns, missing values tolerated
    * ``nominals``     - target + categorical columns, missing values tolerated
    * ``imp_inputs``   - numeric columns carrying the imputation prefix
    * ``imp_nominals`` - target + categorical columns carrying the imputation prefix

The target and the partition indicator are declared by name; neither is ever an
input. The target is always the first nominal.

:func:`prepare_xy_onehot` builds the local challenger design matrix from the same
catalog (one-hot categoricals, NaN -> sentinel).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

import numpy as np
import pandas as pd

from cascompare.common.exceptions import MetadataError


CATEGORICAL_TYPES: Set[str] = {"varchar", "char"}


@dataclass(frozen=True)
class FeatureCatalog:
    target: str
    inputs: List[str] = field(default_factory=list)
    nominals: List[str] = field(default_factory=list)
    imp_inputs: List[str] = field(default_factory=list)
    imp_nominals: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, List[str]]:
        return {
            "inputs": list(self.inputs),
            "nominals": list(self.nominals),
            "imp.inputs": list(self.imp_inputs),
            "imp.nominals": list(self.imp_nominals),
        }

    @property
    def categorical_inputs(self) -> List[str]:
        """Nominal columns other than the target."""
        return [c for c in self.nominals if c != self.target]


def _check_columns(columninfo: pd.DataFrame) -> None:
    missing = [c for c in ("Column", "Type") if c not in columninfo.columns]
    if missing:
        raise MetadataError(f"Column metadata lacks field(s): {missing}")
    if len(columninfo) < 2:
        raise MetadataError(
            f"Column metadata has {len(columninfo)} column(s); need a target and at least one input."
        )


def validate_roles(columninfo: pd.DataFrame, target: str, partition: str) -> None:
    """
    Check that the declared target and partition columns exist in the source table.

    Raises:
        MetadataError if metadata is malformed or a role column is absent.
    """
    _check_columns(columninfo)
    names = set(columninfo["Column"])
    absent = [c for c in (target, partition) if c not in names]
    if absent:
        raise MetadataError(f"Role column(s) not found in source table: {absent}")


def build_feature_catalog(
    columninfo: pd.DataFrame,
    *,
    target: str,
    partition: str,
    imputed_prefix: str = "IMP_",
) -> FeatureCatalog:
    """
    Classify source columns into the four feature sets.

    Args:
        columninfo: column metadata with ``Column`` and ``Type``.
        target: name of the target column (must be present).
        partition: name of the partition indicator column (dropped if present).
        imputed_prefix: name prefix marking imputed columns.

    Raises:
        MetadataError if the metadata has fewer than 2 columns or lacks the target.
    """
    _check_columns(columninfo)
    if target not in set(columninfo["Column"]):
        raise MetadataError(f"Target column {target!r} not in column metadata.")

    inputs: List[str] = []
    nominals: List[str] = [target]
    imp_inputs: List[str] = []
    imp_nominals: List[str] = [target]

    for name, ctype in zip(columninfo["Column"], columninfo["Type"]):
        if name in (target, partition):
            continue
        categorical = str(ctype).strip().lower() in CATEGORICAL_TYPES
        imputed = name.startswith(imputed_prefix)
        if imputed:
            (imp_nominals if categorical else imp_inputs).append(name)
        else:
            (nominals if categorical else inputs).append(name)

    return FeatureCatalog(
        target=target,
        inputs=inputs,
        nominals=nominals,
        imp_inputs=imp_inputs,
        imp_nominals=imp_nominals,
    )


# ---------------------------------------------------------------------
# Local (challenger) feature prep
# ---------------------------------------------------------------------

def prepare_xy_onehot(
    df: pd.DataFrame,
    catalog: FeatureCatalog,
    *,
    missing_sentinel: float = -999.0,
) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Build X, y for the local challenger.

      - Numeric inputs cast to float32.
      - Categorical inputs (nominals minus target) one-hot encoded; a missing
        category gets no indicator set.
      - Remaining NaNs replaced with ``missing_sentinel`` (no imputation).

    Raises:
        MetadataError if the target or a catalog column is missing from ``df``.
    """
    needed = [catalog.target] + catalog.inputs + catalog.categorical_inputs
    missing = [c for c in needed if c not in df.columns]
    if missing:
        raise MetadataError(f"Columns missing from local frame: {missing}")

    X = df[catalog.inputs].apply(pd.to_numeric, errors="coerce").astype("float32")
    cats = catalog.categorical_inputs
    if cats:
        dummies = pd.get_dummies(df[cats].astype("string"), columns=cats, dtype="float32")
        X = pd.concat([X, dummies], axis=1)

    X = X.replace([np.inf, -np.inf], np.nan).fillna(missing_sentinel)
    y = pd.to_numeric(df[catalog.target], errors="coerce").astype("Int64").astype("float32")
    return X, y
