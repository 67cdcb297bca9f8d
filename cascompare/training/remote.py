"""
Remote (CAS) model training.

All four kinds share one call shape:

    {table, target, inputs, nominals, casOut} -> model table

``table`` is restricted to the training partition and ``casOut`` replaces any
model table of the same name. Extra per-kind parameters (tree depth, hidden
layers, ...) come from configs/models.yaml and never override the shared keys.
Training failures propagate; nothing is retried.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import swat

from cascompare.common.catalog import FeatureCatalog
from cascompare.common.exceptions import MetadataError
from cascompare.common.session import run_action, table_ref
from cascompare.common.utils import get_logger
from cascompare.training.models import ModelKind

logger = get_logger("cascompare.training.remote")


@dataclass(frozen=True)
class ModelHandle:
    kind: ModelKind
    table: str
    caslib: Optional[str] = None

    @property
    def name(self) -> str:
        return self.kind.short_name


def feature_sets(kind: ModelKind, catalog: FeatureCatalog) -> Tuple[List[str], List[str]]:
    """(inputs, nominals) a kind trains on; the neural network uses the imputed variants."""
    if kind.spec.uses_imputed:
        return list(catalog.imp_inputs), list(catalog.imp_nominals)
    return list(catalog.inputs), list(catalog.nominals)


def check_feature_sets(catalog: FeatureCatalog, kinds: Iterable[ModelKind] = tuple(ModelKind)) -> None:
    """
    Fail before any training when a model kind would get no input columns.

    Raises:
        MetadataError naming every kind whose feature set is empty.
    """
    empty = []
    for kind in kinds:
        inputs, nominals = feature_sets(kind, catalog)
        if not inputs and len(nominals) <= 1:
            empty.append(kind.short_name)
    if empty:
        raise MetadataError(f"No input columns for model(s) {empty}; check the imputation prefix and column types.")


def train_params(
    kind: ModelKind,
    *,
    source: str,
    catalog: FeatureCatalog,
    partition: str,
    caslib: Optional[str] = None,
    model_caslib: Optional[str] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Action parameters for training ``kind`` on the training partition."""
    spec = kind.spec
    inputs, nominals = feature_sets(kind, catalog)

    params: Dict[str, Any] = dict(extra or {})
    params.update(
        table=table_ref(source, caslib, where=f"{partition} = 0"),
        target=catalog.target,
        inputs=inputs + nominals[1:],
        nominals=nominals,
        casOut=dict(table_ref(spec.model_table, model_caslib), replace=True),
    )
    if spec.var_importance:
        params["varImp"] = True
    return params


def train_model(
    conn: swat.CAS,
    kind: ModelKind,
    *,
    source: str,
    catalog: FeatureCatalog,
    partition: str,
    caslib: Optional[str] = None,
    model_caslib: Optional[str] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> ModelHandle:
    params = train_params(
        kind,
        source=source,
        catalog=catalog,
        partition=partition,
        caslib=caslib,
        model_caslib=model_caslib,
        extra=extra,
    )
    logger.info(
        "Training %s (%s) on %s | inputs=%s nominals=%s",
        kind.display_name,
        kind.spec.train_action,
        source,
        len(params["inputs"]),
        len(params["nominals"]),
    )
    run_action(conn, kind.spec.train_action, **params)
    return ModelHandle(kind=kind, table=kind.spec.model_table, caslib=model_caslib)


def train_all(
    conn: swat.CAS,
    *,
    source: str,
    catalog: FeatureCatalog,
    partition: str,
    caslib: Optional[str] = None,
    model_caslib: Optional[str] = None,
    extras: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> List[ModelHandle]:
    """Train every :class:`ModelKind` in enum order."""
    extras = extras or {}
    return [
        train_model(
            conn,
            kind,
            source=source,
            catalog=catalog,
            partition=partition,
            caslib=caslib,
            model_caslib=model_caslib,
            extra=extras.get(kind.short_name),
        )
        for kind in ModelKind
    ]
