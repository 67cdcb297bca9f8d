"""
Champion / challenger comparison run.

Steps, strictly in order (each depends on the previous one):
  1) Open the CAS session and load the action sets.
  2) Read column metadata, validate the declared roles, build the feature catalog.
  3) Train the four CAS models on the training partition.
  4) Score every model against the full source table.
  5) Assess each scored table on the validation partition and rank the models
     by misclassification at the comparison cutoff.
  6) Train the local XGBoost challenger and add it to the ranking.
  7) Draw the ROC chart, save + promote the best CAS model, save the challenger.

The CAS session is released when the run ends, successfully or not.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

import pandas as pd

from cascompare.assessment.aggregate import (
    assess_model,
    best_remote_model,
    combine_roc,
    compare_at_cutoff,
    rank_models,
)
from cascompare.assessment.plots import plot_roc_curves
from cascompare.common.catalog import build_feature_catalog, validate_roles
from cascompare.common.io import load_models_config, write_csv, write_json
from cascompare.common.registry import save_and_promote
from cascompare.common.session import column_info, fetch_table, load_action_sets, open_session
from cascompare.common.utils import get_logger
from cascompare.scoring.score import score_all
from cascompare.training import artifact_io
from cascompare.training.challenger import train_challenger
from cascompare.training.models import CHALLENGER_DISPLAY_NAME, required_action_sets
from cascompare.training.remote import check_feature_sets, train_all


def run_comparison(
    cfg: Mapping[str, Any],
    *,
    run_id: str,
    models_yaml: str = "configs/models.yaml",
    skip_challenger: bool = False,
    connector=None,
    publisher: Optional[artifact_io.Publisher] = None,
) -> Dict[str, Any]:
    """
    Run the whole comparison and return a summary dict.

    Args:
        cfg: env config from :func:`cascompare.common.io.load_env_config`.
        run_id: folder name for local / GCS artifacts.
        models_yaml: per-model CAS action extras.
        skip_challenger: train and rank CAS models only.
        connector: optional CAS connection factory (tests).
        publisher: where to publish the finished run folder; defaults to the GCS
            mirror when ``artifact_bucket`` is configured.
    """
    logger = get_logger("cascompare.training.compare", level=cfg.get("log_level", "INFO"))

    source = cfg["source_table"]
    caslib = cfg.get("caslib")
    target = cfg["target"]
    partition = cfg["partition_column"]
    model_caslib = cfg.get("model_caslib")
    output_dir = cfg.get("output_dir", "outputs")
    extras = load_models_config(models_yaml)

    session_kwargs = {"connector": connector} if connector is not None else {}
    with open_session(dict(cfg), **session_kwargs) as conn:
        load_action_sets(conn, required_action_sets())

        # 2) feature catalog
        columninfo = column_info(conn, source, caslib)
        validate_roles(columninfo, target, partition)
        catalog = build_feature_catalog(
            columninfo,
            target=target,
            partition=partition,
            imputed_prefix=cfg.get("imputed_prefix", "IMP_"),
        )
        logger.info("Feature catalog: %s", json.dumps(catalog.as_dict()))
        check_feature_sets(catalog)

        # 3) remote training
        handles = train_all(
            conn,
            source=source,
            catalog=catalog,
            partition=partition,
            caslib=caslib,
            model_caslib=model_caslib,
            extras=extras,
        )

        # 4) scoring
        scored = score_all(
            conn, handles, source=source, target=target, partition=partition,
            caslib=caslib, out_caslib=model_caslib,
        )

        # 5) assessment
        rocs: Dict[str, pd.DataFrame] = {}
        for h in handles:
            rocs[h.kind.display_name] = assess_model(
                conn,
                scored[h.name],
                target=target,
                partition=partition,
                event=str(cfg.get("event", "1")),
                non_event=str(cfg.get("non_event", "0")),
                caslib=model_caslib,
            )
        combined = combine_roc(rocs)
        comparison = compare_at_cutoff(
            combined,
            cutoff=float(cfg.get("cutoff", 0.5)),
            tolerance=float(cfg.get("cutoff_tolerance", 1e-9)),
        )
        logger.info("Remote comparison:\n%s", comparison[["Model", "Misclassification"]].to_string(index=False))

        # 6) local challenger
        challenger = None
        if not skip_challenger:
            frame = fetch_table(conn, source, caslib)
            challenger = train_challenger(
                frame,
                catalog,
                partition=partition,
                missing_sentinel=float(cfg.get("missing_sentinel", -999.0)),
                cutoff=float(cfg.get("cutoff", 0.5)),
                random_state=int(cfg.get("random_state", 42)),
            )
        ranking = rank_models(comparison, [challenger.ranking_row()] if challenger else [])
        logger.info("Ranking:\n%s", ranking.to_string(index=False))

        # 7) chart + persistence
        rdir = artifact_io.run_dir(output_dir, run_id)
        plot_rocs = dict(rocs)
        if challenger is not None:
            plot_rocs[CHALLENGER_DISPLAY_NAME] = challenger.roc
        chart = plot_roc_curves(combine_roc(plot_rocs), rdir / "roc_comparison.png")
        ranking_csv = write_csv(rdir / "ranking.csv", ranking)
        combined_csv = write_csv(rdir / "roc_combined.csv", combined)

        best_name = best_remote_model(ranking)
        best_handle = next(h for h in handles if h.kind.display_name == best_name)
        promoted = save_and_promote(
            conn,
            best_handle,
            save_caslib=model_caslib,
            promote_caslib=cfg.get("promote_caslib", "Public"),
        )

    files = {"ranking": ranking_csv, "roc_combined": combined_csv, "roc_chart": chart}
    if challenger is not None:
        files["challenger_model"] = artifact_io.save_challenger(
            challenger.model, output_dir=output_dir, run_id=run_id
        )

    summary: Dict[str, Any] = {
        "run_id": run_id,
        "source_table": source,
        "catalog": catalog.as_dict(),
        "ranking": ranking.to_dict(orient="records"),
        "best_remote_model": promoted,
        "best_overall_model": str(ranking.iloc[0]["Model"]),
    }
    if challenger is not None:
        summary["challenger"] = {
            "model": challenger.label,
            "misclassification": challenger.misclassification,
            "n_train": challenger.n_train,
            "n_valid": challenger.n_valid,
            "n_features": len(challenger.feature_names),
        }

    _, manifest = artifact_io.write_manifest(output_dir=output_dir, run_id=run_id, files=files, extra=summary)
    write_json(rdir / "summary.json", summary)

    if publisher is None:
        publisher = artifact_io.publisher_from_config(cfg)
    if publisher is not None:
        summary["published_files"] = publisher(run_id=run_id, files=files, manifest=manifest)

    logger.info("Best remote model: %s | best overall: %s", best_name, summary["best_overall_model"])
    return summary
