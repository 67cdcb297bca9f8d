"""
Command-line entrypoint for a champion / challenger comparison run.

This script only orchestrates:
  1) Load env config (configs/env.example.yaml <- configs/env.yaml <- env vars).
  2) Run cascompare.training.compare.run_comparison(...) against the CAS server.

No modeling math is defined here.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict

from cascompare.common.io import load_env_config
from cascompare.common.utils import get_logger, make_run_id, redact, utcnow_iso
from cascompare.training import compare


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="CAS model comparison (champion / challenger)")

    p.add_argument("--models_yaml", default="configs/models.yaml", help="Path to per-model CAS action params")
    p.add_argument("--log_level", default=None, help="Override log level (INFO, DEBUG, etc.)")
    p.add_argument("--run_id", default=None, help="Override run id; if omitted a new one is generated")
    p.add_argument("--skip_challenger", action="store_true", help="Only train and rank the CAS models")

    return p.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    cfg: Dict[str, Any] = load_env_config()
    if args.log_level:
        cfg["log_level"] = args.log_level

    logger = get_logger("cascompare.training.entrypoint", level=cfg.get("log_level", "INFO"))
    run_id = args.run_id or make_run_id()

    logger.info("=== CAS Model Comparison ===")
    logger.info("Run ID: %s  |  Timestamp: %s", run_id, utcnow_iso())
    logger.info("Config: %s", json.dumps(redact(cfg), indent=2, default=str))

    result = compare.run_comparison(
        cfg,
        run_id=run_id,
        models_yaml=args.models_yaml,
        skip_challenger=bool(args.skip_challenger),
    )
    logger.info("Comparison completed. Summary: %s", json.dumps(result, indent=2, default=str))
    logger.info("=== Run finished successfully. run_id=%s ===", run_id)


if __name__ == "__main__":
    main(sys.argv[1:])
