"""
Artifact I/O for a comparison run.

This module:
- Serializes the local challenger model to <output_dir>/<run_id>/model_xgb.joblib.
- Writes a manifest.json with pointers, ranking and file hashes.
- Hands the finished run folder to an optional publisher. The shipped
  publisher mirrors to gs://<bucket>/runs/<run_id>/ and is selected by
  ``artifact_bucket``; callers may pass any other callable with the same shape.

Failures propagate; the operator must see a model that was not saved.
"""

from __future__ import annotations

import hashlib
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import joblib

from cascompare.common.io import gcs_join, gcs_upload_file, gcs_upload_json, write_json
from cascompare.common.utils import get_logger, utcnow_iso
from cascompare.training.models import CHALLENGER_SHORT_NAME

logger = get_logger("cascompare.training.artifact_io")

# publisher(run_id=..., files=..., manifest=...) -> {key: published uri}
Publisher = Callable[..., Dict[str, str]]

_CONTENT_TYPES = {
    ".json": "application/json",
    ".csv": "text/csv",
    ".png": "image/png",
}


def run_dir(output_dir: str | Path, run_id: str) -> Path:
    return Path(output_dir) / run_id


def challenger_path(output_dir: str | Path, run_id: str) -> Path:
    return run_dir(output_dir, run_id) / f"model_{CHALLENGER_SHORT_NAME}.joblib"


def save_challenger(model: Any, *, output_dir: str | Path, run_id: str) -> Path:
    """Serialize the challenger model; returns the file path."""
    path = challenger_path(output_dir, run_id)
    path.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(model, path)
    logger.info("Saved local challenger model to %s", path)
    return path


# ---------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------

def file_digest(path: str | Path) -> Optional[str]:
    """SHA-256 of a run file, None when the file was not produced."""
    p = Path(path)
    if not p.exists():
        return None
    h = hashlib.sha256()
    with p.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def write_manifest(
    *,
    output_dir: str | Path,
    run_id: str,
    files: Dict[str, Path],
    extra: Optional[Dict[str, Any]] = None,
) -> Tuple[Path, Dict[str, Any]]:
    """
    Write manifest.json next to the run artifacts.

    ``files`` maps a logical key to a local path; hashes are recorded when the file exists.
    """
    manifest: Dict[str, Any] = {
        "run_id": run_id,
        "created_at": utcnow_iso(),
        "files": {k: str(p) for k, p in files.items()},
        "sha256": {k: file_digest(p) for k, p in files.items()},
    }
    if extra:
        manifest.update(extra)
    path = write_json(run_dir(output_dir, run_id) / "manifest.json", manifest)
    return path, manifest


# ---------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------

def mirror_to_gcs(*, bucket: str, run_id: str, files: Dict[str, Path], manifest: Dict[str, Any]) -> Dict[str, str]:
    """
    Upload run files and the manifest to ``<bucket>/runs/<run_id>/``.

    Returns {key: gs:// uri}.
    """
    prefix = f"{bucket.rstrip('/')}/runs/{run_id}"
    uploaded: Dict[str, str] = {}
    for key, path in files.items():
        if path.exists():
            target = gcs_join(prefix, path.name)
            gcs_upload_file(target, path, content_type=_CONTENT_TYPES.get(path.suffix, "application/octet-stream"))
            uploaded[key] = target
    manifest_uri = gcs_join(prefix, "manifest.json")
    gcs_upload_json(manifest_uri, {**manifest, "gcs_files": uploaded})
    uploaded["manifest"] = manifest_uri
    logger.info("Mirrored %s artifact(s) to %s", len(uploaded), prefix)
    return uploaded


def publisher_from_config(cfg: Mapping[str, Any]) -> Optional[Publisher]:
    """GCS mirror when ``artifact_bucket`` is set, otherwise no publishing."""
    bucket = cfg.get("artifact_bucket")
    if not bucket:
        return None
    return partial(mirror_to_gcs, bucket=bucket)
