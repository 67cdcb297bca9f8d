"""
I/O utilities shared by the training, scoring and assessment steps.

- Config:
    load_env_config(): load configs/env.yaml (local-only) with fallback to configs/env.example.yaml,
    with optional environment variable overrides.
    load_models_config(): per-model CAS action extras from configs/models.yaml.

- Local files:
    write_json(), write_csv()

- Google Cloud Storage (GCS), optional artifact mirror:
    gcs_parse_uri(), gcs_upload_bytes(), gcs_upload_json(), gcs_upload_file()

Notes:
- CAS credentials are never written to the committed example config; pass them
  through CAS_USERNAME / CAS_PASSWORD or a local ~/.authinfo file.
- GCS uploads rely on Application Default Credentials
  (`gcloud auth application-default login` locally).
"""

from __future__ import annotations

import io
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
from google.cloud import storage


# =========================
# Config
# =========================

_ENV_PATH = Path("configs/env.yaml")               # local (not committed)
_ENV_EXAMPLE_PATH = Path("configs/env.example.yaml")  # committed default
_MODELS_PATH = Path("configs/models.yaml")

_DEFAULTS: Dict[str, Any] = {
    "cas_host": "localhost",
    "cas_port": 5570,
    "cas_protocol": None,
    "cas_username": None,
    "cas_password": None,
    "caslib": "casuser",
    "source_table": "hmeq_part",
    "target": "BAD",
    "event": "1",
    "non_event": "0",
    "partition_column": "_PartInd_",
    "imputed_prefix": "IMP_",
    "cutoff": 0.5,
    "cutoff_tolerance": 1e-9,
    "model_caslib": "casuser",
    "promote_caslib": "Public",
    "output_dir": "outputs",
    "artifact_bucket": None,
    "missing_sentinel": -999.0,
    "random_state": 42,
    "log_level": "INFO",
}

# env var -> (config key, caster)
_ENV_OVERRIDES = {
    "CAS_HOST": ("cas_host", str),
    "CAS_PORT": ("cas_port", int),
    "CAS_PROTOCOL": ("cas_protocol", str),
    "CAS_USERNAME": ("cas_username", str),
    "CAS_PASSWORD": ("cas_password", str),
    "CAS_CASLIB": ("caslib", str),
    "ARTIFACT_BUCKET": ("artifact_bucket", str),
    "OUTPUT_DIR": ("output_dir", str),
}


def _read_yaml(path: Path) -> Dict[str, Any]:
    import yaml  # PyYAML
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_env_config(
    env_path: Path = _ENV_PATH,
    example_path: Path = _ENV_EXAMPLE_PATH,
) -> Dict[str, Any]:
    """
    Load environment config for the workflow.

    Order of precedence:
      1) Environment variables (CAS_HOST, CAS_PORT, CAS_PASSWORD, etc.) - if present.
      2) configs/env.yaml - developer-local overrides (not committed).
      3) configs/env.example.yaml - repo default.
      4) Built-in defaults.

    Returns:
        dict with keys used across the project (cas_host, source_table, target, etc.).
    """
    cfg: Dict[str, Any] = {}
    if example_path.exists():
        cfg.update(_read_yaml(example_path))
    if env_path.exists():
        cfg.update(_read_yaml(env_path))

    for var, (key, cast) in _ENV_OVERRIDES.items():
        v = os.getenv(var)
        if v:
            cfg[key] = cast(v)

    for k, v in _DEFAULTS.items():
        cfg.setdefault(k, v)
    return cfg


def load_models_config(path: str | Path = _MODELS_PATH) -> Dict[str, Dict[str, Any]]:
    """
    Per-model extra CAS action parameters keyed by short model name (dt, rf, gbt, nn).

    Missing file -> no extras.
    """
    p = Path(path)
    if not p.exists():
        return {}
    raw = _read_yaml(p)
    models = raw.get("models") or {}
    return {name: dict((body or {}).get("params") or {}) for name, body in models.items()}


# =========================
# Local file helpers
# =========================

def write_json(path: str | Path, obj: Any, indent: int = 2) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(obj, indent=indent, default=str), encoding="utf-8")
    return p


def write_csv(path: str | Path, df: pd.DataFrame) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(p, index=False)
    return p


# =========================
# GCS helpers
# =========================

def gcs_parse_uri(uri: str) -> tuple[str, str]:
    if not uri.startswith("gs://"):
        raise ValueError(f"Not a GCS URI: {uri}")
    no_scheme = uri[5:]
    parts = no_scheme.split("/", 1)
    bucket = parts[0]
    blob = parts[1] if len(parts) > 1 else ""
    return bucket, blob


def gcs_join(prefix: str, filename: str) -> str:
    return f"{prefix.rstrip('/')}/{filename}"


def _get_storage_client() -> storage.Client:
    return storage.Client(project=os.getenv("PROJECT_ID"))


def gcs_upload_bytes(uri: str, data: bytes, content_type: Optional[str] = None) -> None:
    bucket_name, blob_name = gcs_parse_uri(uri)
    client = _get_storage_client()
    blob = client.bucket(bucket_name).blob(blob_name)
    blob.upload_from_file(io.BytesIO(data), rewind=True, content_type=content_type)


def gcs_upload_json(uri: str, obj: Any, indent: int = 2) -> None:
    data = json.dumps(obj, indent=indent, default=str).encode("utf-8")
    gcs_upload_bytes(uri, data, content_type="application/json")


def gcs_upload_file(uri: str, local_path: str | Path, content_type: Optional[str] = None) -> None:
    bucket_name, blob_name = gcs_parse_uri(uri)
    client = _get_storage_client()
    blob = client.bucket(bucket_name).blob(blob_name)
    blob.upload_from_filename(str(local_path), content_type=content_type)
