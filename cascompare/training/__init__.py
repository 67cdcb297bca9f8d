"""
Training package for the CAS model comparison workflow.

Modules:
    models.py      - Closed set of CAS model kinds and their train / score actions.
    remote.py      - Trains the CAS models on the training partition.
    challenger.py  - Local XGBoost challenger and its misclassification.
    artifact_io.py - Local model file, manifest.json and optional GCS mirror.
    compare.py     - Runs the full comparison end to end.
    entrypoint.py  - CLI entrypoint.
"""
__all__ = [
    "models",
    "remote",
    "challenger",
    "artifact_io",
    "compare",
    "entrypoint",
]
