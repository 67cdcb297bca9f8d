"""
CAS model comparison workflow (champion / challenger).

Subpackages:
    common      - Config, logging, CAS session, feature catalog, model store helpers.
    training    - Remote (CAS) model training, local XGBoost challenger, artifacts, entrypoint.
    scoring     - Applies trained CAS models to the source table.
    assessment  - ROC assessment, misclassification ranking, ROC chart.
"""

__version__ = "0.1.0"

__all__ = [
    "common",
    "training",
    "scoring",
    "assessment",
]
