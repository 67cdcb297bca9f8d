"""ROC comparison chart."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd


def legend_label(model: str, concordance: float) -> str:
    return f"{model} (C={round(float(concordance), 4)})"


def plot_roc_curves(roc: pd.DataFrame, out_path: str | Path, title: str = "ROC Curve (validation)") -> Path:
    """
    One FPR vs. sensitivity line per model.

    ``roc`` is a combined ROC table (``Model``, ``FPR``, ``Sensitivity``, ``C``).
    Returns the written PNG path.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    plt.figure(figsize=(8, 6))
    for model, grp in roc.groupby("Model", sort=False):
        grp = grp.sort_values("FPR", kind="stable")
        c = grp["C"].iloc[0] if "C" in grp.columns else float("nan")
        plt.plot(grp["FPR"], grp["Sensitivity"], label=legend_label(model, c))
    plt.plot([0, 1], [0, 1], linestyle="--", color="grey", label="Random")
    plt.xlabel("False Positive Rate")
    plt.ylabel("True Positive Rate")
    plt.title(title)
    plt.legend(loc="lower right")
    plt.tight_layout()
    plt.savefig(out, format="png", bbox_inches="tight")
    plt.close()
    return out
