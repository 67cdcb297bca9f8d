"""Tests for the ROC comparison chart."""

from pathlib import Path

from cascompare.assessment.aggregate import combine_roc, normalize_roc
from cascompare.assessment.plots import legend_label, plot_roc_curves
from helpers import make_roc


class TestPlotRocCurves:
    """Tests for plot_roc_curves."""

    def test_writes_png(self, tmp_path: Path) -> None:
        """One chart file is written for several models."""
        roc = combine_roc({
            "Decision Tree": normalize_roc(make_roc(0.9, c=0.81234)),
            "Neural Network": normalize_roc(make_roc(0.85, c=0.7)),
        })
        out = plot_roc_curves(roc, tmp_path / "charts" / "roc.png")
        assert out.exists()
        assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

    def test_legend_label(self) -> None:
        """Legend combines model name and rounded concordance."""
        assert legend_label("Random Forest", 0.876543) == "Random Forest (C=0.8765)"
