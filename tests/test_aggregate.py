"""Tests for ROC aggregation and misclassification ranking."""

import pandas as pd
import pytest

from cascompare.assessment.aggregate import (
    assess_model,
    best_remote_model,
    combine_roc,
    compare_at_cutoff,
    normalize_roc,
    rank_models,
)
from cascompare.common.exceptions import CASActionError, MissingCutoffError
from helpers import FakeCAS, FakeResults, make_roc


def _rocs(accuracies):
    return {name: normalize_roc(make_roc(acc)) for name, acc in accuracies.items()}


class TestCombineRoc:
    """Tests for combine_roc."""

    def test_labels_and_order(self) -> None:
        """Rows are tagged and stacked in model order, row order kept."""
        combined = combine_roc(_rocs({"A": 0.9, "B": 0.8}))
        assert combined["Model"].tolist() == ["A"] * 4 + ["B"] * 4
        assert combined["CutOff"].tolist() == [0.0, 0.25, 0.5, 0.75] * 2
        assert combined.index.tolist() == list(range(8))

    def test_empty(self) -> None:
        """No models gives an empty table with a Model column."""
        assert "Model" in combine_roc({}).columns


class TestCompareAtCutoff:
    """Tests for compare_at_cutoff."""

    def test_four_model_scenario(self) -> None:
        """Models are ordered by ascending misclassification."""
        combined = combine_roc(
            _rocs({"m091": 0.91, "m088": 0.88, "m093": 0.93, "m085": 0.85})
        )
        out = compare_at_cutoff(combined, cutoff=0.5)
        assert out["Model"].tolist() == ["m093", "m091", "m088", "m085"]
        assert out["Misclassification"].tolist() == pytest.approx([0.07, 0.09, 0.12, 0.15])
        assert out.index.tolist() == [0, 1, 2, 3]

    def test_misclassification_is_one_minus_accuracy(self) -> None:
        """Misclassification equals 1 - Accuracy exactly on every row."""
        out = compare_at_cutoff(combine_roc(_rocs({"a": 0.913, "b": 0.7771, "c": 0.5})))
        assert (out["Misclassification"] == 1 - out["Accuracy"]).all()

    def test_one_row_per_model_at_cutoff(self) -> None:
        """Only the 0.5 cutoff rows are kept."""
        out = compare_at_cutoff(combine_roc(_rocs({"a": 0.9, "b": 0.8})))
        assert len(out) == 2
        assert (out["CutOff"] == 0.5).all()

    def test_stable_ties(self) -> None:
        """Equal misclassification keeps the input model order."""
        combined = combine_roc(_rocs({"first": 0.9, "better": 0.95, "second": 0.9, "third": 0.9}))
        out = compare_at_cutoff(combined)
        assert out["Model"].tolist() == ["better", "first", "second", "third"]
        assert out["Misclassification"].is_monotonic_increasing

    def test_missing_cutoff_raises(self) -> None:
        """A model with no 0.5 row is rejected, not silently dropped."""
        rocs = _rocs({"ok": 0.9})
        rocs["no_half"] = normalize_roc(make_roc(0.9, cutoffs=(0.0, 0.25, 0.75)))
        with pytest.raises(MissingCutoffError) as exc:
            compare_at_cutoff(combine_roc(rocs))
        assert exc.value.models == ["no_half"]
        assert exc.value.cutoff == 0.5

    def test_near_cutoff_within_tolerance(self) -> None:
        """A cutoff off by float noise is still matched."""
        roc = normalize_roc(make_roc(0.9))
        roc.loc[roc["CutOff"] == 0.5, "CutOff"] = 0.5 + 1e-12
        out = compare_at_cutoff(combine_roc({"noisy": roc}), tolerance=1e-9)
        assert out["Model"].tolist() == ["noisy"]

    def test_zero_tolerance_is_exact(self) -> None:
        """Tolerance 0 requires the literal cutoff value."""
        roc = normalize_roc(make_roc(0.9))
        roc.loc[roc["CutOff"] == 0.5, "CutOff"] = 0.5 + 1e-12
        with pytest.raises(MissingCutoffError):
            compare_at_cutoff(combine_roc({"noisy": roc}), tolerance=0.0)

    def test_closest_row_wins(self) -> None:
        """With two rows in tolerance the nearest one is picked."""
        roc = pd.DataFrame(
            {"CutOff": [0.49, 0.5001, 0.51], "Accuracy": [0.70, 0.80, 0.90]}
        )
        out = compare_at_cutoff(combine_roc({"m": roc}), tolerance=0.02)
        assert out["Accuracy"].tolist() == [0.80]


class TestNormalizeRoc:
    """Tests for normalize_roc."""

    def test_renames_acc(self) -> None:
        """CAS ACC becomes Accuracy."""
        out = normalize_roc(make_roc(0.9))
        assert "Accuracy" in out.columns
        assert "ACC" not in out.columns

    def test_requires_cutoff(self) -> None:
        """A table without CutOff cannot be compared."""
        with pytest.raises(ValueError, match="CutOff"):
            normalize_roc(pd.DataFrame({"ACC": [0.9]}))


class TestAssessModel:
    """Tests for the percentile.assess call."""

    def test_params_and_result(self) -> None:
        """Validation partition, event probability and non-event pVar are passed."""
        conn = FakeCAS({"percentile.assess": FakeResults({"ROCInfo": make_roc(0.9)})})
        roc = assess_model(conn, "dt_scored", target="BAD", partition="_PartInd_", caslib="casuser")

        params = conn.params_for("percentile.assess")[0]
        assert params["table"] == {"name": "dt_scored", "caslib": "casuser", "where": "_PartInd_ = 1"}
        assert params["inputs"] == "P_BAD1"
        assert params["response"] == "BAD"
        assert params["event"] == "1"
        assert params["pVar"] == ["P_BAD0"]
        assert params["pEvent"] == ["0"]
        assert "Accuracy" in roc.columns

    def test_failure_propagates(self) -> None:
        """An assess error surfaces as CASActionError."""
        conn = FakeCAS({"percentile.assess": FakeResults(severity=2, status="Table not found")})
        with pytest.raises(CASActionError, match="Table not found"):
            assess_model(conn, "dt_scored", target="BAD", partition="_PartInd_")


class TestRankModels:
    """Tests for the combined remote + local ranking."""

    def test_union_sorted(self) -> None:
        """Challenger rows are merged and the table re-sorted."""
        comparison = compare_at_cutoff(combine_roc(_rocs({"Decision Tree": 0.88, "Gradient Boosting": 0.93})))
        ranking = rank_models(
            comparison,
            [{"Model": "Local XGBoost", "Accuracy": 0.9, "Misclassification": 0.1}],
        )
        assert ranking["Model"].tolist() == ["Gradient Boosting", "Local XGBoost", "Decision Tree"]
        assert ranking["Engine"].tolist() == ["remote", "local", "remote"]
        assert ranking["Misclassification"].is_monotonic_increasing
        assert list(ranking.columns) == ["Model", "Engine", "Accuracy", "Misclassification"]

    def test_without_challenger(self) -> None:
        """Remote-only ranking works."""
        comparison = compare_at_cutoff(combine_roc(_rocs({"a": 0.8})))
        ranking = rank_models(comparison)
        assert ranking["Engine"].tolist() == ["remote"]

    def test_best_remote_skips_local(self) -> None:
        """The best remote model ignores a better local challenger."""
        ranking = pd.DataFrame(
            {
                "Model": ["Local XGBoost", "Random Forest"],
                "Engine": ["local", "remote"],
                "Accuracy": [0.95, 0.9],
                "Misclassification": [0.05, 0.1],
            }
        )
        assert best_remote_model(ranking) == "Random Forest"

    def test_best_remote_requires_remote(self) -> None:
        """A ranking without remote rows has no champion to persist."""
        ranking = pd.DataFrame(
            {"Model": ["x"], "Engine": ["local"], "Accuracy": [0.9], "Misclassification": [0.1]}
        )
        with pytest.raises(ValueError):
            best_remote_model(ranking)
