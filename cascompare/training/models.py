"""Remote model kinds and their CAS actions.

Each :class:`ModelKind` member fixes, up front, which action set trains and
scores it, whether the train action takes ``varImp`` and whether it consumes the
imputed feature sets. Iteration order of the enum is the comparison order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List


@dataclass(frozen=True)
class ModelSpec:
    short_name: str
    display_name: str
    action_set: str
    train_action: str
    score_action: str
    var_importance: bool = False
    uses_imputed: bool = False

    @property
    def model_table(self) -> str:
        return f"{self.short_name}_model"

    @property
    def scored_table(self) -> str:
        return f"{self.short_name}_scored"


class ModelKind(Enum):
    DECISION_TREE = ModelSpec(
        short_name="dt",
        display_name="Decision Tree",
        action_set="decisionTree",
        train_action="decisionTree.dtreeTrain",
        score_action="decisionTree.dtreeScore",
    )
    RANDOM_FOREST = ModelSpec(
        short_name="rf",
        display_name="Random Forest",
        action_set="decisionTree",
        train_action="decisionTree.forestTrain",
        score_action="decisionTree.forestScore",
        var_importance=True,
    )
    GRADIENT_BOOSTING = ModelSpec(
        short_name="gbt",
        display_name="Gradient Boosting",
        action_set="decisionTree",
        train_action="decisionTree.gbtreeTrain",
        score_action="decisionTree.gbtreeScore",
        var_importance=True,
    )
    NEURAL_NETWORK = ModelSpec(
        short_name="nn",
        display_name="Neural Network",
        action_set="neuralNet",
        train_action="neuralNet.annTrain",
        score_action="neuralNet.annScore",
        uses_imputed=True,
    )

    @property
    def spec(self) -> ModelSpec:
        return self.value

    @property
    def short_name(self) -> str:
        return self.value.short_name

    @property
    def display_name(self) -> str:
        return self.value.display_name


def required_action_sets() -> List[str]:
    """Distinct action sets needed by all kinds, plus percentile for assessment."""
    sets: List[str] = []
    for kind in ModelKind:
        if kind.spec.action_set not in sets:
            sets.append(kind.spec.action_set)
    sets.append("percentile")
    return sets


# Local challenger identity
CHALLENGER_SHORT_NAME = "xgb"
CHALLENGER_DISPLAY_NAME = "Local XGBoost"
