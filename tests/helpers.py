"""Test doubles for the CAS connection and small table builders."""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from unittest.mock import MagicMock

import pandas as pd


class FakeResults(dict):
    """Stand-in for swat.CASResults: a dict of result tables plus severity/status."""

    def __init__(self, tables: Optional[Dict[str, Any]] = None, severity: int = 0, status: Optional[str] = None):
        super().__init__(tables or {})
        self.severity = severity
        self.status = status


class FakeCAS:
    """Records every action call and answers from a per-action response table."""

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        frame: Optional[pd.DataFrame] = None,
    ):
        self.responses = responses or {}
        self.frame = frame
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.terminated = False

    def retrieve(self, action: str, **params: Any) -> FakeResults:
        self.calls.append((action, params))
        resp = self.responses.get(action, FakeResults())
        if callable(resp):
            resp = resp(**params)
        return resp

    def terminate(self) -> None:
        self.terminated = True

    def CASTable(self, name: str, caslib: Optional[str] = None) -> MagicMock:
        tbl = MagicMock()
        tbl.to_frame.return_value = self.frame
        return tbl

    def actions(self) -> List[str]:
        return [a for a, _ in self.calls]

    def params_for(self, action: str) -> List[Dict[str, Any]]:
        return [p for a, p in self.calls if a == action]


def make_columninfo(columns: Sequence[Tuple[str, str]]) -> pd.DataFrame:
    return pd.DataFrame({"Column": [c for c, _ in columns], "Type": [t for _, t in columns]})


def make_roc(accuracy_at_half: float, cutoffs: Sequence[float] = (0.0, 0.25, 0.5, 0.75), c: float = 0.8) -> pd.DataFrame:
    """ROC table with the given accuracy at cutoff 0.5 (CAS naming: ACC)."""
    rows = []
    for cut in cutoffs:
        acc = accuracy_at_half if cut == 0.5 else 0.5
        rows.append(
            {
                "CutOff": cut,
                "TP": 10, "FP": 5, "FN": 3, "TN": 82,
                "ACC": acc,
                "FPR": 1.0 - cut,
                "Sensitivity": 1.0 - cut / 2,
                "C": c,
            }
        )
    return pd.DataFrame(rows)


def record_count_response(n: int) -> Callable[..., FakeResults]:
    return lambda **_: FakeResults({"RecordCount": pd.DataFrame({"N": [n]})})
