"""
Errors raised by the model comparison workflow.
"""

from __future__ import annotations

from typing import Iterable, Optional


class MetadataError(Exception):
    """Raised when the source table's column metadata cannot support a target/input split."""
    pass


class CASActionError(Exception):
    """Raised when a CAS action finishes with an error severity."""

    def __init__(self, action: str, status: Optional[str] = None, severity: Optional[int] = None):
        self.action = action
        self.status = status
        self.severity = severity
        msg = f"CAS action {action} failed"
        if status:
            msg += f": {status}"
        if severity is not None:
            msg += f" (severity={severity})"
        super().__init__(msg)


class MissingCutoffError(Exception):
    """Raised when one or more models have no ROC row at the comparison cutoff."""

    def __init__(self, models: Iterable[str], cutoff: float):
        self.models = list(models)
        self.cutoff = cutoff
        super().__init__(
            f"No ROC row at cutoff {cutoff} for model(s): {', '.join(self.models)}"
        )
