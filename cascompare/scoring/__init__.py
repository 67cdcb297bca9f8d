"""
Scoring package: applies trained CAS models to the full source table.

Modules:
    score.py - one scored table per model, one output row per input row.
"""
__all__ = [
    "score",
]
