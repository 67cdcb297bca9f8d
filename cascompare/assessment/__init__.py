"""
Assessment package: ROC statistics, misclassification ranking and ROC chart.

Modules:
    aggregate.py - percentile.assess per scored table, combined ROC, ranking.
    plots.py     - ROC comparison chart (matplotlib).
"""
__all__ = [
    "aggregate",
    "plots",
]
