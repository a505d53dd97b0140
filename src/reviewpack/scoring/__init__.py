"""Findings aggregation and scoring."""

from .aggregator import FindingsAggregator
from .fingerprint import compute_fingerprint, normalize_description
from .scorer import checklist_score, classify_risk, compute_score_report, count_by_severity

__all__ = [
    "FindingsAggregator",
    "checklist_score",
    "classify_risk",
    "compute_fingerprint",
    "compute_score_report",
    "count_by_severity",
    "normalize_description",
]
