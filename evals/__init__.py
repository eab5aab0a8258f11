"""
Evals Module - Verdict normalization and scoring.

Compares model verdicts against ground truth labels.

Components:
- normalize_verdict: Free-text label -> canonical Verdict (rule table)
- ScoringEngine: Exact/lenient/binary accuracy, confusion matrix,
  confidence calibration and latency statistics
- parse_verdict_response: Raw model text -> verdict, confidence, comments
- generate_metrics_report: Console report

Usage:
    from evals import ScoredPair, score_pairs
    metrics = score_pairs([ScoredPair(predicted="SUPPORTED", ground_truth="Supported")])
"""

from .verdicts import (
    Verdict,
    CANONICAL_VERDICTS,
    VERDICT_RULES,
    normalize_verdict,
    is_canonical,
    is_positive,
)
from .scoring import (
    MatchKind,
    ScoredPair,
    ScoringEngine,
    VerdictMetrics,
    ConfusionMatrix,
    classify_pair,
    coerce_confidence,
    is_binary_correct,
    score_pairs,
)
from .response_parser import ParsedVerdict, UnparseableVerdictResponse, parse_verdict_response
from .report import generate_metrics_report

__all__ = [
    "Verdict",
    "CANONICAL_VERDICTS",
    "VERDICT_RULES",
    "normalize_verdict",
    "is_canonical",
    "is_positive",
    "MatchKind",
    "ScoredPair",
    "ScoringEngine",
    "VerdictMetrics",
    "ConfusionMatrix",
    "classify_pair",
    "coerce_confidence",
    "is_binary_correct",
    "score_pairs",
    "ParsedVerdict",
    "UnparseableVerdictResponse",
    "parse_verdict_response",
    "generate_metrics_report",
]
