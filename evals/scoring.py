"""
Scoring Engine - Accuracy, confusion and calibration for verdict pairs.

Compares predicted verdicts against ground truth under three
equivalence relations:
- Exact: normalized verdicts are equal
- Lenient: exact, or Supported <-> Partially supported in either direction
- Binary: Supported/Partially supported vs everything else

Pairs whose prediction normalizes to Error or Unknown (or that carry a
call error) count toward totals and errors but are excluded from every
accuracy denominator, the confusion matrix and confidence statistics.
Latency statistics use every pair with a positive latency.

The engine is a pure function of the pair collection.
"""

import math
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.logging import get_logger

from .verdicts import (
    CANONICAL_VERDICTS,
    Verdict,
    is_positive,
    normalize_verdict,
)


logger = get_logger(__name__)

CONFIDENCE_MIN = 0.0
CONFIDENCE_MAX = 100.0


class MatchKind(str, Enum):
    """Per-pair correctness classification."""
    EXACT = "exact"
    PARTIAL = "partial"
    WRONG = "wrong"


def coerce_confidence(value: Any) -> float:
    """
    Coerce a model-reported confidence to a float in [0, 100].

    Missing values become 0. Non-numeric or out-of-range values also
    become 0, with a warning; they never fail the pair.
    """
    if value is None or value == "":
        return 0.0

    if isinstance(value, bool):
        logger.confidence_invalid(value)
        return 0.0

    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.confidence_invalid(value)
        return 0.0

    if math.isnan(number) or not CONFIDENCE_MIN <= number <= CONFIDENCE_MAX:
        logger.confidence_invalid(value)
        return 0.0

    return number


def classify_pair(predicted: Verdict, ground_truth: Verdict) -> MatchKind:
    """Classify a (predicted, ground truth) pair as exact, partial or wrong."""
    predicted = normalize_verdict(predicted)
    ground_truth = normalize_verdict(ground_truth)

    if predicted == ground_truth:
        return MatchKind.EXACT

    if {predicted, ground_truth} == {Verdict.SUPPORTED, Verdict.PARTIALLY_SUPPORTED}:
        return MatchKind.PARTIAL

    return MatchKind.WRONG


def is_binary_correct(predicted: Verdict, ground_truth: Verdict) -> bool:
    """True when both verdicts fall on the same side of support/no support."""
    return is_positive(normalize_verdict(predicted)) == is_positive(normalize_verdict(ground_truth))


class ScoredPair(BaseModel):
    """One predicted verdict scored against its ground truth."""

    model_config = ConfigDict(frozen=True)

    predicted: Verdict
    ground_truth: Verdict
    confidence: float = 0.0
    latency_ms: float = 0.0
    error: Optional[str] = None

    @field_validator("predicted", "ground_truth", mode="before")
    @classmethod
    def normalize_labels(cls, v: Any) -> Verdict:
        """Accept free-text labels."""
        return normalize_verdict(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: Any) -> float:
        return coerce_confidence(v)

    @field_validator("latency_ms", mode="before")
    @classmethod
    def validate_latency(cls, v: Any) -> float:
        try:
            return float(v) if v is not None else 0.0
        except (TypeError, ValueError):
            return 0.0

    @property
    def is_valid(self) -> bool:
        """Valid pairs count toward accuracy."""
        return self.error is None and self.predicted not in (Verdict.ERROR, Verdict.UNKNOWN)

    @property
    def match(self) -> MatchKind:
        return classify_pair(self.predicted, self.ground_truth)


def _empty_matrix() -> Dict[str, Dict[str, int]]:
    return {
        truth.value: {predicted.value: 0 for predicted in CANONICAL_VERDICTS}
        for truth in CANONICAL_VERDICTS
    }


class ConfusionMatrix(BaseModel):
    """4x4 counts, rows = ground truth, columns = predicted."""

    counts: Dict[str, Dict[str, int]] = Field(default_factory=_empty_matrix)

    def add(self, ground_truth: Verdict, predicted: Verdict) -> None:
        """Count a pair; pairs outside the canonical categories are ignored."""
        row = self.counts.get(ground_truth.value)
        if row is not None and predicted.value in row:
            row[predicted.value] += 1

    def get(self, ground_truth: Verdict, predicted: Verdict) -> int:
        return self.counts.get(ground_truth.value, {}).get(predicted.value, 0)

    @property
    def total(self) -> int:
        return sum(sum(row.values()) for row in self.counts.values())


class LatencyStats(BaseModel):
    """Latency over pairs with a positive recorded latency."""

    count: int = 0
    avg: float = 0.0
    min: float = 0.0
    max: float = 0.0


class ConfidenceStats(BaseModel):
    """Confidence statistics over valid pairs with confidence > 0."""

    avg: float = 0.0
    avg_when_correct: float = 0.0
    avg_when_wrong: float = 0.0
    calibration: float = 0.0  # Higher = better; signed, not bounded


class VerdictMetrics(BaseModel):
    """Aggregate metrics for a collection of scored pairs."""

    total: int = 0
    valid: int = 0
    errors: int = 0

    exact_matches: int = 0
    partial_matches: int = 0
    binary_correct: int = 0

    exact_accuracy: float = 0.0
    lenient_accuracy: float = 0.0
    binary_accuracy: float = 0.0

    confusion_matrix: ConfusionMatrix = Field(default_factory=ConfusionMatrix)
    latency: LatencyStats = Field(default_factory=LatencyStats)
    confidence: ConfidenceStats = Field(default_factory=ConfidenceStats)

    @property
    def lenient_matches(self) -> int:
        return self.exact_matches + self.partial_matches


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class ScoringEngine:
    """Computes VerdictMetrics from scored pairs. Holds no state between calls."""

    def score(self, pairs: Iterable[ScoredPair]) -> VerdictMetrics:
        """
        Score a collection of pairs.

        Args:
            pairs: Scored pairs (the full collection)

        Returns:
            VerdictMetrics; all zeros for an empty collection
        """
        pairs = list(pairs)
        valid_pairs = [p for p in pairs if p.is_valid]

        metrics = VerdictMetrics(
            total=len(pairs),
            valid=len(valid_pairs),
            errors=len(pairs) - len(valid_pairs),
        )

        correct_confidences: List[float] = []
        wrong_confidences: List[float] = []

        for pair in valid_pairs:
            match = pair.match
            if match == MatchKind.EXACT:
                metrics.exact_matches += 1
            elif match == MatchKind.PARTIAL:
                metrics.partial_matches += 1

            if is_binary_correct(pair.predicted, pair.ground_truth):
                metrics.binary_correct += 1

            metrics.confusion_matrix.add(pair.ground_truth, pair.predicted)

            if pair.confidence > 0:
                if match == MatchKind.EXACT:
                    correct_confidences.append(pair.confidence)
                else:
                    wrong_confidences.append(pair.confidence)

        if metrics.valid > 0:
            metrics.exact_accuracy = metrics.exact_matches / metrics.valid
            metrics.lenient_accuracy = metrics.lenient_matches / metrics.valid
            metrics.binary_accuracy = metrics.binary_correct / metrics.valid

        avg_correct = _mean(correct_confidences)
        avg_wrong = _mean(wrong_confidences)
        metrics.confidence = ConfidenceStats(
            avg=_mean(correct_confidences + wrong_confidences),
            avg_when_correct=avg_correct,
            avg_when_wrong=avg_wrong,
            calibration=avg_correct - avg_wrong,
        )

        # Errored calls still contribute latency when recorded
        latencies = [p.latency_ms for p in pairs if p.latency_ms > 0]
        if latencies:
            metrics.latency = LatencyStats(
                count=len(latencies),
                avg=_mean(latencies),
                min=min(latencies),
                max=max(latencies),
            )

        return metrics


def score_pairs(pairs: Iterable[ScoredPair]) -> VerdictMetrics:
    """
    Convenience function to score pairs.

    Args:
        pairs: Scored pairs

    Returns:
        VerdictMetrics
    """
    return ScoringEngine().score(pairs)
