"""
Metrics report - human-readable summary of VerdictMetrics.
"""

from typing import Optional

from .scoring import VerdictMetrics
from .verdicts import CANONICAL_VERDICTS


SHORT_NAMES = {
    "Supported": "Supported",
    "Partially supported": "Partial",
    "Not supported": "Not Supported",
    "Source unavailable": "Unavailable",
}


def format_percent(value: float) -> str:
    """Format a 0-1 ratio as a percentage with one decimal."""
    return f"{value * 100:.1f}%"


def generate_metrics_report(metrics: VerdictMetrics, title: Optional[str] = None) -> str:
    """
    Generate a human-readable metrics report.

    Args:
        metrics: VerdictMetrics to report on
        title: Optional heading (e.g. provider and model)

    Returns:
        Formatted report string
    """
    lines = [
        "=" * 60,
        title or "VERDICT METRICS REPORT",
        "=" * 60,
        "",
        f"Pairs: {metrics.total} (valid: {metrics.valid}, errors: {metrics.errors})",
        "",
        "-" * 40,
        "ACCURACY",
        "-" * 40,
        f"Exact match: {metrics.exact_matches}/{metrics.valid} ({format_percent(metrics.exact_accuracy)})",
        f"Lenient (includes partial): {metrics.lenient_matches}/{metrics.valid} ({format_percent(metrics.lenient_accuracy)})",
        f"Binary (support vs not): {metrics.binary_correct}/{metrics.valid} ({format_percent(metrics.binary_accuracy)})",
        "",
        "-" * 40,
        "LATENCY",
        "-" * 40,
        f"Average: {metrics.latency.avg:.0f}ms",
        f"Range: {metrics.latency.min:.0f}ms - {metrics.latency.max:.0f}ms",
        "",
        "-" * 40,
        "CONFIDENCE CALIBRATION",
        "-" * 40,
        f"Average confidence: {metrics.confidence.avg:.1f}",
        f"When correct: {metrics.confidence.avg_when_correct:.1f}",
        f"When wrong: {metrics.confidence.avg_when_wrong:.1f}",
        f"Calibration gap: {metrics.confidence.calibration:.1f} (higher = better)",
        "",
        "-" * 40,
        "CONFUSION MATRIX (rows = ground truth)",
        "-" * 40,
    ]

    header = " " * 16 + "".join(f"{SHORT_NAMES[v.value]:>15}" for v in CANONICAL_VERDICTS)
    lines.append(header)
    for truth in CANONICAL_VERDICTS:
        row = f"{SHORT_NAMES[truth.value]:>15} " + "".join(
            f"{metrics.confusion_matrix.get(truth, predicted):>15d}"
            for predicted in CANONICAL_VERDICTS
        )
        lines.append(row)

    lines.append("")
    lines.append("=" * 60)

    return "\n".join(lines)
