"""
Verdict Normalizer - Maps free-text verdict labels to canonical verdicts.

Labels come from ground truth datasets and from noisy model output
("NOT_SUPPORTED", "Partially supported - the date differs", ...).
Rules are matched as case-insensitive substrings, in priority order,
first match wins.

"not supported" must precede the generic "supported" rule because the
latter is a substring of the former.
"""

from enum import Enum
from typing import List, Optional, Tuple


class Verdict(str, Enum):
    """Canonical verdict categories plus the two sentinels."""
    SUPPORTED = "Supported"
    PARTIALLY_SUPPORTED = "Partially supported"
    NOT_SUPPORTED = "Not supported"
    SOURCE_UNAVAILABLE = "Source unavailable"
    ERROR = "Error"
    UNKNOWN = "Unknown"


# Order used for confusion matrix rows and columns
CANONICAL_VERDICTS: Tuple[Verdict, ...] = (
    Verdict.SUPPORTED,
    Verdict.PARTIALLY_SUPPORTED,
    Verdict.NOT_SUPPORTED,
    Verdict.SOURCE_UNAVAILABLE,
)

POSITIVE_VERDICTS = frozenset({Verdict.SUPPORTED, Verdict.PARTIALLY_SUPPORTED})

# (substrings, verdict) in priority order
VERDICT_RULES: List[Tuple[Tuple[str, ...], Verdict]] = [
    (("not supported", "not_supported"), Verdict.NOT_SUPPORTED),
    (("partially",), Verdict.PARTIALLY_SUPPORTED),
    (("unavailable",), Verdict.SOURCE_UNAVAILABLE),
    (("supported",), Verdict.SUPPORTED),
    (("error",), Verdict.ERROR),
]


def normalize_verdict(
    raw_label: Optional[str],
    rules: Optional[List[Tuple[Tuple[str, ...], Verdict]]] = None,
) -> Verdict:
    """
    Normalize a free-text label to a Verdict.

    Args:
        raw_label: Label text; None or empty yields Verdict.UNKNOWN
        rules: Override for VERDICT_RULES

    Returns:
        The verdict of the first matching rule, else Verdict.UNKNOWN
    """
    if isinstance(raw_label, Verdict):
        return raw_label
    if not raw_label:
        return Verdict.UNKNOWN

    label = str(raw_label).lower().strip()
    for patterns, verdict in rules or VERDICT_RULES:
        if any(pattern in label for pattern in patterns):
            return verdict

    return Verdict.UNKNOWN


def is_canonical(verdict: Verdict) -> bool:
    """True for the four canonical categories."""
    return verdict in CANONICAL_VERDICTS


def is_positive(verdict: Verdict) -> bool:
    """True when the verdict counts as support in binary scoring."""
    return verdict in POSITIVE_VERDICTS
