"""
Tests for the Verdict Normalizer - rule table and canonical categories.
"""

import pytest

from evals.verdicts import (
    CANONICAL_VERDICTS,
    VERDICT_RULES,
    Verdict,
    is_canonical,
    is_positive,
    normalize_verdict,
)


class TestNormalizeVerdict:
    """Tests for free-text label normalization."""

    @pytest.mark.parametrize("label", [
        "NOT_SUPPORTED",
        "not supported due to X",
        "Not Supported",
        "  not supported  ",
    ])
    def test_not_supported_variants(self, label):
        assert normalize_verdict(label) == Verdict.NOT_SUPPORTED

    @pytest.mark.parametrize("label", ["", None])
    def test_empty_is_unknown(self, label):
        assert normalize_verdict(label) == Verdict.UNKNOWN

    def test_not_supported_wins_over_supported(self):
        """The generic "supported" rule must not match first."""
        assert normalize_verdict("NOT SUPPORTED") == Verdict.NOT_SUPPORTED

    def test_partially(self):
        assert normalize_verdict("PARTIALLY SUPPORTED") == Verdict.PARTIALLY_SUPPORTED
        assert normalize_verdict("Partially supported - the date differs") == Verdict.PARTIALLY_SUPPORTED

    def test_supported(self):
        assert normalize_verdict("SUPPORTED") == Verdict.SUPPORTED

    def test_source_unavailable(self):
        assert normalize_verdict("SOURCE UNAVAILABLE") == Verdict.SOURCE_UNAVAILABLE

    def test_error(self):
        assert normalize_verdict("ERROR") == Verdict.ERROR

    def test_unrecognized_is_unknown(self):
        assert normalize_verdict("maybe?") == Verdict.UNKNOWN

    def test_verdict_passes_through(self):
        assert normalize_verdict(Verdict.SUPPORTED) is Verdict.SUPPORTED

    def test_normalization_is_idempotent(self):
        for verdict in Verdict:
            assert normalize_verdict(verdict.value) == verdict

    def test_custom_rules(self):
        """The rule table can be swapped without touching the normalizer."""
        rules = [(("yes",), Verdict.SUPPORTED), (("no",), Verdict.NOT_SUPPORTED)]

        assert normalize_verdict("Yes, clearly", rules=rules) == Verdict.SUPPORTED
        assert normalize_verdict("supported", rules=rules) == Verdict.UNKNOWN


class TestCategories:
    """Tests for category helpers."""

    def test_canonical_order(self):
        assert [v.value for v in CANONICAL_VERDICTS] == [
            "Supported",
            "Partially supported",
            "Not supported",
            "Source unavailable",
        ]

    def test_sentinels_not_canonical(self):
        assert not is_canonical(Verdict.ERROR)
        assert not is_canonical(Verdict.UNKNOWN)
        assert is_canonical(Verdict.SOURCE_UNAVAILABLE)

    def test_positive_verdicts(self):
        assert is_positive(Verdict.SUPPORTED)
        assert is_positive(Verdict.PARTIALLY_SUPPORTED)
        assert not is_positive(Verdict.NOT_SUPPORTED)
        assert not is_positive(Verdict.SOURCE_UNAVAILABLE)

    def test_rule_order_starts_with_negation(self):
        assert VERDICT_RULES[0][1] == Verdict.NOT_SUPPORTED
