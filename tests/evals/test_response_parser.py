"""
Tests for verdict response parsing.
"""

import logging

import pytest

from evals.response_parser import (
    UnparseableVerdictResponse,
    extract_json_object,
    parse_verdict_response,
)
from evals.verdicts import Verdict


class TestExtractJsonObject:
    """Tests for JSON recovery from model text."""

    def test_plain_json(self):
        assert extract_json_object('{"verdict": "SUPPORTED"}') == {"verdict": "SUPPORTED"}

    def test_fenced_block(self):
        content = 'Here is my analysis:\n```json\n{"verdict": "NOT SUPPORTED", "confidence": 10}\n```'

        assert extract_json_object(content)["confidence"] == 10

    def test_object_surrounded_by_prose(self):
        content = 'Analysis follows {"verdict": "SUPPORTED"} hope this helps'

        assert extract_json_object(content) == {"verdict": "SUPPORTED"}

    def test_no_object(self):
        with pytest.raises(UnparseableVerdictResponse):
            extract_json_object("no json at all")

    def test_array_rejected(self):
        with pytest.raises(UnparseableVerdictResponse):
            extract_json_object("[1, 2]")


class TestParseVerdictResponse:
    """Tests for full response parsing."""

    def test_well_formed_response(self):
        content = '{"confidence": 95, "verdict": "SUPPORTED", "comments": "Source states it"}'

        parsed = parse_verdict_response(content)

        assert parsed.verdict == Verdict.SUPPORTED
        assert parsed.confidence == 95.0
        assert parsed.comments == "Source states it"
        assert parsed.parse_error is None
        assert parsed.raw_response == content

    def test_partially_supported(self):
        parsed = parse_verdict_response('```\n{"verdict": "PARTIALLY SUPPORTED", "confidence": 60}\n```')

        assert parsed.verdict == Verdict.PARTIALLY_SUPPORTED

    def test_invalid_confidence_becomes_zero(self):
        parsed = parse_verdict_response('{"verdict": "SUPPORTED", "confidence": "very high"}')

        assert parsed.verdict == Verdict.SUPPORTED
        assert parsed.confidence == 0.0

    def test_keyword_fallback(self):
        """Broken JSON with a verdict keyword still yields a verdict."""
        parsed = parse_verdict_response('verdict: NOT SUPPORTED, confidence: {broken')

        assert parsed.verdict == Verdict.NOT_SUPPORTED
        assert parsed.confidence == 0.0
        assert parsed.parse_error is not None

    def test_keyword_without_canonical_verdict_is_error(self, caplog):
        """Prose mentioning a verdict does not count as one."""
        with caplog.at_level(logging.WARNING, logger="evals.response_parser"):
            parsed = parse_verdict_response("Honestly the verdict is unclear from this source.")

        assert parsed.verdict == Verdict.ERROR
        assert parsed.parse_error is not None
        assert any(getattr(r, "extra_fields", {}).get("event") == "verdict.unparseable" for r in caplog.records)

    def test_unrecognizable_is_error(self):
        parsed = parse_verdict_response("I cannot help with that.")

        assert parsed.verdict == Verdict.ERROR
        assert parsed.parse_error is not None

    def test_empty_response_is_error(self):
        assert parse_verdict_response(None).verdict == Verdict.ERROR
        assert parse_verdict_response("").verdict == Verdict.ERROR

    def test_missing_verdict_field_is_unknown(self):
        parsed = parse_verdict_response('{"confidence": 50}')

        assert parsed.verdict == Verdict.UNKNOWN
