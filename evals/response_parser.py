"""
Verdict response parsing - turns raw model text into a scored verdict.

Models are asked for a JSON object with "confidence", "verdict" and
"comments", but often wrap it in a fenced code block or surround it
with prose. When no JSON object decodes, a "verdict: WORDS" keyword
match is tried and accepted only when it names a canonical verdict.
Anything else becomes Verdict.ERROR; it is counted against totals by
the scoring engine, never dropped.
"""

import json
import re
from typing import Any, Dict, Optional

from pydantic import BaseModel

from core.logging import get_logger

from .scoring import coerce_confidence
from .verdicts import Verdict, is_canonical, normalize_verdict


logger = get_logger(__name__)

FENCED_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
VERDICT_KEYWORD_PATTERN = re.compile(r"verdict[\"\s:]+([A-Z_ ]+)", re.IGNORECASE)


class UnparseableVerdictResponse(ValueError):
    """Raw model text has no JSON object and no verdict keyword."""


class ParsedVerdict(BaseModel):
    """Verdict, confidence and comments recovered from a model response."""

    verdict: Verdict
    confidence: float = 0.0
    comments: str = ""
    raw_response: str = ""
    parse_error: Optional[str] = None


def extract_json_object(content: str) -> Dict[str, Any]:
    """
    Decode the JSON object embedded in a model response.

    Raises:
        UnparseableVerdictResponse: no decodable JSON object
    """
    json_str = content

    fenced = FENCED_BLOCK_PATTERN.search(content)
    if fenced:
        json_str = fenced.group(1)

    obj = JSON_OBJECT_PATTERN.search(json_str)
    if obj:
        json_str = obj.group(0)

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise UnparseableVerdictResponse(f"Failed to parse JSON response: {e}") from e

    if not isinstance(data, dict):
        raise UnparseableVerdictResponse("Response JSON is not an object")

    return data


def parse_verdict_response(content: Optional[str]) -> ParsedVerdict:
    """
    Parse a raw model response.

    Args:
        content: Raw response text

    Returns:
        ParsedVerdict; verdict is Verdict.ERROR when nothing is recognizable
    """
    content = content or ""

    try:
        data = extract_json_object(content)
    except UnparseableVerdictResponse as e:
        keyword = VERDICT_KEYWORD_PATTERN.search(content)
        verdict = normalize_verdict(keyword.group(1)) if keyword else Verdict.UNKNOWN
        if is_canonical(verdict):
            return ParsedVerdict(
                verdict=verdict,
                comments="Failed to parse JSON response",
                raw_response=content,
                parse_error=str(e),
            )

        logger.verdict_unparseable(str(e), content[:200])
        return ParsedVerdict(
            verdict=Verdict.ERROR,
            comments="Failed to parse JSON response",
            raw_response=content,
            parse_error=str(e),
        )

    comments = data.get("comments") or ""
    return ParsedVerdict(
        verdict=normalize_verdict(data.get("verdict") or ""),
        confidence=coerce_confidence(data.get("confidence")),
        comments=comments if isinstance(comments, str) else json.dumps(comments),
        raw_response=content,
    )
