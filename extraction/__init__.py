"""
Extraction Module - Claim text attribution for citation markers.

Finds the span of prose each inline [N] marker supports, scoped to the
marker's enclosing block, and resolves markers to their source URLs.

Components:
- DocumentTree / SoupDocument: traversal interface and BeautifulSoup adapter
- ClaimExtractor: boundary search and block fallback
- extract_reference_url: marker -> reference entry -> source URL
"""

from .document import DocumentTree, SoupDocument, MARKER_LABEL_PATTERN
from .errors import (
    ClaimExtractionError,
    NoMatchingMarkerError,
    NoEnclosingBlockError,
    OccurrenceOutOfRangeError,
)
from .extractor import (
    ClaimExtractor,
    ClaimResult,
    ClaimStatus,
    ExtractorConfig,
    count_occurrences,
    extract_all_claims,
    extract_claim,
    normalize_claim_text,
)
from .references import extract_reference_url, extract_url_from_reference

__all__ = [
    "DocumentTree",
    "SoupDocument",
    "MARKER_LABEL_PATTERN",
    "ClaimExtractionError",
    "NoMatchingMarkerError",
    "NoEnclosingBlockError",
    "OccurrenceOutOfRangeError",
    "ClaimExtractor",
    "ClaimResult",
    "ClaimStatus",
    "ExtractorConfig",
    "count_occurrences",
    "extract_all_claims",
    "extract_claim",
    "normalize_claim_text",
    "extract_reference_url",
    "extract_url_from_reference",
]
