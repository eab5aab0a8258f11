"""
Claim Extractor - finds the text span a citation marker supports.

Given a document and a citation identity (index + occurrence), returns
the text between the nearest preceding claim boundary and the marker,
scoped to the marker's enclosing block.

Boundary rule: stacked markers with no text between them
("...claim.[3][4][5]") all cite the same claim, so the backward search
skips them until it finds a marker followed by real prose.

The algorithm is purely syntactic. It has no notion of sentences or
clauses, so a claim may start mid-sentence or span several sentences.
"""

import re
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from core.config import settings
from core.logging import get_logger

from .document import DocumentTree
from .errors import (
    ClaimExtractionError,
    NoEnclosingBlockError,
    NoMatchingMarkerError,
    OccurrenceOutOfRangeError,
)


logger = get_logger(__name__)

# Block-level containers a claim may not cross
DEFAULT_BLOCK_TAGS = ("p", "li", "td", "th", "div", "section")

# Marker labels left inside extracted text, e.g. "[12]"
MARKER_TEXT_PATTERN = re.compile(r"\[\d+\]")
WHITESPACE_PATTERN = re.compile(r"\s+")


class ClaimStatus(str, Enum):
    """How the claim text was obtained."""
    EXTRACTED = "extracted"
    BLOCK_FALLBACK = "block_fallback"
    EMPTY = "empty"


class ExtractorConfig(BaseModel):
    """Tunables for claim extraction."""

    min_claim_length: int = Field(
        default=10,
        ge=0,
        description="Claims shorter than this fall back to the whole block text"
    )
    block_tags: List[str] = Field(
        default_factory=lambda: list(DEFAULT_BLOCK_TAGS),
        description="Tag names treated as enclosing blocks"
    )
    strict_occurrence: bool = Field(
        default=False,
        description="Raise instead of falling back to the first marker on a bad occurrence"
    )

    @classmethod
    def from_settings(cls) -> "ExtractorConfig":
        """Build a config from application settings."""
        return cls(min_claim_length=settings.min_claim_length)


class ClaimResult(BaseModel):
    """Claim text attributed to one citation marker occurrence."""

    citation_index: int
    requested_occurrence: int
    occurrence: int
    total_occurrences: int
    claim_text: str
    block_text: str
    status: ClaimStatus

    @property
    def is_empty(self) -> bool:
        return self.status == ClaimStatus.EMPTY


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return WHITESPACE_PATTERN.sub(" ", text or "").strip()


def normalize_claim_text(text: str) -> str:
    """Strip [N] marker labels, collapse whitespace and trim."""
    return normalize_whitespace(MARKER_TEXT_PATTERN.sub("", text or ""))


class ClaimExtractor:
    """
    Extracts claim spans for citation markers.

    Stateless apart from its config; safe to reuse across documents.
    """

    def __init__(self, config: Optional[ExtractorConfig] = None):
        """
        Initialize the extractor.

        Args:
            config: Extraction tunables (defaults to ExtractorConfig())
        """
        self.config = config or ExtractorConfig()

    def find_markers(self, document: DocumentTree, citation_index: int) -> List[Any]:
        """All markers labelled [citation_index], in document order."""
        return [
            marker for marker in document.markers()
            if document.marker_label(marker) == citation_index
        ]

    def extract(
        self,
        document: DocumentTree,
        citation_index: int,
        occurrence: int = 1,
    ) -> ClaimResult:
        """
        Extract the claim for one occurrence of a citation.

        Args:
            document: Document containing the marker
            citation_index: Displayed citation number N of [N]
            occurrence: 1-based rank among markers sharing citation_index

        Returns:
            ClaimResult with claim text, block text and status

        Raises:
            NoMatchingMarkerError: citation_index is not in the document
            NoEnclosingBlockError: the marker is not inside a block
            OccurrenceOutOfRangeError: bad occurrence with strict_occurrence
        """
        try:
            markers = self.find_markers(document, citation_index)
            if not markers:
                raise NoMatchingMarkerError(citation_index, occurrence)
            return self._extract_marker(document, citation_index, occurrence, markers)
        except ClaimExtractionError as e:
            logger.extraction_failed(
                citation_index=citation_index,
                occurrence=occurrence,
                error_type=e.error_type,
                error=str(e),
            )
            raise

    def extract_all(self, document: DocumentTree, citation_index: int) -> List[ClaimResult]:
        """Extract claims for every occurrence of a citation, in order."""
        markers = self.find_markers(document, citation_index)
        if not markers:
            raise NoMatchingMarkerError(citation_index)

        return [
            self._extract_marker(document, citation_index, occurrence, markers)
            for occurrence in range(1, len(markers) + 1)
        ]

    def _select_marker(
        self,
        citation_index: int,
        occurrence: int,
        markers: List[Any],
    ) -> int:
        """Resolve the 1-based occurrence actually used."""
        if 1 <= occurrence <= len(markers):
            return occurrence

        if self.config.strict_occurrence:
            raise OccurrenceOutOfRangeError(citation_index, occurrence, len(markers))

        # Caller metadata disagrees with the document; use the first marker
        logger.occurrence_fallback(citation_index, occurrence, len(markers))
        return 1

    def _extract_marker(
        self,
        document: DocumentTree,
        citation_index: int,
        occurrence: int,
        markers: List[Any],
    ) -> ClaimResult:
        resolved = self._select_marker(citation_index, occurrence, markers)
        marker = markers[resolved - 1]

        block = document.enclosing_block(marker, self.config.block_tags)
        if block is None:
            raise NoEnclosingBlockError(citation_index, resolved)

        block_markers = document.markers_within(block)
        start = self._find_start_boundary(document, block, block_markers, marker)

        claim_text = normalize_claim_text(document.text_between(block, start, marker))
        block_content = document.text_content(block)
        status = ClaimStatus.EXTRACTED

        if not claim_text or len(claim_text) < self.config.min_claim_length:
            logger.claim_block_fallback(citation_index, resolved, len(claim_text))
            claim_text = normalize_claim_text(block_content)
            status = ClaimStatus.BLOCK_FALLBACK

        if not claim_text:
            logger.claim_empty(citation_index, resolved)
            status = ClaimStatus.EMPTY

        return ClaimResult(
            citation_index=citation_index,
            requested_occurrence=occurrence,
            occurrence=resolved,
            total_occurrences=len(markers),
            claim_text=claim_text,
            block_text=normalize_whitespace(block_content),
            status=status,
        )

    def _find_start_boundary(
        self,
        document: DocumentTree,
        block: Any,
        block_markers: List[Any],
        marker: Any,
    ) -> Optional[Any]:
        """
        Walk back from the target to the first marker followed by text.

        Each adjacent gap is tested on its own, not the whole span to the
        target. Returns None when the claim starts at the block start.
        """
        local_index = next(
            (i for i, candidate in enumerate(block_markers) if candidate is marker),
            0,
        )

        for i in range(local_index - 1, -1, -1):
            gap = document.text_between(block, block_markers[i], block_markers[i + 1])
            if WHITESPACE_PATTERN.sub("", gap):
                return block_markers[i]

        return None


def extract_claim(
    document: DocumentTree,
    citation_index: int,
    occurrence: int = 1,
    config: Optional[ExtractorConfig] = None,
) -> ClaimResult:
    """
    Convenience function to extract one claim.

    Args:
        document: Document containing the marker
        citation_index: Displayed citation number
        occurrence: 1-based occurrence among markers with that number
        config: Optional extraction config

    Returns:
        ClaimResult
    """
    return ClaimExtractor(config).extract(document, citation_index, occurrence)


def extract_all_claims(
    document: DocumentTree,
    citation_index: int,
    config: Optional[ExtractorConfig] = None,
) -> List[ClaimResult]:
    """Convenience function to extract claims for all occurrences."""
    return ClaimExtractor(config).extract_all(document, citation_index)


def count_occurrences(document: DocumentTree, citation_index: int) -> int:
    """Number of markers labelled [citation_index]."""
    return len(ClaimExtractor().find_markers(document, citation_index))
