"""
Claim extraction errors.

Structural failures: the document does not satisfy the marker/block
shape needed to attribute a claim. Surfaced per occurrence, never retried.
"""


class ClaimExtractionError(ValueError):
    """Base class for claim extraction failures."""

    error_type = "claim_extraction_error"

    def __init__(self, message: str, citation_index: int, occurrence: int = 1):
        super().__init__(message)
        self.citation_index = citation_index
        self.occurrence = occurrence


class NoMatchingMarkerError(ClaimExtractionError):
    """No marker in the document carries the requested citation index."""

    error_type = "no_matching_marker"

    def __init__(self, citation_index: int, occurrence: int = 1):
        super().__init__(
            f"No citation marker [{citation_index}] found in document",
            citation_index=citation_index,
            occurrence=occurrence,
        )


class NoEnclosingBlockError(ClaimExtractionError):
    """The selected marker has no recognized block-level ancestor."""

    error_type = "no_enclosing_block"

    def __init__(self, citation_index: int, occurrence: int = 1):
        super().__init__(
            f"Citation marker [{citation_index}] occurrence {occurrence} is not inside a block container",
            citation_index=citation_index,
            occurrence=occurrence,
        )


class OccurrenceOutOfRangeError(ClaimExtractionError):
    """Requested occurrence does not exist (strict mode only)."""

    error_type = "occurrence_out_of_range"

    def __init__(self, citation_index: int, occurrence: int, available: int):
        super().__init__(
            f"Occurrence {occurrence} of citation [{citation_index}] requested, "
            f"but only {available} found",
            citation_index=citation_index,
            occurrence=occurrence,
        )
        self.available = available
