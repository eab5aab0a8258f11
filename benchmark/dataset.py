"""
Dataset building - Ground truth CSV -> enriched benchmark entries.

Each ground-truth row names an article, a citation number, which
occurrence of that citation is meant and a human verdict. The builder
fetches each article once, extracts the claim and the cited source URL,
fetches the source text and records how far it got in
extraction_status. Rows that fail part-way are kept and flagged for
manual review rather than dropped.
"""

import csv
import json
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional
from urllib.parse import parse_qs, unquote, urlparse

import requests
from pydantic import BaseModel, Field

from core.config import settings
from core.logging import get_logger
from evals.verdicts import is_canonical, normalize_verdict
from extraction.errors import ClaimExtractionError
from extraction.extractor import ClaimExtractor, ExtractorConfig
from extraction.references import extract_reference_url

from .fetcher import FetchError, SourceFetcher


logger = get_logger(__name__)

ARTICLE_COLUMNS = ("Article", "Artice")  # Both spellings appear in the source sheet
CITATION_NUMBER_COLUMN = "Citation number"
CITATION_INSTANCE_COLUMN = "Citation instance"
GROUND_TRUTH_COLUMN = "Ground truth"

REVIEW_CLAIM_CHARS = 500
REVIEW_PREVIEW_CHARS = 200

REVIEW_COLUMNS = [
    "id",
    "article_title",
    "citation_number",
    "occurrence",
    "claim_text",
    "source_url",
    "source_text_preview",
    "ground_truth",
    "extraction_status",
    "needs_manual_review",
    "manual_claim_override",
    "manual_source_override",
]


class ExtractionStatus(str, Enum):
    """How far dataset extraction got for an entry."""
    COMPLETE = "complete"
    CLAIM_EXTRACTION_FAILED = "claim_extraction_failed"
    NO_SOURCE_URL = "no_source_url"
    SOURCE_FETCH_FAILED = "source_fetch_failed"
    ARTICLE_FETCH_FAILED = "article_fetch_failed"


class GroundTruthRow(BaseModel):
    """One row of the ground-truth CSV."""

    row_index: int = Field(..., description="1-based CSV line number (header is line 1)")
    article_url: str
    citation_number: int
    citation_instance: int = 1
    ground_truth: str

    @property
    def entry_id(self) -> str:
        return f"row_{self.row_index}"


class DatasetEntry(BaseModel):
    """A benchmark entry: claim, source and human verdict."""

    id: str
    article_url: str
    article_title: str = ""
    citation_number: int
    occurrence: int = 1
    total_occurrences: int = 0
    claim_text: str = ""
    claim_container: str = ""
    source_url: str = ""
    source_text: str = ""
    ground_truth: str
    extraction_status: ExtractionStatus
    needs_manual_review: bool = True
    extraction_error: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.extraction_status == ExtractionStatus.COMPLETE


def normalize_ground_truth(label: str) -> str:
    """Canonical verdict label, or the stripped raw label when unrecognized."""
    verdict = normalize_verdict(label)
    if is_canonical(verdict):
        return verdict.value
    return (label or "").strip()


def article_title_from_url(url: str) -> str:
    """Title from a ?title= parameter or a /wiki/ path, underscores as spaces."""
    parsed = urlparse(url)
    titles = parse_qs(parsed.query).get("title")
    if titles:
        return titles[0].replace("_", " ")

    if "/wiki/" in parsed.path:
        return unquote(parsed.path.split("/wiki/", 1)[1]).replace("_", " ")

    return ""


def determine_status(claim_text: str, source_url: Optional[str], source_text: str) -> ExtractionStatus:
    """First missing piece decides the status."""
    if not claim_text:
        return ExtractionStatus.CLAIM_EXTRACTION_FAILED
    if not source_url:
        return ExtractionStatus.NO_SOURCE_URL
    if not source_text:
        return ExtractionStatus.SOURCE_FETCH_FAILED
    return ExtractionStatus.COMPLETE


def _parse_int(value: str, default: Optional[int] = None) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def load_ground_truth(
    filepath: Path,
    limit: Optional[int] = None,
    skip_errors: bool = False,
) -> List[GroundTruthRow]:
    """
    Read the ground-truth CSV.

    Args:
        filepath: Path to the CSV file
        limit: Keep only the first N rows
        skip_errors: If True, skip rows without an article or citation number

    Returns:
        Parsed rows in file order

    Raises:
        FileNotFoundError: the file does not exist
        ValueError: a malformed row with skip_errors=False
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"CSV file not found: {filepath}")

    rows: List[GroundTruthRow] = []

    with open(filepath, "r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)

        for row_num, raw in enumerate(reader, start=2):  # Start at 2 (header is row 1)
            # Fields beyond the header (e.g. a trailing comma) land under the None key
            row = {k.strip(): (v or "").strip() for k, v in raw.items() if k is not None}

            article_url = next((row[c] for c in ARTICLE_COLUMNS if row.get(c)), "")
            citation_number = _parse_int(row.get(CITATION_NUMBER_COLUMN))

            if not article_url or citation_number is None:
                if skip_errors:
                    continue
                raise ValueError(f"Row {row_num}: missing article URL or citation number")

            rows.append(GroundTruthRow(
                row_index=row_num,
                article_url=article_url,
                citation_number=citation_number,
                citation_instance=_parse_int(row.get(CITATION_INSTANCE_COLUMN), 1) or 1,
                ground_truth=normalize_ground_truth(row.get(GROUND_TRUTH_COLUMN, "")),
            ))

            if limit is not None and len(rows) >= limit:
                break

    return rows


class DatasetBuilder:
    """
    Builds dataset entries from ground-truth rows.

    Articles are grouped so each page is fetched and parsed once.
    """

    def __init__(
        self,
        fetcher: Optional[SourceFetcher] = None,
        extractor: Optional[ClaimExtractor] = None,
        fetch_sources: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the builder.

        Args:
            fetcher: HTTP fetcher for articles and sources
            extractor: Claim extractor (defaults to one built from settings)
            fetch_sources: If False, source text is left empty
            sleep: Sleep function used for rate limiting
        """
        self.fetcher = fetcher or SourceFetcher(sleep=sleep)
        self.extractor = extractor or ClaimExtractor(ExtractorConfig.from_settings())
        self.fetch_sources = fetch_sources
        self._sleep = sleep

    def build(self, rows: List[GroundTruthRow]) -> List[DatasetEntry]:
        """
        Build entries for all rows.

        Args:
            rows: Ground-truth rows

        Returns:
            One entry per row, grouped by article in first-seen order
        """
        groups: Dict[str, List[GroundTruthRow]] = {}
        for row in rows:
            groups.setdefault(row.article_url, []).append(row)

        entries: List[DatasetEntry] = []
        for article_url, article_rows in groups.items():
            entries.extend(self._build_article(article_url, article_rows))

        return entries

    def _build_article(self, article_url: str, rows: List[GroundTruthRow]) -> List[DatasetEntry]:
        try:
            document = self.fetcher.fetch_article(article_url)
        except (requests.RequestException, FetchError) as e:
            logger.article_fetch_failed(article_url, len(rows), str(e))
            return [
                DatasetEntry(
                    id=row.entry_id,
                    article_url=article_url,
                    article_title=article_title_from_url(article_url),
                    citation_number=row.citation_number,
                    occurrence=row.citation_instance,
                    ground_truth=row.ground_truth,
                    extraction_status=ExtractionStatus.ARTICLE_FETCH_FAILED,
                    extraction_error=str(e),
                )
                for row in rows
            ]

        self._sleep(settings.article_delay_s)
        return [self._build_entry(document, article_url, row) for row in rows]

    def _build_entry(self, document, article_url: str, row: GroundTruthRow) -> DatasetEntry:
        claim_text = ""
        claim_container = ""
        total_occurrences = 0
        extraction_error = None

        try:
            claim = self.extractor.extract(document, row.citation_number, row.citation_instance)
            claim_text = claim.claim_text
            claim_container = claim.block_text
            total_occurrences = claim.total_occurrences
        except ClaimExtractionError as e:
            extraction_error = str(e)
            total_occurrences = len(self.extractor.find_markers(document, row.citation_number))

        source_url = extract_reference_url(document, row.citation_number, base_url=article_url)

        source_text = ""
        if source_url and self.fetch_sources:
            source_text = self.fetcher.fetch_source_content(source_url) or ""
            self._sleep(settings.source_delay_s)

        status = determine_status(claim_text, source_url, source_text)
        logger.dataset_entry_built(row.entry_id, row.citation_number, row.citation_instance, status.value)

        return DatasetEntry(
            id=row.entry_id,
            article_url=article_url,
            article_title=article_title_from_url(article_url),
            citation_number=row.citation_number,
            occurrence=row.citation_instance,
            total_occurrences=total_occurrences,
            claim_text=claim_text,
            claim_container=claim_container,
            source_url=source_url or "",
            source_text=source_text,
            ground_truth=row.ground_truth,
            extraction_status=status,
            needs_manual_review=not claim_text or not source_text,
            extraction_error=extraction_error,
        )


def write_dataset(entries: List[DatasetEntry], filepath: Path) -> None:
    """Write entries as a JSON array."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump([e.model_dump(mode="json") for e in entries], f, indent=2, ensure_ascii=False)


def load_dataset(filepath: Path) -> List[DatasetEntry]:
    """Read entries written by write_dataset."""
    with open(filepath, "r", encoding="utf-8") as f:
        return [DatasetEntry.model_validate(item) for item in json.load(f)]


def write_review_csv(entries: List[DatasetEntry], filepath: Path) -> None:
    """
    Write the manual review sheet.

    Claims are cut to 500 characters and sources to a 200 character
    preview. The two override columns are left blank for reviewers.
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=REVIEW_COLUMNS)
        writer.writeheader()
        for entry in entries:
            writer.writerow({
                "id": entry.id,
                "article_title": entry.article_title,
                "citation_number": entry.citation_number,
                "occurrence": entry.occurrence,
                "claim_text": entry.claim_text[:REVIEW_CLAIM_CHARS],
                "source_url": entry.source_url,
                "source_text_preview": entry.source_text[:REVIEW_PREVIEW_CHARS] + "...",
                "ground_truth": entry.ground_truth,
                "extraction_status": entry.extraction_status.value,
                "needs_manual_review": str(entry.needs_manual_review).lower(),
                "manual_claim_override": "",
                "manual_source_override": "",
            })
