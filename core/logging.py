"""
Structured Logging Module for the citation verification toolkit.

Provides JSON-formatted structured logging for observability.
Key events: claim extraction, verdict parsing, source fetching,
provider calls, benchmark runs and analysis.
"""

import logging
import json
import sys
from datetime import datetime
from typing import Any, Optional

from core.config import settings


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    All logs are emitted as single-line JSON objects for easy parsing
    by log aggregation tools.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)

        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class StructuredLogger:
    """
    Structured logger wrapper with domain-specific methods.

    Provides type-safe logging for extraction and benchmark events.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _log(
        self,
        level: int,
        message: str,
        **kwargs: Any
    ) -> None:
        """Internal log method with extra fields."""
        extra = {"extra_fields": kwargs}
        self.logger.log(level, message, extra=extra)

    # ===== Extraction Events =====

    def extraction_failed(
        self,
        citation_index: int,
        occurrence: int,
        error_type: str,
        error: str
    ) -> None:
        """Log a structural claim extraction failure."""
        self._log(
            logging.WARNING,
            f"Claim extraction failed for [{citation_index}] #{occurrence}: {error}",
            event="extraction.failed",
            citation_index=citation_index,
            occurrence=occurrence,
            error_type=error_type,
            error=error
        )

    def occurrence_fallback(
        self,
        citation_index: int,
        requested: int,
        available: int
    ) -> None:
        """Log fallback to the first marker when the occurrence is out of range."""
        self._log(
            logging.WARNING,
            f"Occurrence {requested} of [{citation_index}] not found ({available} available), using first",
            event="extraction.occurrence_fallback",
            citation_index=citation_index,
            requested=requested,
            available=available
        )

    def claim_block_fallback(
        self,
        citation_index: int,
        occurrence: int,
        span_length: int
    ) -> None:
        """Log that the claim span was too short and block text was used."""
        self._log(
            logging.DEBUG,
            f"Claim span for [{citation_index}] #{occurrence} too short ({span_length} chars), using block text",
            event="extraction.block_fallback",
            citation_index=citation_index,
            occurrence=occurrence,
            span_length=span_length
        )

    def claim_empty(
        self,
        citation_index: int,
        occurrence: int
    ) -> None:
        """Log that both the claim span and block fallback were empty."""
        self._log(
            logging.WARNING,
            f"Empty claim for [{citation_index}] #{occurrence} after block fallback",
            event="extraction.empty",
            citation_index=citation_index,
            occurrence=occurrence
        )

    # ===== Verdict Events =====

    def verdict_unparseable(
        self,
        error: str,
        response_preview: str
    ) -> None:
        """Log a model response with no recognizable verdict."""
        self._log(
            logging.WARNING,
            f"Unparseable verdict response: {error}",
            event="verdict.unparseable",
            error=error,
            response_preview=response_preview
        )

    def confidence_invalid(
        self,
        value: Any
    ) -> None:
        """Log a non-numeric or out-of-range confidence value."""
        self._log(
            logging.WARNING,
            f"Invalid confidence value {value!r}, using 0",
            event="verdict.confidence_invalid",
            value=value
        )

    # ===== Fetch Events =====

    def fetch_retry(
        self,
        url: str,
        attempt: int,
        max_retries: int,
        delay_s: float,
        error: str
    ) -> None:
        """Log a retried fetch."""
        self._log(
            logging.INFO,
            f"Retry {attempt}/{max_retries} after {delay_s:.0f}s: {error}",
            event="fetch.retry",
            url=url,
            attempt=attempt,
            max_retries=max_retries,
            delay_s=delay_s,
            error=error
        )

    def fetch_failed(
        self,
        url: str,
        method: str,
        error: str
    ) -> None:
        """Log a failed fetch."""
        self._log(
            logging.WARNING,
            f"{method} fetch failed: {error}",
            event="fetch.failed",
            url=url,
            method=method,
            error=error
        )

    def fetch_completed(
        self,
        url: str,
        method: str,
        chars: int
    ) -> None:
        """Log a successful source fetch."""
        self._log(
            logging.DEBUG,
            f"{method} fetch success: {chars} chars",
            event="fetch.completed",
            url=url,
            method=method,
            chars=chars
        )

    # ===== Provider Events =====

    def provider_call_completed(
        self,
        provider: str,
        verdict: str,
        latency_ms: float
    ) -> None:
        """Log a completed provider call."""
        self._log(
            logging.INFO,
            f"Provider {provider} returned {verdict} in {latency_ms:.0f}ms",
            event="provider.completed",
            provider=provider,
            verdict=verdict,
            latency_ms=latency_ms
        )

    def provider_call_failed(
        self,
        provider: str,
        error: str,
        latency_ms: float
    ) -> None:
        """Log a failed provider call."""
        self._log(
            logging.ERROR,
            f"Provider {provider} failed: {error}",
            event="provider.failed",
            provider=provider,
            error=error,
            latency_ms=latency_ms
        )

    # ===== Dataset / Benchmark Events =====

    def dataset_entry_built(
        self,
        entry_id: str,
        citation_index: int,
        occurrence: int,
        status: str
    ) -> None:
        """Log a dataset entry built from a ground truth row."""
        self._log(
            logging.INFO,
            f"Entry {entry_id} [{citation_index}] #{occurrence}: {status}",
            event="dataset.entry_built",
            entry_id=entry_id,
            citation_index=citation_index,
            occurrence=occurrence,
            status=status
        )

    def article_fetch_failed(
        self,
        article_url: str,
        rows: int,
        error: str
    ) -> None:
        """Log an article that could not be fetched."""
        self._log(
            logging.ERROR,
            f"Article fetch failed ({rows} rows affected): {error}",
            event="dataset.article_fetch_failed",
            article_url=article_url,
            rows=rows,
            error=error
        )

    def benchmark_started(
        self,
        entries: int,
        providers: int,
        already_completed: int
    ) -> None:
        """Log benchmark run started."""
        self._log(
            logging.INFO,
            f"Benchmark started: {entries} entries x {providers} providers",
            event="benchmark.started",
            entries=entries,
            providers=providers,
            already_completed=already_completed
        )

    def benchmark_completed(
        self,
        results: int,
        errors: int,
        duration_ms: Optional[float] = None
    ) -> None:
        """Log benchmark run completed."""
        self._log(
            logging.INFO,
            f"Benchmark completed: {results} results, {errors} errors",
            event="benchmark.completed",
            results=results,
            errors=errors,
            duration_ms=duration_ms
        )

    def analysis_completed(
        self,
        providers: int,
        total_calls: int
    ) -> None:
        """Log results analysis completed."""
        self._log(
            logging.INFO,
            f"Analysis completed for {providers} providers",
            event="analysis.completed",
            providers=providers,
            total_calls=total_calls
        )


def setup_logging() -> None:
    """
    Configure application-wide logging.

    Should be called once at application startup.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))

    # Remove existing handlers
    root_logger.handlers = []

    # Add JSON handler for stderr, stdout is reserved for CLI output
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)

    # Set levels for noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        StructuredLogger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.occurrence_fallback(3, 4, 2)
    """
    return StructuredLogger(name)
