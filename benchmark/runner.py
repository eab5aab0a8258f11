"""
Benchmark Runner - Runs dataset entries through each provider.

Every (entry, provider) call produces one BenchmarkResult. Results are
written to disk after each call so an interrupted run can resume; on
resume, pairs whose "entry_id|provider" key is already present are
skipped.
"""

import json
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from core.config import settings
from core.logging import get_logger
from evals.scoring import MatchKind, ScoredPair, classify_pair
from evals.verdicts import Verdict, normalize_verdict

from .dataset import DatasetEntry
from .prompts import SYSTEM_PROMPT, build_user_prompt
from .providers import ProviderClient, ProviderConfig


logger = get_logger(__name__)


class BenchmarkResult(BaseModel):
    """One provider's verdict on one dataset entry."""

    entry_id: str
    provider: str
    model: str
    ground_truth: str
    predicted_verdict: Verdict
    confidence: float = 0.0
    comments: str = ""
    latency_ms: float = 0.0
    error: Optional[str] = None
    correct: MatchKind
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    @property
    def task_id(self) -> str:
        return task_id(self.entry_id, self.provider)

    def to_scored_pair(self) -> ScoredPair:
        """Convert for the scoring engine."""
        return ScoredPair(
            predicted=self.predicted_verdict,
            ground_truth=self.ground_truth,
            confidence=self.confidence,
            latency_ms=self.latency_ms,
            error=self.error,
        )


def task_id(entry_id: str, provider: str) -> str:
    """Resume key for an (entry, provider) pair."""
    return f"{entry_id}|{provider}"


def load_results(filepath: Path) -> List[BenchmarkResult]:
    """Read results; a missing file yields an empty list."""
    filepath = Path(filepath)
    if not filepath.exists():
        return []
    with open(filepath, "r", encoding="utf-8") as f:
        return [BenchmarkResult.model_validate(item) for item in json.load(f)]


def save_results(results: List[BenchmarkResult], filepath: Path) -> None:
    """Write results as a JSON array."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump([r.model_dump(mode="json") for r in results], f, indent=2, ensure_ascii=False)


def select_entries(entries: List[DatasetEntry], limit: Optional[int] = None) -> List[DatasetEntry]:
    """Complete entries not flagged for review, optionally limited."""
    ready = [e for e in entries if e.is_complete and not e.needs_manual_review]
    if limit is not None:
        ready = ready[:limit]
    return ready


class BenchmarkRunner:
    """
    Runs dataset entries through providers and records results.

    Usage:
        runner = BenchmarkRunner(providers, results_path=Path("results.json"))
        results = runner.run(select_entries(load_dataset(path)), resume=True)
    """

    def __init__(
        self,
        providers: List[ProviderConfig],
        clients: Optional[Dict[str, ProviderClient]] = None,
        results_path: Optional[Path] = None,
        system_prompt: str = SYSTEM_PROMPT,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the runner.

        Args:
            providers: Providers to call, in order
            clients: Pre-built clients keyed by provider key
            results_path: File rewritten after every call (None to skip)
            system_prompt: Verification instructions
            sleep: Sleep function used between calls
        """
        self.providers = providers
        self.clients = dict(clients or {})
        for config in providers:
            if config.key not in self.clients:
                self.clients[config.key] = ProviderClient(config)
        self.results_path = Path(results_path) if results_path else None
        self.system_prompt = system_prompt
        self._sleep = sleep

    def run(
        self,
        entries: List[DatasetEntry],
        resume: bool = False,
        on_result: Optional[Callable[[int, int, BenchmarkResult], None]] = None,
    ) -> List[BenchmarkResult]:
        """
        Run every entry through every provider.

        Args:
            entries: Entries to benchmark
            resume: Load existing results and skip pairs already done
            on_result: Progress callback (position, total, result)

        Returns:
            All results, including those loaded when resuming
        """
        results: List[BenchmarkResult] = []
        if resume and self.results_path is not None:
            results = load_results(self.results_path)
        completed = {r.task_id for r in results}
        selected = {task_id(e.id, p.key) for e in entries for p in self.providers}

        total = len(selected)
        position = len(completed & selected)
        errors = 0
        start = time.monotonic()

        logger.benchmark_started(len(entries), len(self.providers), position)

        for entry in entries:
            user_prompt = build_user_prompt(
                entry.claim_text,
                entry.source_text,
                entry.source_url,
                max_source_chars=settings.max_source_chars,
            )

            for config in self.providers:
                if task_id(entry.id, config.key) in completed:
                    continue

                result = self._run_one(entry, config, user_prompt)
                results.append(result)
                if result.error:
                    errors += 1

                if self.results_path is not None:
                    save_results(results, self.results_path)

                position += 1
                if on_result:
                    on_result(position, total, result)

                self._sleep(settings.provider_delay_s)

        logger.benchmark_completed(len(results), errors, (time.monotonic() - start) * 1000)
        return results

    def _run_one(self, entry: DatasetEntry, config: ProviderConfig, user_prompt: str) -> BenchmarkResult:
        response = self.clients[config.key].verify(self.system_prompt, user_prompt)

        return BenchmarkResult(
            entry_id=entry.id,
            provider=config.key,
            model=config.model,
            ground_truth=entry.ground_truth,
            predicted_verdict=response.verdict,
            confidence=response.confidence,
            comments=response.comments,
            latency_ms=response.latency_ms,
            error=response.error,
            correct=classify_pair(response.verdict, normalize_verdict(entry.ground_truth)),
        )
