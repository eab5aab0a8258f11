"""
Results analysis - Per-provider metrics over benchmark results.

Groups results by provider (in first-seen order), scores each group
with the ScoringEngine and ranks providers by exact accuracy.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from core.logging import get_logger
from evals.scoring import ScoringEngine, VerdictMetrics

from .runner import BenchmarkResult


logger = get_logger(__name__)


class ProviderAnalysis(BaseModel):
    """Metrics for one provider."""

    provider: str
    name: str
    model: str
    sample_count: int
    metrics: VerdictMetrics


class AnalysisOverview(BaseModel):
    """Run-wide counts."""

    total_entries: int = 0
    total_calls: int = 0
    providers: List[str] = Field(default_factory=list)


class BenchmarkAnalysis(BaseModel):
    """Analysis of a full benchmark run."""

    generated: datetime = Field(default_factory=datetime.utcnow)
    overview: AnalysisOverview = Field(default_factory=AnalysisOverview)
    providers: Dict[str, ProviderAnalysis] = Field(default_factory=dict)

    def ranked(self) -> List[ProviderAnalysis]:
        """Providers by exact accuracy, best first; ties keep input order."""
        return sorted(
            self.providers.values(),
            key=lambda p: p.metrics.exact_accuracy,
            reverse=True,
        )

    def best_accuracy(self) -> Optional[ProviderAnalysis]:
        ranked = self.ranked()
        return ranked[0] if ranked else None

    def fastest(self) -> Optional[ProviderAnalysis]:
        """Lowest average latency."""
        if not self.providers:
            return None
        return min(self.ranked(), key=lambda p: p.metrics.latency.avg)

    def best_calibrated(self) -> Optional[ProviderAnalysis]:
        """Largest gap between confidence when correct and when wrong."""
        if not self.providers:
            return None
        return max(self.ranked(), key=lambda p: p.metrics.confidence.calibration)


def display_name(provider: str) -> str:
    """Provider key with its first letter capitalized."""
    return provider[:1].upper() + provider[1:]


def analyze_results(
    results: List[BenchmarkResult],
    engine: Optional[ScoringEngine] = None,
) -> BenchmarkAnalysis:
    """
    Analyze benchmark results.

    Args:
        results: Results from one or more runs
        engine: Scoring engine (default ScoringEngine())

    Returns:
        BenchmarkAnalysis with per-provider metrics
    """
    engine = engine or ScoringEngine()

    by_provider: Dict[str, List[BenchmarkResult]] = {}
    for result in results:
        by_provider.setdefault(result.provider, []).append(result)

    analysis = BenchmarkAnalysis(
        overview=AnalysisOverview(
            total_entries=len({r.entry_id for r in results}),
            total_calls=len(results),
            providers=list(by_provider),
        )
    )

    for provider, provider_results in by_provider.items():
        analysis.providers[provider] = ProviderAnalysis(
            provider=provider,
            name=display_name(provider),
            model=provider_results[0].model,
            sample_count=len(provider_results),
            metrics=engine.score(r.to_scored_pair() for r in provider_results),
        )

    logger.analysis_completed(len(by_provider), len(results))
    return analysis


def write_analysis(analysis: BenchmarkAnalysis, filepath: Path) -> None:
    """Write analysis as JSON."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(analysis.model_dump(mode="json"), f, indent=2)
