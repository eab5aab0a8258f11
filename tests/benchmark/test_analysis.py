"""
Tests for results analysis and the markdown report.
"""

import json

import pytest

from benchmark.analysis import BenchmarkAnalysis, analyze_results, display_name, write_analysis
from benchmark.report import render_markdown_report
from benchmark.runner import BenchmarkResult
from evals.scoring import classify_pair
from evals.verdicts import Verdict, normalize_verdict


def result(entry_id, provider, predicted, ground_truth="Supported", confidence=0.0, latency_ms=0.0, error=None):
    return BenchmarkResult(
        entry_id=entry_id,
        provider=provider,
        model=f"org/{provider}",
        ground_truth=ground_truth,
        predicted_verdict=predicted,
        confidence=confidence,
        latency_ms=latency_ms,
        error=error,
        correct=classify_pair(predicted, normalize_verdict(ground_truth)),
    )


@pytest.fixture
def results():
    return [
        result("row_2", "alpha", Verdict.SUPPORTED, confidence=90, latency_ms=300),
        result("row_3", "alpha", Verdict.PARTIALLY_SUPPORTED, confidence=60, latency_ms=500),
        result("row_2", "beta", Verdict.ERROR, latency_ms=100, error="HTTP 500"),
    ]


class TestAnalyzeResults:
    """Tests for analyze_results."""

    def test_overview(self, results):
        analysis = analyze_results(results)

        assert analysis.overview.total_entries == 2
        assert analysis.overview.total_calls == 3
        assert analysis.overview.providers == ["alpha", "beta"]

    def test_per_provider_metrics(self, results):
        alpha = analyze_results(results).providers["alpha"]

        assert alpha.name == "Alpha"
        assert alpha.model == "org/alpha"
        assert alpha.sample_count == 2
        assert alpha.metrics.exact_accuracy == 0.5
        assert alpha.metrics.lenient_accuracy == 1.0
        assert alpha.metrics.confidence.calibration == 30.0

    def test_errors_counted(self, results):
        beta = analyze_results(results).providers["beta"]

        assert beta.metrics.total == 1
        assert beta.metrics.errors == 1
        assert beta.metrics.valid == 0
        assert beta.metrics.latency.avg == 100.0

    def test_ranking_and_recommendations(self, results):
        analysis = analyze_results(results)

        assert [p.provider for p in analysis.ranked()] == ["alpha", "beta"]
        assert analysis.best_accuracy().provider == "alpha"
        assert analysis.fastest().provider == "beta"
        assert analysis.best_calibrated().provider == "alpha"

    def test_empty_results(self):
        analysis = analyze_results([])

        assert analysis.providers == {}
        assert analysis.best_accuracy() is None
        assert analysis.fastest() is None

    def test_display_name(self):
        assert display_name("olmo-32b") == "Olmo-32b"

    def test_write_analysis(self, results, tmp_path):
        path = tmp_path / "analysis.json"

        write_analysis(analyze_results(results), path)

        data = json.loads(path.read_text())
        assert data["overview"]["total_calls"] == 3
        assert data["providers"]["alpha"]["metrics"]["exact_accuracy"] == 0.5
        assert BenchmarkAnalysis.model_validate(data).providers["beta"].metrics.errors == 1


class TestMarkdownReport:
    """Tests for render_markdown_report."""

    def test_comparison_table(self, results):
        report = render_markdown_report(analyze_results(results))

        assert report.startswith("# Citation Verification Benchmark Results")
        assert "| Alpha | org/alpha | 50.0% | 100.0% | 100.0% | 400ms |" in report
        assert "- Providers tested: alpha, beta" in report

    def test_confusion_matrix_rows(self, results):
        report = render_markdown_report(analyze_results(results))

        assert "| Ground Truth \\ Predicted | Supported | Partial | Not Supported | Unavailable |" in report
        assert "| Supported | 1 | 1 | 0 | 0 |" in report

    def test_recommendations(self, results):
        report = render_markdown_report(analyze_results(results))

        assert "1. **Best overall accuracy**: Alpha with 50.0% exact match" in report
        assert "2. **Fastest response**: Beta with 100ms average" in report
        assert "3. **Best calibrated**: Alpha" in report

    def test_no_enum_reprs(self, results):
        assert "Verdict." not in render_markdown_report(analyze_results(results))

    def test_empty_analysis(self):
        report = render_markdown_report(analyze_results([]))

        assert "No results to compare." in report
