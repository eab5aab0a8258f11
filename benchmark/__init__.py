"""
Benchmark Module - Measure LLM providers against human verdicts.

Builds a dataset from a ground truth CSV (claims and fetched sources),
runs it through verification providers with resume support, and
analyzes the results per provider.
"""

from .dataset import DatasetBuilder, DatasetEntry, ExtractionStatus, load_ground_truth
from .fetcher import SourceFetcher
from .providers import DEFAULT_PROVIDERS, ProviderClient, ProviderConfig
from .runner import BenchmarkResult, BenchmarkRunner
from .analysis import BenchmarkAnalysis, analyze_results
from .comparison import write_comparison_csv

__all__ = [
    "DatasetBuilder",
    "DatasetEntry",
    "ExtractionStatus",
    "load_ground_truth",
    "SourceFetcher",
    "DEFAULT_PROVIDERS",
    "ProviderClient",
    "ProviderConfig",
    "BenchmarkResult",
    "BenchmarkRunner",
    "BenchmarkAnalysis",
    "analyze_results",
    "write_comparison_csv",
]
