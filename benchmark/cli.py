"""
Benchmark CLI - Command-line interface for the verification benchmark.

Usage:
    python -m benchmark.cli extract --input Benchmarking_data_Citations.csv --limit 20
    python -m benchmark.cli run --providers apertus-70b,olmo-32b --resume
    python -m benchmark.cli analyze --report report.md
    python -m benchmark.cli compare --output results_comparison.csv
"""

import argparse
import sys
from pathlib import Path

from core.config import settings
from core.logging import setup_logging
from evals.report import format_percent, generate_metrics_report

from .analysis import analyze_results, write_analysis
from .comparison import write_comparison_csv
from .dataset import DatasetBuilder, load_dataset, load_ground_truth, write_dataset, write_review_csv
from .providers import select_providers
from .report import render_markdown_report
from .runner import BenchmarkRunner, load_results, select_entries


def split_keys(value: str):
    """Comma-separated list, blanks dropped."""
    return [key.strip() for key in value.split(",") if key.strip()] if value else []


def cmd_extract(args) -> int:
    """Build the dataset from the ground truth CSV."""
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: File not found: {input_path}")
        return 1

    print(f"Reading: {input_path}")
    try:
        rows = load_ground_truth(input_path, limit=args.limit, skip_errors=args.skip_errors)
    except ValueError as e:
        print(f"Error reading ground truth: {e}")
        return 1

    print(f"Found {len(rows)} rows")
    print(f"Processing {len({r.article_url for r in rows})} unique articles...")

    builder = DatasetBuilder(fetch_sources=not args.skip_sources)
    entries = builder.build(rows)

    write_dataset(entries, Path(args.output))
    print(f"\nWriting: {args.output}")
    write_review_csv(entries, Path(args.review_csv))
    print(f"Writing: {args.review_csv}")

    needs_review = sum(1 for e in entries if e.needs_manual_review)

    print("\n=== Summary ===")
    print(f"Total entries: {len(entries)}")
    print(f"Complete: {len(entries) - needs_review}")
    print(f"Needs manual review: {needs_review}")

    if args.verbose:
        for entry in entries:
            if entry.needs_manual_review:
                print(f"  - {entry.id} [{entry.citation_number}]: {entry.extraction_status.value}")

    if needs_review > 0:
        print(f"\nReview the entries in {args.review_csv} before running benchmarks.")

    return 0


def cmd_run(args) -> int:
    """Run the dataset through the selected providers."""
    dataset_path = Path(args.dataset)
    if not dataset_path.exists():
        print(f"Error: Dataset not found: {dataset_path}")
        print("Run the extract command first to create the dataset.")
        return 1

    dataset = load_dataset(dataset_path)
    print(f"Loaded {len(dataset)} entries from dataset")

    entries = select_entries(dataset, limit=args.limit)
    print(f"{len(entries)} entries are complete and ready for benchmarking")
    if not entries:
        print("\nError: No complete entries found. Review and complete the dataset first.")
        return 1

    providers, skipped = select_providers(split_keys(args.providers) or None)
    for key, reason in skipped.items():
        print(f"Skipping {key}: {reason}")
    if not providers:
        print("\nError: No providers available. Set API keys as environment variables.")
        return 1

    print(f"\nProviders to benchmark: {', '.join(p.key for p in providers)}")

    def report_progress(position, total, result):
        suffix = f" (error: {result.error})" if result.error else ""
        print(f"[{position}/{total}] {result.entry_id} / {result.provider}: {result.predicted_verdict.value}{suffix}")

    runner = BenchmarkRunner(providers, results_path=Path(args.results))
    results = runner.run(entries, resume=args.resume, on_result=report_progress)

    print(f"\nBenchmark complete. Results saved to: {args.results}")

    if args.verbose:
        analysis = analyze_results(results)
        for provider in analysis.ranked():
            print("\n" + generate_metrics_report(provider.metrics, title=f"{provider.name} ({provider.model})"))

    return 0


def cmd_analyze(args) -> int:
    """Compute per-provider metrics from results."""
    results_path = Path(args.results)
    if not results_path.exists():
        print(f"Error: Results not found: {results_path}")
        print("Run the run command first to generate results.")
        return 1

    results = load_results(results_path)
    print(f"Loaded {len(results)} results")

    analysis = analyze_results(results)
    print(f"Providers: {', '.join(analysis.overview.providers)}\n")

    for provider in analysis.providers.values():
        m = provider.metrics
        print(f"{provider.provider.upper()} ({provider.model}):")
        print(f"  Exact accuracy: {format_percent(m.exact_accuracy)}")
        print(f"  Lenient accuracy: {format_percent(m.lenient_accuracy)}")
        print(f"  Binary accuracy: {format_percent(m.binary_accuracy)}")
        print(f"  Avg latency: {m.latency.avg:.0f}ms")
        print(f"  Errors: {m.errors}/{m.total}")
        print("")

        if args.verbose:
            print(generate_metrics_report(m, title=f"{provider.name} ({provider.model})"))
            print("")

    write_analysis(analysis, Path(args.output))
    print(f"Analysis saved to: {args.output}")

    if args.report:
        report_path = Path(args.report)
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(render_markdown_report(analysis), encoding="utf-8")
        print(f"Report saved to: {report_path}")

    print("\n=== Ranking (by exact accuracy) ===\n")
    for index, provider in enumerate(analysis.ranked(), start=1):
        print(f"{index}. {provider.name}: {format_percent(provider.metrics.exact_accuracy)}")

    return 0


def cmd_compare(args) -> int:
    """Write the side-by-side verdict CSV."""
    results_path = Path(args.results)
    if not results_path.exists():
        print(f"Error: Results not found: {results_path}")
        return 1

    results = load_results(results_path)
    rows = write_comparison_csv(results, Path(args.output), providers=split_keys(args.providers) or None)
    print(f"Saved {rows} entries to {args.output}")

    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="benchmark",
        description="Citation verification benchmark",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Extract command
    extract_parser = subparsers.add_parser("extract", help="Build dataset from ground truth CSV")
    extract_parser.add_argument("--input", "-i", required=True, help="Ground truth CSV file")
    extract_parser.add_argument("--output", "-o", default=settings.dataset_path, help="Dataset file (JSON)")
    extract_parser.add_argument("--review-csv", default=settings.review_csv_path, help="Manual review CSV")
    extract_parser.add_argument("--limit", type=int, help="Only process the first N rows")
    extract_parser.add_argument("--skip-sources", action="store_true", help="Do not fetch source content")
    extract_parser.add_argument("--skip-errors", action="store_true", help="Skip malformed rows")
    extract_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # Run command
    run_parser = subparsers.add_parser("run", help="Run dataset through providers")
    run_parser.add_argument("--dataset", "-d", default=settings.dataset_path, help="Dataset file (JSON)")
    run_parser.add_argument("--results", "-r", default=settings.results_path, help="Results file (JSON)")
    run_parser.add_argument("--providers", "-p", help="Comma-separated provider keys")
    run_parser.add_argument("--limit", type=int, help="Only benchmark the first N entries")
    run_parser.add_argument("--resume", action="store_true", help="Skip pairs already in the results file")
    run_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze benchmark results")
    analyze_parser.add_argument("--results", "-r", default=settings.results_path, help="Results file (JSON)")
    analyze_parser.add_argument("--output", "-o", default=settings.analysis_path, help="Analysis file (JSON)")
    analyze_parser.add_argument("--report", help="Markdown report file")
    analyze_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # Compare command
    compare_parser = subparsers.add_parser("compare", help="Side-by-side verdicts per entry")
    compare_parser.add_argument("--results", "-r", default=settings.results_path, help="Results file (JSON)")
    compare_parser.add_argument("--output", "-o", default="benchmark_data/results_comparison.csv", help="Comparison CSV")
    compare_parser.add_argument("--providers", "-p", help="Comma-separated provider column order")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging()

    if args.command == "extract":
        return cmd_extract(args)
    elif args.command == "run":
        return cmd_run(args)
    elif args.command == "analyze":
        return cmd_analyze(args)
    elif args.command == "compare":
        return cmd_compare(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
