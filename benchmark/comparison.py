"""
Comparison CSV - Side-by-side verdicts per entry.

One row per entry (sorted by id) with the ground truth and each
provider's predicted verdict. Provider columns follow the order
providers first appear in the results.
"""

import csv
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .runner import BenchmarkResult


def comparison_rows(
    results: List[BenchmarkResult],
    providers: Optional[List[str]] = None,
) -> Tuple[List[str], List[List[str]]]:
    """
    Build the comparison table.

    Args:
        results: Benchmark results
        providers: Column order (defaults to first-seen provider order)

    Returns:
        (header, rows); a provider with no result for an entry gets ""
    """
    by_entry: Dict[str, Dict[str, str]] = {}
    seen_providers: List[str] = []

    for result in results:
        row = by_entry.setdefault(result.entry_id, {"ground_truth": result.ground_truth})
        row[result.provider] = result.predicted_verdict.value
        if result.provider not in seen_providers:
            seen_providers.append(result.provider)

    columns = providers or seen_providers
    header = ["entry_id", "ground_truth"] + columns

    rows = [
        [entry_id, by_entry[entry_id]["ground_truth"]]
        + [by_entry[entry_id].get(provider, "") for provider in columns]
        for entry_id in sorted(by_entry)
    ]
    return header, rows


def write_comparison_csv(
    results: List[BenchmarkResult],
    filepath: Path,
    providers: Optional[List[str]] = None,
) -> int:
    """
    Write the comparison CSV with every field quoted.

    Returns:
        Number of entry rows written
    """
    header, rows = comparison_rows(results, providers)

    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        csv.writer(f, quoting=csv.QUOTE_ALL).writerows(rows)

    return len(rows)
