"""
Markdown report rendering for benchmark analyses.
"""

from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from evals.report import SHORT_NAMES, format_percent
from evals.verdicts import CANONICAL_VERDICTS

from .analysis import BenchmarkAnalysis


# Default templates directory
DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates"


def format_ms(value: float) -> str:
    return f"{value:.0f}ms"


class ReportRenderer:
    """Render a BenchmarkAnalysis as a markdown report."""

    def __init__(self, templates_dir: Optional[Path] = None):
        """
        Initialize the renderer.

        Args:
            templates_dir: Path to templates directory (defaults to benchmark/templates)
        """
        self.templates_dir = templates_dir or DEFAULT_TEMPLATES_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["percent"] = format_percent
        self.env.filters["ms"] = format_ms

    def render_markdown(self, analysis: BenchmarkAnalysis) -> str:
        template = self.env.get_template("benchmark_report.md.j2")
        return template.render(**self._prepare_context(analysis))

    def _prepare_context(self, analysis: BenchmarkAnalysis) -> dict:
        return {
            "generated": analysis.generated.isoformat() + "Z",
            "overview": analysis.overview,
            "ranked": analysis.ranked(),
            "verdicts": [v.value for v in CANONICAL_VERDICTS],
            "short_names": SHORT_NAMES,
            "best": analysis.best_accuracy(),
            "fastest": analysis.fastest(),
            "calibrated": analysis.best_calibrated(),
        }


def render_markdown_report(analysis: BenchmarkAnalysis) -> str:
    """Convenience function to render with the default templates."""
    return ReportRenderer().render_markdown(analysis)
