"""
Shared pytest fixtures for extraction, scoring and benchmark tests.
"""

import pytest
from typing import List

from evals.scoring import ScoredPair
from extraction.document import SoupDocument


# ============================================================================
# DOCUMENT FIXTURES
# ============================================================================

ARTICLE_URL = "https://en.wikipedia.org/w/index.php?title=Port_City&oldid=123"

ARTICLE_HTML = """
<html><body>
<div class="mw-parser-output">
<p>The city was founded in 1850.<sup class="reference"><a href="#cite_note-1">[1]</a></sup> It grew rapidly during the gold rush.<sup class="reference"><a href="#cite_note-2">[2]</a></sup><sup class="reference"><a href="#cite_note-3">[3]</a></sup> Its population exceeded one million by 1900.<sup class="reference"><a href="#cite_note-1">[1]</a></sup></p>
<p>Short.<sup class="reference"><a href="#cite_note-4">[4]</a></sup></p>
<ul><li>The harbour is the deepest on the coast.<sup class="reference"><a href="#cite_note-5">[5]</a></sup></li></ul>
</div>
<div class="reflist"><ol class="references">
<li id="cite_note-1"><a href="https://example.com/history">History</a> <a href="https://web.archive.org/web/2020/https://example.com/history">Archived</a></li>
<li id="cite_note-2"><a href="https://en.wikipedia.org/wiki/Gold_rush">Gold rush</a> <a href="https://news.example.org/gold">News</a></li>
<li id="cite_note-3"><a href="/wiki/Some_Book">Some Book</a></li>
<li id="cite_note-4">No link here</li>
<li id="cite_note-5"><a href="https://en.wikipedia.org/wiki/Harbour">Harbour</a></li>
</ol></div>
</body></html>
"""


@pytest.fixture
def article_html() -> str:
    """Rendered article with repeated, stacked and short-claim markers."""
    return ARTICLE_HTML


@pytest.fixture
def article_document() -> SoupDocument:
    """Parsed article document."""
    return SoupDocument.from_html(ARTICLE_HTML)


@pytest.fixture
def make_document():
    """Factory building a document from HTML."""
    return SoupDocument.from_html


# ============================================================================
# SCORING FIXTURES
# ============================================================================

@pytest.fixture
def scenario_pairs() -> List[ScoredPair]:
    """Three-pair scenario: exact, partial and exact."""
    return [
        ScoredPair(predicted="Supported", ground_truth="Supported", confidence=90),
        ScoredPair(predicted="Partially supported", ground_truth="Supported", confidence=60),
        ScoredPair(predicted="Not supported", ground_truth="Not supported", confidence=80),
    ]
