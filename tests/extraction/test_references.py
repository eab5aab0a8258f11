"""
Tests for reference lookup - marker to source URL.
"""

from bs4 import BeautifulSoup

from extraction.references import (
    extract_reference_url,
    extract_url_from_reference,
    reference_target,
)


def reference(html: str):
    return BeautifulSoup(f'<li id="cite_note-1">{html}</li>', "html.parser").find("li")


class TestExtractUrlFromReference:
    """Tests for link selection inside a reference entry."""

    def test_archive_link_preferred(self):
        ref = reference(
            '<a href="https://example.com/a">Live</a> '
            '<a href="https://web.archive.org/web/2020/https://example.com/a">Archived</a>'
        )

        assert extract_url_from_reference(ref) == "https://web.archive.org/web/2020/https://example.com/a"

    def test_wikipedia_links_skipped(self):
        ref = reference(
            '<a href="https://en.wikipedia.org/wiki/Publisher">Publisher</a> '
            '<a href="https://news.example.org/story">Story</a>'
        )

        assert extract_url_from_reference(ref) == "https://news.example.org/story"

    def test_internal_link_used_when_only_option(self):
        ref = reference('<a href="https://commons.wikimedia.org/wiki/File:X.jpg">File</a>')

        assert extract_url_from_reference(ref) == "https://commons.wikimedia.org/wiki/File:X.jpg"

    def test_relative_links_need_base_url(self):
        ref = reference('<a href="/wiki/Some_Book">Some Book</a>')

        assert extract_url_from_reference(ref) is None
        assert (
            extract_url_from_reference(ref, base_url="https://en.wikipedia.org/wiki/City")
            == "https://en.wikipedia.org/wiki/Some_Book"
        )

    def test_no_links(self):
        assert extract_url_from_reference(reference("Plain citation text")) is None


class TestExtractReferenceUrl:
    """Tests for marker -> reference entry -> URL."""

    def test_archive_url(self, article_document):
        assert extract_reference_url(article_document, 1) == (
            "https://web.archive.org/web/2020/https://example.com/history"
        )

    def test_external_url(self, article_document):
        assert extract_reference_url(article_document, 2) == "https://news.example.org/gold"

    def test_reference_without_link(self, article_document):
        assert extract_reference_url(article_document, 4) is None

    def test_missing_marker(self, article_document):
        assert extract_reference_url(article_document, 99) is None

    def test_reference_target(self, article_document):
        marker = article_document.markers()[0]

        assert reference_target(article_document, marker)["id"] == "cite_note-1"

    def test_marker_without_fragment_link(self, make_document):
        document = make_document('<p>Claim text.<sup class="reference"><a href="https://x.org">[1]</a></sup></p>')

        assert reference_target(document, document.markers()[0]) is None
