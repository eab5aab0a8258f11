"""
Reference lookup - resolves a citation marker to its source URL.

A marker links to its reference entry ("#cite_note-..."). Inside the
entry, archived copies are preferred over the live link, and links back
into Wikipedia/Wikimedia are skipped when an external one exists.
"""

from typing import List, Optional
from urllib.parse import urljoin

from bs4.element import Tag

from .document import SoupDocument


ARCHIVE_HOSTS = (
    "web.archive.org",
    "archive.today",
    "archive.is",
    "archive.ph",
    "webcitation.org",
)

INTERNAL_HOSTS = ("wikipedia.org", "wikimedia.org")


def reference_target(document: SoupDocument, marker: Tag) -> Optional[Tag]:
    """Reference entry element a marker links to, if any."""
    link = marker if marker.name == "a" else marker.find("a", href=True)
    if link is None:
        return None

    href = link.get("href") or ""
    if not href.startswith("#") or len(href) < 2:
        return None

    return document.element_by_id(href[1:])


def _resolve_links(reference: Tag, base_url: Optional[str]) -> List[str]:
    links = []
    for anchor in reference.find_all("a", href=True):
        href = anchor["href"].strip()
        if base_url:
            href = urljoin(base_url, href)
        links.append(href)
    return links


def extract_url_from_reference(reference: Tag, base_url: Optional[str] = None) -> Optional[str]:
    """
    Pick the source URL from a reference entry.

    Args:
        reference: Reference entry element
        base_url: Page URL used to resolve relative links

    Returns:
        Archive link, else first external http link, else first http link
    """
    links = _resolve_links(reference, base_url)

    for href in links:
        if any(host in href for host in ARCHIVE_HOSTS):
            return href

    http_links = [href for href in links if href.startswith("http")]
    if not http_links:
        return None

    for href in http_links:
        if not any(host in href for host in INTERNAL_HOSTS):
            return href

    return http_links[0]


def extract_reference_url(
    document: SoupDocument,
    citation_index: int,
    base_url: Optional[str] = None,
) -> Optional[str]:
    """
    Source URL cited by [citation_index].

    Uses the first marker with that index whose link resolves to a
    reference entry. Returns None when no entry or no link is found.
    """
    for marker in document.markers():
        if document.marker_label(marker) != citation_index:
            continue

        target = reference_target(document, marker)
        if target is not None:
            return extract_url_from_reference(target, base_url=base_url)

    return None
