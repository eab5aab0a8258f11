"""
Document Tree - traversal interface used by the claim extractor.

The extractor never touches a concrete HTML library. It works against
DocumentTree, which needs four capabilities:
- enumerate citation marker nodes in document order
- find the nearest block-level ancestor of a node
- get the document-order text between two nodes inside a block
- compare the document order of two nodes

SoupDocument implements the interface over a BeautifulSoup tree.

Nodes are compared by identity, never by equality: BeautifulSoup tags
compare structurally, so two "[3]" markers would be equal.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag


# Rendered label of a citation marker, e.g. "[12]"
MARKER_LABEL_PATTERN = re.compile(r"^\[(\d+)\]$")

DEFAULT_MARKER_SELECTOR = ".reference"


class DocumentTree(ABC):
    """Read-only view over a rendered document with citation markers."""

    @abstractmethod
    def markers(self) -> List[Any]:
        """All citation marker nodes, in document order."""

    @abstractmethod
    def marker_label(self, marker: Any) -> Optional[int]:
        """Numeric index N of a marker rendered as [N], or None."""

    @abstractmethod
    def enclosing_block(self, node: Any, block_tags: Iterable[str]) -> Optional[Any]:
        """Nearest ancestor whose tag is one of block_tags."""

    @abstractmethod
    def markers_within(self, block: Any) -> List[Any]:
        """Marker nodes inside block, in document order."""

    @abstractmethod
    def text_between(self, block: Any, start: Optional[Any], end: Optional[Any]) -> str:
        """
        Concatenated text strictly between start and end within block.

        start=None means the beginning of block, end=None its end.
        Text inside start and end themselves is excluded.
        """

    @abstractmethod
    def text_content(self, node: Any) -> str:
        """Full text of node, in document order."""

    @abstractmethod
    def compare_order(self, a: Any, b: Any) -> int:
        """Negative if a precedes b, zero if same node, positive otherwise."""


class SoupDocument(DocumentTree):
    """
    DocumentTree over a parsed BeautifulSoup document.

    Markers are the elements matched by marker_selector whose text is a
    bracketed number (Wikipedia renders them as <sup class="reference">).
    """

    def __init__(
        self,
        soup: BeautifulSoup,
        marker_selector: str = DEFAULT_MARKER_SELECTOR,
    ):
        """
        Initialize the document.

        Args:
            soup: Parsed document (never mutated)
            marker_selector: CSS selector identifying marker elements
        """
        self.soup = soup
        self.marker_selector = marker_selector

        # Document-order index of every node, keyed by identity
        self._nodes: List[Any] = list(soup.descendants)
        self._order: Dict[int, int] = {
            id(node): position for position, node in enumerate(self._nodes)
        }

    @classmethod
    def from_html(
        cls,
        html: str,
        marker_selector: str = DEFAULT_MARKER_SELECTOR,
    ) -> "SoupDocument":
        """Parse an HTML string into a SoupDocument."""
        return cls(BeautifulSoup(html, "html.parser"), marker_selector=marker_selector)

    def _position(self, node: Any) -> int:
        if node is self.soup:
            return -1
        try:
            return self._order[id(node)]
        except KeyError:
            raise ValueError("Node does not belong to this document")

    def _subtree_end(self, node: Any) -> int:
        """Position of the last node inside node's subtree."""
        if isinstance(node, Tag):
            return self._position(node) + sum(1 for _ in node.descendants)
        return self._position(node)

    @staticmethod
    def _is_text(node: Any) -> bool:
        # Comments, CDATA and doctypes are not rendered text
        return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)

    def markers(self) -> List[Any]:
        return [
            marker for marker in self.soup.select(self.marker_selector)
            if self.marker_label(marker) is not None
        ]

    def marker_label(self, marker: Any) -> Optional[int]:
        match = MARKER_LABEL_PATTERN.match(marker.get_text().strip())
        if not match:
            return None
        return int(match.group(1))

    def enclosing_block(self, node: Any, block_tags: Iterable[str]) -> Optional[Any]:
        names = set(block_tags)
        for parent in node.parents:
            if parent.name in names:
                return parent
        return None

    def markers_within(self, block: Any) -> List[Any]:
        # Lettered note markers ([a], [b]) also bound claims
        return block.select(self.marker_selector)

    def text_between(self, block: Any, start: Optional[Any], end: Optional[Any]) -> str:
        lower = self._subtree_end(start) if start is not None else self._position(block)
        upper = self._position(end) if end is not None else self._subtree_end(block) + 1
        return "".join(
            str(node) for node in self._nodes[lower + 1:upper] if self._is_text(node)
        )

    def text_content(self, node: Any) -> str:
        if isinstance(node, NavigableString):
            return str(node) if self._is_text(node) else ""
        return self.text_between(node, None, None)

    def compare_order(self, a: Any, b: Any) -> int:
        return self._position(a) - self._position(b)

    def element_by_id(self, element_id: str) -> Optional[Tag]:
        """Element with the given id attribute, if any."""
        return self.soup.find(id=element_id)
