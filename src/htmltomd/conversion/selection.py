"""CSS selection and filtering of a parsed HTML document."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional

import soupsieve
from bs4 import BeautifulSoup, Tag

from ..errors import ParseError

logger = logging.getLogger(__name__)


def parse_document(html: bytes | str, encoding: Optional[str] = None) -> BeautifulSoup:
    """
    Parse fetched HTML into a document tree.

    Args:
        html: Raw HTML bytes (or already decoded text)
        encoding: Charset declared by the server, tried first for bytes

    Returns:
        A new BeautifulSoup document owned by the caller

    Raises:
        ParseError: If the parser gives up on the input
    """
    try:
        if isinstance(html, bytes) and encoding:
            return BeautifulSoup(html, "html.parser", from_encoding=encoding)
        return BeautifulSoup(html, "html.parser")
    except Exception as e:
        raise ParseError(f"Failed to parse HTML: {e}") from e


def _safe_select(root: Tag, selector: str) -> list[Tag]:
    """Run a CSS query, treating an invalid selector as one that matches nothing."""
    try:
        return root.select(selector)
    except soupsieve.SelectorSyntaxError as e:
        logger.warning(f"Invalid CSS selector {selector!r}, matching nothing: {e}")
        return []


class Selection:
    """
    A live view of part of a document.

    Either the whole document (``selector`` is None) or the elements matched
    by a selector. Filtering removes nodes from the underlying document, so a
    selection must not be shared with anything else that reads the document.

    Attributes:
        document: The document the nodes belong to
        nodes: Matched elements, in document order
        selector: Selector that produced the nodes (None for whole document)
        removed: Number of elements removed by each filter, in apply order
    """

    def __init__(
        self,
        document: BeautifulSoup,
        nodes: list[Tag],
        selector: Optional[str] = None,
    ) -> None:
        self.document = document
        self.nodes = nodes
        self.selector = selector
        self.removed: list[tuple[str, int]] = []

    @property
    def is_whole_document(self) -> bool:
        return self.selector is None

    def __len__(self) -> int:
        return len(self.nodes)

    def first(self) -> Optional[Tag]:
        """First matched node still attached to the document, if any."""
        return next((node for node in self.nodes if not node.decomposed), None)

    def html(self) -> str:
        """
        Serialize the selection.

        The whole document serializes as-is. An element selection yields the
        inner HTML of its first surviving match; later matches are not part
        of the fragment.
        """
        if self.is_whole_document:
            return self.document.decode()
        node = self.first()
        return node.decode_contents() if node is not None else ""


def select(document: BeautifulSoup, selector: str) -> Selection:
    """
    Select the region of the document to convert.

    An empty selector selects the whole document. Zero matches is a valid,
    empty selection.

    Args:
        document: Parsed document
        selector: CSS selector, or empty string

    Returns:
        Selection over the document
    """
    if not selector:
        logger.info("No selector specified, using entire document")
        return Selection(document, [document])

    nodes = _safe_select(document, selector)
    logger.info(f"Selected {len(nodes)} elements with selector: {selector}")
    return Selection(document, nodes, selector)


def apply_filters(selection: Selection, filters: Iterable[str]) -> Selection:
    """
    Remove every descendant of the selection matching each filter, in order.

    Removal detaches the matched element and its subtree from the document.
    Filters that match nothing are no-ops.

    Args:
        selection: Selection to reduce (mutated in place)
        filters: CSS selectors to remove

    Returns:
        The same selection
    """
    for selector in filters:
        removed = 0
        for root in selection.nodes:
            if isinstance(root, Tag) and root.decomposed:
                continue
            for element in _safe_select(root, selector):
                # Already gone with an earlier match's subtree
                if element.decomposed:
                    continue
                element.decompose()
                removed += 1
        selection.removed.append((selector, removed))
        logger.info(f"Filter '{selector}' removed {removed} elements")

    return selection
