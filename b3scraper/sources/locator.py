"""Structural-path lookups over parsed HTML documents.

Every "where does this value live on the page" decision goes through this
module, so a source layout change breaks in exactly one place.
"""

from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup, Comment, Tag
from soupsieve import SelectorSyntaxError


def parse_document(html: str) -> BeautifulSoup:
    # html.parser keeps the source nesting (tables inside links on the holders page)
    return BeautifulSoup(html or "", "html.parser")


def locate(node: Optional[Tag], path: str) -> str:
    """Text of the first element matching ``path`` or "" when absent."""
    if node is None:
        return ""
    try:
        found = node.select_one(path)
    except SelectorSyntaxError:
        return ""
    if found is None:
        return ""
    return found.get_text()


def locate_all(node: Optional[Tag], path: str) -> List[Tag]:
    """All elements matching ``path`` in document order."""
    if node is None:
        return []
    try:
        return list(node.select(path))
    except SelectorSyntaxError:
        return []


def own_text(node: Optional[Tag]) -> str:
    """Text directly owned by ``node``, ignoring every descendant element."""
    if node is None:
        return ""
    return "".join(
        text for text in node.find_all(string=True, recursive=False)
        if not isinstance(text, Comment)
    )


__all__ = ["parse_document", "locate", "locate_all", "own_text"]
