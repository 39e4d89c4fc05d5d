"""
BeautifulSoup helpers for scraping government pages.

Responsibility: Load HTML and apply ordered selector fallbacks
"""

from typing import Iterable, List, Optional, Union

from bs4 import BeautifulSoup, Tag

from .text import safe_text

Node = Union[BeautifulSoup, Tag]


def load_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def select_first_matching(root: Node, selectors: Iterable[str]) -> List[Tag]:
    """
    Return the elements of the first selector that matches anything.

    Government sites change markup without notice, so parsers list several
    selectors from most to least specific.
    """
    for selector in selectors:
        found = root.select(selector)
        if found:
            return found
    return []


def first_text(root: Node, selector: str) -> str:
    """Normalized text of the first element matching a (comma-joined) selector"""
    element = root.select_one(selector)
    return safe_text(element.get_text()) if element else ""


def find_link(root: Node, text_keyword: Optional[str] = None, href_keyword: Optional[str] = None) -> Optional[str]:
    """
    Find the href of the first link whose text or href mentions a keyword.

    Matching is case-insensitive.
    """
    for anchor in root.find_all("a", href=True):
        text = safe_text(anchor.get_text()).lower()
        href = anchor["href"]
        if text_keyword and text_keyword.lower() in text:
            return href
        if href_keyword and href_keyword.lower() in href.lower():
            return href
    return None
