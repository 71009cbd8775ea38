"""Element selection over posting HTML with BeautifulSoup.

Pages are parsed with the ``lxml`` tree builder, which applies HTML's
implied end tags (``<li>a<li>b`` is two items).  JSON-LD descriptions
are raw site HTML and rely on that.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from jobkeywords.text import clean_text


def parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def _outermost(elements: list[Tag]) -> list[Tag]:
    """Drop elements nested inside another element of *elements*."""
    chosen = {id(element) for element in elements}
    return [e for e in elements if not any(id(parent) in chosen for parent in e.parents)]


def text_of(element: Tag, separator: str = "") -> str:
    return clean_text(element.get_text(separator))


def first_text(root: Tag, selector: str) -> str | None:
    """Cleaned text of the first element matching *selector*, or ``None``."""
    element = root.select_one(selector)
    return text_of(element) if element is not None else None


def items_of(root: Tag, item: str = "li") -> list[str]:
    """Cleaned, non-empty text of each outermost *item* under *root*.

    Nested items stay part of their enclosing item's text.
    """
    texts = (text_of(element) for element in _outermost(root.select(item)))
    return [text for text in texts if text]


def list_items(root: Tag, container: str, item: str = "li") -> list[str] | None:
    """List items inside every outermost element matching *container*.

    Returns ``None`` when no container matched, and an empty list when
    containers matched but held no items.
    """
    containers = _outermost(root.select(container))
    if not containers:
        return None
    return [text for element in containers for text in items_of(element, item)]


def script_texts(root: Tag, script_type: str) -> list[str]:
    """Raw contents of every ``<script type=...>`` block."""
    return [
        script.string or ""
        for script in root.select(f'script[type="{script_type}"]')
    ]
