"""Markup tree adapter backed by BeautifulSoup.

Parsing and serialization are delegated to BeautifulSoup; the helpers here
give the tree stages DOM-like primitives (text content, unwrap, removal)
on top of ``bs4`` elements.
"""

import logging
import warnings
from typing import Optional

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning
from bs4.builder import ParserRejectedMarkup
from bs4.dammit import EntitySubstitution
from bs4.element import (
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    PageElement,
    ProcessingInstruction,
    Tag,
)
from bs4.formatter import HTMLFormatter

logger = logging.getLogger(__name__)

# String types that do not contribute to an element's text content
_NON_TEXT_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


def _substitute_entities(value: str) -> str:
    """Escape text the way a browser serializes innerHTML."""
    return EntitySubstitution.substitute_xml(value).replace("\xa0", "&nbsp;")


# Void elements without a closing slash: <br>, not <br/>
INNER_HTML_FORMATTER = HTMLFormatter(
    entity_substitution=_substitute_entities,
    void_element_close_prefix=None,
)


class SoupTree:
    """Parse fragments into a BeautifulSoup tree and serialize them back.

    ``html.parser`` keeps the fragment as-is under the document root.
    ``lxml`` builds a full document; its ``<body>`` is used as the root.
    """

    def __init__(self, parser: str = "html.parser"):
        self.parser = parser

    def parse(self, markup: str) -> Tag:
        """Parse a markup fragment and return its container element.

        Markup the parser rejects outright is kept as a single text node.
        """
        try:
            with warnings.catch_warnings():
                # Short fragments like "notes.txt" trip bs4's filename heuristic
                warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
                soup = BeautifulSoup(markup, self.parser, multi_valued_attributes=None)
        except ParserRejectedMarkup as exc:
            logger.debug("Parser rejected markup, keeping it as text: %s", exc)
            root = BeautifulSoup("", "html.parser")
            root.append(NavigableString(markup))
            return root

        if self.parser == "html.parser":
            return soup
        if soup.body is None:
            return BeautifulSoup("", "html.parser")
        return soup.body

    def serialize(self, root: Tag) -> str:
        """Return the inner markup of ``root``."""
        return root.decode_contents(formatter=INNER_HTML_FORMATTER)


def text_content(element: PageElement) -> str:
    """Concatenated descendant text, like the DOM ``textContent``."""
    if isinstance(element, NavigableString):
        return "" if isinstance(element, _NON_TEXT_STRINGS) else str(element)
    return "".join(
        str(node)
        for node in element.descendants
        if isinstance(node, NavigableString) and not isinstance(node, _NON_TEXT_STRINGS)
    )


def is_blank(element: PageElement) -> bool:
    """True if the element's text content is empty after trimming."""
    return text_content(element).strip() == ""


def is_attached(element: PageElement, root: Tag) -> bool:
    """True if ``element`` is still a descendant of ``root``."""
    parent: Optional[Tag] = element.parent
    while parent is not None:
        if parent is root:
            return True
        parent = parent.parent
    return False


def remove(element: PageElement) -> None:
    """Detach an element and its subtree."""
    element.extract()


def unwrap(element: Tag) -> None:
    """Replace an element with its children, preserving their order."""
    element.unwrap()


def replace_with_text(element: PageElement, text: str) -> None:
    """Replace an element with a single text node."""
    element.replace_with(NavigableString(text))
