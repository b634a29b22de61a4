"""Tree-level stages applied to the parsed fragment.

Every stage snapshots its matches in document order before mutating the
tree. A snapshotted node whose ancestor was already removed is skipped, so
each live node is handled exactly once.
"""

import soupsieve
from bs4.element import Tag

from .settings import SanitizerSettings
from .stages import TreeStage
from .tree import is_attached, is_blank, remove, replace_with_text, text_content, unwrap

NBSP = "\xa0"


def _select(selector: str, root: Tag) -> list[Tag]:
    # soupsieve caches compiled selectors
    return soupsieve.select(selector, root)


class SpanCollapser(TreeStage):
    """Collapse whitespace-only <span> wrappers.

    Pasting can produce <span>&nbsp;</span>; that becomes a plain space.
    Spans holding only other whitespace are dropped.
    """

    @property
    def name(self) -> str:
        return "SpanCollapser"

    @property
    def slug(self) -> str:
        return "collapse-spans"

    def should_process(self, settings: SanitizerSettings) -> bool:
        return True

    def process(self, root: Tag, settings: SanitizerSettings) -> None:
        for span in root.find_all("span"):
            if not is_attached(span, root):
                continue
            text = text_content(span)
            if text == NBSP:
                replace_with_text(span, " ")
            elif text.strip() == "":
                remove(span)


class DenylistRemover(TreeStage):
    """Remove elements matching ``clean_tags``, content included."""

    @property
    def name(self) -> str:
        return "DenylistRemover"

    @property
    def slug(self) -> str:
        return "clean-tags"

    def should_process(self, settings: SanitizerSettings) -> bool:
        return settings.clean_pasted_html and bool(settings.clean_tags)

    def process(self, root: Tag, settings: SanitizerSettings) -> None:
        for element in _select(", ".join(settings.clean_tags), root):
            if is_attached(element, root):
                remove(element)


class AllowlistFilter(TreeStage):
    """Drop every element not matched by ``allow_only``.

    Elements with text are unwrapped so the text survives; empty ones
    (or ones holding a lone &nbsp;) are removed.
    """

    @property
    def name(self) -> str:
        return "AllowlistFilter"

    @property
    def slug(self) -> str:
        return "allow-only"

    def should_process(self, settings: SanitizerSettings) -> bool:
        return bool(settings.allow_only)

    def process(self, root: Tag, settings: SanitizerSettings) -> None:
        not_allowed = "".join(f":not({selector})" for selector in settings.allow_only)
        for element in _select(not_allowed, root):
            if not is_attached(element, root):
                continue
            trimmed = text_content(element).strip()
            if trimmed == "" or trimmed == NBSP:
                remove(element)
            else:
                unwrap(element)


class AttributeStripper(TreeStage):
    """Remove the ``clean_attrs`` attributes from every element."""

    @property
    def name(self) -> str:
        return "AttributeStripper"

    @property
    def slug(self) -> str:
        return "clean-attrs"

    def should_process(self, settings: SanitizerSettings) -> bool:
        return settings.clean_pasted_html and bool(settings.clean_attrs)

    def process(self, root: Tag, settings: SanitizerSettings) -> None:
        for element in root.find_all(True):
            for attr in settings.clean_attrs:
                if attr in element.attrs:
                    del element[attr]


class TagUnwrapper(TreeStage):
    """Unwrap every element matching ``unwrap_tags``, one selector at a time."""

    @property
    def name(self) -> str:
        return "TagUnwrapper"

    @property
    def slug(self) -> str:
        return "unwrap-tags"

    def should_process(self, settings: SanitizerSettings) -> bool:
        return settings.clean_pasted_html and bool(settings.unwrap_tags)

    def process(self, root: Tag, settings: SanitizerSettings) -> None:
        for selector in settings.unwrap_tags:
            for element in _select(selector, root):
                if is_attached(element, root):
                    unwrap(element)


class EmptyTagPruner(TreeStage):
    """Remove elements without text, except ``allowed_empty_tags``."""

    @property
    def name(self) -> str:
        return "EmptyTagPruner"

    @property
    def slug(self) -> str:
        return "clean-empty-tags"

    def should_process(self, settings: SanitizerSettings) -> bool:
        return settings.clean_pasted_html and settings.clean_empty_tags

    def process(self, root: Tag, settings: SanitizerSettings) -> None:
        for element in root.find_all(True):
            if not is_attached(element, root):
                continue
            if element.name.lower() in settings.allowed_empty_tags:
                continue
            if is_blank(element):
                remove(element)


class EdgeBreakPruner(TreeStage):
    """Remove leading <br> elements and trailing runs of <br> elements.

    Contenteditable surfaces tend to add these at the edges of a block.
    """

    @property
    def name(self) -> str:
        return "EdgeBreakPruner"

    @property
    def slug(self) -> str:
        return "clean-edge-brs"

    def should_process(self, settings: SanitizerSettings) -> bool:
        return settings.clean_pasted_html and settings.clean_edge_brs

    def process(self, root: Tag, settings: SanitizerSettings) -> None:
        for br in root.find_all("br"):
            if not is_attached(br, root):
                continue
            if br.previous_sibling is None or self._ends_trailing_run(br):
                remove(br)

    @staticmethod
    def _ends_trailing_run(br: Tag) -> bool:
        """True if only <br> elements follow ``br`` among its siblings."""
        sibling = br.next_sibling
        while sibling is not None:
            if not (isinstance(sibling, Tag) and sibling.name == "br"):
                return False
            sibling = sibling.next_sibling
        return True
