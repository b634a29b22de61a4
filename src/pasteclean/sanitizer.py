"""HTML sanitizer for pasted content.

Runs a fixed sequence of stages over a markup string:

1. Comment stripping
2. Plain-text escaping (ends the pipeline when enabled)
3. Pattern rewriting
4. Parse
5. Whitespace-only span collapsing
6. Denylist removal
7. Allowlist filtering
8. Attribute stripping
9. Explicit unwrapping
10. Empty tag pruning
11. Edge <br> pruning
12. Serialize
"""

import logging
from typing import Any, Optional

from .settings import SanitizerSettings
from .stages import Stage, TextStageChain, TreeStageChain
from .text_stages import CommentStripper, PatternRewriter, PlainTextEscaper
from .tree import SoupTree
from .tree_stages import (
    AllowlistFilter,
    AttributeStripper,
    DenylistRemover,
    EdgeBreakPruner,
    EmptyTagPruner,
    SpanCollapser,
    TagUnwrapper,
)

logger = logging.getLogger(__name__)


class HTMLSanitizer:
    """Clean pasted markup into an editor-friendly subset.

    Holds no per-call state: each ``sanitize`` call parses its own tree, so
    one instance can serve many threads.
    """

    def __init__(self, settings: Optional[SanitizerSettings] = None, **options: Any):
        """Initialize the sanitizer.

        Args:
            settings: Settings to use. Defaults to ``SanitizerSettings()``.
            **options: Field overrides applied on top of ``settings``,
                e.g. ``HTMLSanitizer(clean_empty_tags=True)``.

        Raises:
            SettingsError: If the resulting settings are invalid.
        """
        if settings is None:
            settings = SanitizerSettings()
        if options:
            settings = settings.replace(**options)
        self.settings = settings
        self._tree = SoupTree(settings.parser)
        self._text_chain = TextStageChain([
            CommentStripper(),
            PlainTextEscaper(),
            PatternRewriter(),
        ])
        self._tree_chain = TreeStageChain([
            SpanCollapser(),
            DenylistRemover(),
            AllowlistFilter(),
            AttributeStripper(),
            TagUnwrapper(),
            EmptyTagPruner(),
            EdgeBreakPruner(),
        ])

    @property
    def stages(self) -> list[Stage]:
        """All stages in execution order."""
        return [*self._text_chain.stages, *self._tree_chain.stages]

    def sanitize(self, html: str) -> str:
        """Return cleaned markup for ``html``.

        Never raises for malformed markup; parser recovery is left to
        BeautifulSoup.
        """
        result = self._text_chain.execute(html, self.settings)
        if result.finished:
            return result.markup

        root = self._tree.parse(result.markup)
        self._tree_chain.execute(root, self.settings)
        cleaned = self._tree.serialize(root)
        logger.debug("Sanitized %d characters into %d", len(html), len(cleaned))
        return cleaned


def sanitize(html: str, **options: Any) -> str:
    """Convenience function: sanitize ``html`` once.

    For repeated use, prefer creating an HTMLSanitizer instance.
    """
    return HTMLSanitizer(**options).sanitize(html)
