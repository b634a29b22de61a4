"""Text-level stages applied before the markup is parsed."""

import re

from .settings import SanitizerSettings
from .stages import TextStage, TextStageResult

# Copies from Word or IE can carry comments, including multi-line ones
COMMENT_PATTERN = re.compile(r"<!--[\s\S]*?-->", re.IGNORECASE)

ANGLE_BRACKET_PATTERN = re.compile(r"[<>]")


class CommentStripper(TextStage):
    """Remove markup comments."""

    @property
    def name(self) -> str:
        return "CommentStripper"

    @property
    def slug(self) -> str:
        return "strip-comments"

    def should_process(self, settings: SanitizerSettings) -> bool:
        return True

    def process(self, markup: str, settings: SanitizerSettings) -> TextStageResult:
        return TextStageResult.proceed(COMMENT_PATTERN.sub("", markup))


class PlainTextEscaper(TextStage):
    """Escape angle brackets as numeric character references.

    Finishes the pipeline: plain text is never parsed.
    """

    @property
    def name(self) -> str:
        return "PlainTextEscaper"

    @property
    def slug(self) -> str:
        return "plain-text"

    def should_process(self, settings: SanitizerSettings) -> bool:
        return settings.force_plain_text

    def process(self, markup: str, settings: SanitizerSettings) -> TextStageResult:
        escaped = ANGLE_BRACKET_PATTERN.sub(lambda m: f"&#{ord(m.group(0))};", markup)
        return TextStageResult.finish(escaped)


class PatternRewriter(TextStage):
    """Apply the configured (pattern, replacement) rules in order.

    The default rules turn <b>/<i> into <strong>/<em> and <div> into <p>.
    """

    @property
    def name(self) -> str:
        return "PatternRewriter"

    @property
    def slug(self) -> str:
        return "replacements"

    def should_process(self, settings: SanitizerSettings) -> bool:
        return settings.clean_pasted_html and bool(settings.clean_replacements)

    def process(self, markup: str, settings: SanitizerSettings) -> TextStageResult:
        for pattern, replacement in settings.clean_replacements:
            if pattern.search(markup):
                markup = pattern.sub(replacement, markup)
        return TextStageResult.proceed(markup)
