"""Paste orchestration on top of a platform clipboard adapter.

The platform (an editor widget, a browser bridge, a test double) implements
``ClipboardAdapter``; ``HTMLPaster`` reads the pasted markup through it,
sanitizes it and inserts the result at the cursor.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from .sanitizer import HTMLSanitizer

logger = logging.getLogger(__name__)

HTML_MIME = "text/html"
TEXT_MIME = "text/plain"

PrePasteCallback = Callable[[Any], None]
PasteCallback = Callable[[str], None]


class ClipboardAdapter(ABC):
    """Narrow interface to the host clipboard and editing surface."""

    @abstractmethod
    def get_data(self, mime_type: str) -> Optional[str]:
        """Return clipboard content for ``mime_type``, or None if absent."""
        pass

    @abstractmethod
    def insert_at_cursor(self, markup: str) -> None:
        """Insert markup at the current cursor position."""
        pass

    @property
    def requires_staging(self) -> bool:
        """True on platforms without direct access to clipboard HTML.

        Those platforms paste natively into a hidden staging surface, and
        the markup is read back from there.
        """
        return False

    def save_selection(self) -> Any:
        """Return an opaque handle to the current selection."""
        raise NotImplementedError

    def create_staging_surface(self) -> None:
        """Create the hidden surface and move the selection into it."""
        raise NotImplementedError

    def read_staging_surface(self) -> str:
        """Return the markup the native paste put on the staging surface."""
        raise NotImplementedError

    def restore_selection(self, selection: Any) -> None:
        """Restore a selection saved by ``save_selection``."""
        raise NotImplementedError

    def destroy_staging_surface(self) -> None:
        """Remove the staging surface."""
        raise NotImplementedError


class MemoryClipboard(ClipboardAdapter):
    """In-memory clipboard that records inserted markup.

    With ``requires_staging=True`` the staged content is the HTML flavor,
    as a native paste would produce it.
    """

    def __init__(
        self,
        html: Optional[str] = None,
        text: Optional[str] = None,
        requires_staging: bool = False,
    ):
        self._data = {HTML_MIME: html, TEXT_MIME: text}
        self._requires_staging = requires_staging
        self.inserted: list[str] = []
        self.staging_surface: Optional[str] = None
        self.selection = 0

    def get_data(self, mime_type: str) -> Optional[str]:
        return self._data.get(mime_type)

    def insert_at_cursor(self, markup: str) -> None:
        self.inserted.append(markup)
        self.selection += 1

    @property
    def requires_staging(self) -> bool:
        return self._requires_staging

    def save_selection(self) -> int:
        return self.selection

    def create_staging_surface(self) -> None:
        self.staging_surface = self._data[HTML_MIME] or self._data[TEXT_MIME] or ""

    def read_staging_surface(self) -> str:
        if self.staging_surface is None:
            raise RuntimeError("No staging surface")
        return self.staging_surface

    def restore_selection(self, selection: int) -> None:
        self.selection = selection

    def destroy_staging_surface(self) -> None:
        self.staging_surface = None


def _log_paste(html: str) -> None:
    logger.debug("Pasted: %s", html)


class HTMLPaster:
    """Sanitize and insert clipboard content, one paste attempt at a time."""

    def __init__(
        self,
        adapter: ClipboardAdapter,
        sanitizer: Optional[HTMLSanitizer] = None,
        pre_paste: Optional[PrePasteCallback] = None,
        post_paste: Optional[PasteCallback] = None,
    ):
        """Initialize the paster.

        Args:
            adapter: Platform clipboard adapter.
            sanitizer: Sanitizer to clean pasted markup. Defaults to
                ``HTMLSanitizer()``.
            pre_paste: Called with the paste event before sanitizing.
            post_paste: Called with the cleaned markup. Defaults to a
                debug log.
        """
        self.adapter = adapter
        self.sanitizer = sanitizer or HTMLSanitizer()
        self.pre_paste = pre_paste or (lambda event: None)
        self.post_paste = post_paste or _log_paste

    def paste(self, event: Any = None) -> str:
        """Run one paste attempt and return the inserted markup."""
        if self.sanitizer.settings.force_plain_text:
            raw = self.adapter.get_data(TEXT_MIME) or ""
            self.pre_paste(event)
        elif self.adapter.requires_staging:
            self.pre_paste(event)
            raw = self._read_through_staging()
        else:
            raw = self.adapter.get_data(HTML_MIME) or self.adapter.get_data(TEXT_MIME) or ""
            self.pre_paste(event)

        html = self.sanitizer.sanitize(raw)
        self.post_paste(html)
        self.adapter.insert_at_cursor(html)
        return html

    def _read_through_staging(self) -> str:
        selection = self.adapter.save_selection()
        self.adapter.create_staging_surface()
        try:
            raw = self.adapter.read_staging_surface()
        finally:
            try:
                self.adapter.restore_selection(selection)
            finally:
                self.adapter.destroy_staging_surface()
        logger.debug("Read %d characters from staging surface", len(raw))
        return raw
