"""Clean pasted HTML into a normalized, editor-friendly subset."""

from .errors import PastecleanError, SettingsError
from .markdown import to_markdown
from .paster import ClipboardAdapter, HTMLPaster, MemoryClipboard
from .sanitizer import HTMLSanitizer, sanitize
from .settings import SanitizerSettings, SettingsLoader, load_settings

__all__ = [
    "HTMLSanitizer",
    "sanitize",
    "SanitizerSettings",
    "SettingsLoader",
    "load_settings",
    "HTMLPaster",
    "ClipboardAdapter",
    "MemoryClipboard",
    "to_markdown",
    "PastecleanError",
    "SettingsError",
]
