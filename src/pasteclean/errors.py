"""Exceptions raised by pasteclean."""


class PastecleanError(Exception):
    """Base class for pasteclean errors."""


class SettingsError(PastecleanError, ValueError):
    """Invalid sanitizer configuration."""
