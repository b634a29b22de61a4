"""Sanitizer settings and the YAML settings loader.

Settings are loaded with priority resolution:
1. Explicit path passed by the caller (highest priority)
2. User config: ~/.config/pasteclean/settings.yaml
3. Project config: .pasteclean/settings.yaml in current directory
4. Built-in defaults (fallback)
"""

import dataclasses
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import soupsieve

from .errors import SettingsError

logger = logging.getLogger(__name__)

# Lazy import yaml to avoid startup cost
_yaml = None


def _get_yaml():
    """Lazy-load PyYAML."""
    global _yaml
    if _yaml is None:
        import yaml
        _yaml = yaml
    return _yaml


Replacement = tuple[re.Pattern, str]

SUPPORTED_PARSERS = ("html.parser", "lxml")

BOOLEAN_OPTIONS = ("force_plain_text", "clean_pasted_html", "clean_empty_tags", "clean_edge_brs")

DEFAULT_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    (r"<b>", "<strong>"),
    (r"<b\s[^>]*>", "<strong>"),
    (r"</b>", "</strong>"),
    (r"<i>", "<em>"),
    (r"<i\s[^>]*>", "<em>"),
    (r"</i>", "</em>"),
    (r"<div", "<p"),
    (r"</div>", "</p>"),
)

# Option names used by the browser paste tool, mapped to field names
CAMEL_CASE_ALIASES = {
    "forcePlainText": "force_plain_text",
    "allowOnly": "allow_only",
    "cleanPastedHTML": "clean_pasted_html",
    "cleanEmptyTags": "clean_empty_tags",
    "allowedEmptyTags": "allowed_empty_tags",
    "cleanEdgeBrs": "clean_edge_brs",
    "cleanReplacements": "clean_replacements",
    "cleanAttrs": "clean_attrs",
    "cleanTags": "clean_tags",
    "unwrapTags": "unwrap_tags",
}


def compile_replacements(rules: Iterable[Any]) -> tuple[Replacement, ...]:
    """Compile (pattern, replacement) rules.

    String patterns are compiled case-insensitively. Already compiled
    patterns keep their own flags.

    Raises:
        SettingsError: If a rule is malformed or a pattern does not compile.
    """
    if isinstance(rules, (str, bytes)) or not isinstance(rules, Iterable):
        raise SettingsError(f"clean_replacements must be a list of (pattern, replacement) pairs, got {rules!r}")
    compiled = []
    for rule in rules:
        try:
            pattern, replacement = rule
        except (TypeError, ValueError):
            raise SettingsError(f"Replacement rule must be a (pattern, replacement) pair: {rule!r}")
        if not isinstance(replacement, str):
            raise SettingsError(f"Replacement for {pattern!r} must be a string, got {replacement!r}")
        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern, re.IGNORECASE)
            except re.error as exc:
                raise SettingsError(f"Invalid replacement pattern {pattern!r}: {exc}") from exc
        elif not isinstance(pattern, re.Pattern):
            raise SettingsError(f"Replacement pattern must be a string or compiled regex: {pattern!r}")
        compiled.append((pattern, replacement))
    return tuple(compiled)


def _as_names(value: Union[str, Iterable[str]], option: str) -> tuple[str, ...]:
    """Normalize a single name or an iterable of names to a tuple."""
    if isinstance(value, str):
        value = [value]
    elif not isinstance(value, Iterable):
        raise SettingsError(f"{option} must be a name or a list of names, got {value!r}")
    names = []
    for name in value:
        if not isinstance(name, str) or not name.strip():
            raise SettingsError(f"{option} entries must be non-empty strings, got {name!r}")
        names.append(name.strip())
    return tuple(names)


def _check_selectors(selectors: tuple[str, ...], option: str) -> None:
    for selector in selectors:
        try:
            soupsieve.compile(selector)
        except soupsieve.SelectorSyntaxError as exc:
            raise SettingsError(f"Invalid selector {selector!r} in {option}: {exc}") from exc


@dataclass(frozen=True)
class SanitizerSettings:
    """Immutable sanitizer configuration.

    Validated once at construction and read by every sanitize call, so a
    single instance can be shared between threads.

    Attributes:
        force_plain_text: Escape angle brackets and skip all tree cleaning
        allow_only: Tag names or selectors to keep; everything else is
            unwrapped, or removed when it has no text
        clean_pasted_html: Master switch for rewriting, removal, attribute
            stripping, unwrapping and pruning
        clean_empty_tags: Remove elements without text
        allowed_empty_tags: Tag names exempt from empty-tag removal
        clean_edge_brs: Remove leading and trailing <br> runs
        clean_replacements: Ordered (pattern, replacement) text rewrites
        clean_attrs: Attribute names stripped from every element
        clean_tags: Tag names or selectors removed with their content
        unwrap_tags: Tag names or selectors replaced by their children
        parser: BeautifulSoup tree builder used to parse fragments
    """

    force_plain_text: bool = False
    allow_only: tuple[str, ...] = ()
    clean_pasted_html: bool = True
    clean_empty_tags: bool = False
    allowed_empty_tags: frozenset[str] = frozenset({"br", "hr"})
    clean_edge_brs: bool = True
    clean_replacements: tuple[Replacement, ...] = field(
        default_factory=lambda: compile_replacements(DEFAULT_REPLACEMENTS)
    )
    clean_attrs: tuple[str, ...] = ("class", "style", "id", "dir", "draggable")
    clean_tags: tuple[str, ...] = ("meta", "script", "style", "iframe")
    unwrap_tags: tuple[str, ...] = ()
    parser: str = "html.parser"

    def __post_init__(self) -> None:
        for option in BOOLEAN_OPTIONS:
            value = getattr(self, option)
            if not isinstance(value, bool):
                raise SettingsError(f"{option} must be true or false, got {value!r}")

        # Frozen, so normalized values are written through object.__setattr__
        normalized = {
            "allow_only": _as_names(self.allow_only, "allow_only"),
            "allowed_empty_tags": frozenset(
                name.lower() for name in _as_names(self.allowed_empty_tags, "allowed_empty_tags")
            ),
            "clean_replacements": compile_replacements(self.clean_replacements),
            "clean_attrs": tuple(
                name.lower() for name in _as_names(self.clean_attrs, "clean_attrs")
            ),
            "clean_tags": _as_names(self.clean_tags, "clean_tags"),
            "unwrap_tags": _as_names(self.unwrap_tags, "unwrap_tags"),
        }
        for name, value in normalized.items():
            object.__setattr__(self, name, value)

        for option in ("allow_only", "clean_tags", "unwrap_tags"):
            _check_selectors(getattr(self, option), option)

        if self.parser not in SUPPORTED_PARSERS:
            raise SettingsError(
                f"Unsupported parser {self.parser!r}; expected one of {', '.join(SUPPORTED_PARSERS)}"
            )

    @classmethod
    def from_dict(cls, config_dict: dict) -> "SanitizerSettings":
        """Create settings from a dictionary.

        Keys may be field names (``clean_empty_tags``) or the camelCase
        option names of the browser paste tool (``cleanEmptyTags``).

        Raises:
            SettingsError: On unknown keys or invalid values.
        """
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        options = {}
        for key, value in config_dict.items():
            name = CAMEL_CASE_ALIASES.get(key, key)
            if name not in valid_fields:
                raise SettingsError(f"Unknown sanitizer option: {key}")
            if name in options:
                raise SettingsError(f"Sanitizer option {name} given more than once (as {key})")
            options[name] = value
        return cls(**options)

    def replace(self, **changes: Any) -> "SanitizerSettings":
        """Return a validated copy with the given fields changed."""
        return dataclasses.replace(self, **changes)


class SettingsLoader:
    """Find and load a settings file.

    Config locations are checked in priority order after an explicit path:
    1. ~/.config/pasteclean/settings.yaml - User settings
    2. .pasteclean/settings.yaml - Project-specific settings

    When no file is found the built-in defaults are used.
    """

    FILENAME = "settings.yaml"

    def __init__(self, config_locations: Optional[list[Path]] = None):
        if config_locations is None:
            config_locations = [
                Path.home() / ".config" / "pasteclean",  # User settings
                Path.cwd() / ".pasteclean",               # Project settings
            ]
        self.config_locations = config_locations

    def find_config_file(self) -> Optional[Path]:
        """Return the first settings file found, or None."""
        for config_dir in self.config_locations:
            config_file = config_dir / self.FILENAME
            if config_file.is_file():
                return config_file
        return None

    def load(self, path: Optional[Union[str, Path]] = None) -> SanitizerSettings:
        """Load settings from ``path`` or the first config location found.

        Raises:
            SettingsError: If the file cannot be read or parsed, or holds
                invalid options.
        """
        config_file = Path(path) if path is not None else self.find_config_file()
        if config_file is None:
            logger.debug("No settings file found, using defaults")
            return SanitizerSettings()

        logger.debug("Loading settings from %s", config_file)
        return SanitizerSettings.from_dict(self._read(config_file))

    def _read(self, config_file: Path) -> dict:
        yaml = _get_yaml()

        try:
            content = config_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise SettingsError(f"Cannot read settings file {config_file}: {exc}") from exc

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise SettingsError(f"Invalid YAML in {config_file}: {exc}") from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise SettingsError(f"Settings file {config_file} must contain a mapping")
        return data


def load_settings(path: Optional[Union[str, Path]] = None) -> SanitizerSettings:
    """Convenience function: load settings with the default lookup."""
    return SettingsLoader().load(path)
