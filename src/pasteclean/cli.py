"""CLI entry point for pasteclean."""

import argparse
import logging
import sys
from typing import Optional

from .errors import SettingsError
from .sanitizer import HTMLSanitizer
from .settings import SUPPORTED_PARSERS, SanitizerSettings, SettingsLoader


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pasteclean",
        description="Clean pasted HTML into an editor-friendly subset.",
        epilog=(
            "Settings are read from --config, ~/.config/pasteclean/settings.yaml "
            "or .pasteclean/settings.yaml, in that order. Flags override them."
        ),
    )
    parser.add_argument("file", nargs="?", default="-", help="Input file (default: stdin)")
    parser.add_argument("--config", help="Settings YAML file")
    parser.add_argument("--plain-text", action="store_true", help="Escape markup instead of cleaning it")
    parser.add_argument("--allow-only", action="append", default=[], metavar="TAG",
                        help="Keep only these tags (can be repeated)")
    parser.add_argument("--clean-tag", action="append", default=[], metavar="TAG",
                        help="Also remove this tag with its content (can be repeated)")
    parser.add_argument("--unwrap", action="append", default=[], metavar="TAG",
                        help="Also unwrap this tag (can be repeated)")
    parser.add_argument("--clean-attr", action="append", default=[], metavar="NAME",
                        help="Also strip this attribute (can be repeated)")
    parser.add_argument("--clean-empty-tags", action="store_true", help="Remove elements without text")
    parser.add_argument("--keep-edge-brs", action="store_true", help="Keep leading and trailing <br>")
    parser.add_argument("--no-clean", action="store_true",
                        help="Disable rewriting, removal, unwrapping and pruning")
    parser.add_argument("--parser", choices=SUPPORTED_PARSERS, help="BeautifulSoup tree builder")
    parser.add_argument("--markdown", action="store_true", help="Convert the output to Markdown")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each stage to stderr")
    return parser


def apply_overrides(settings: SanitizerSettings, args: argparse.Namespace) -> SanitizerSettings:
    """Return ``settings`` updated with the command line flags."""
    changes = {}
    if args.plain_text:
        changes["force_plain_text"] = True
    if args.allow_only:
        changes["allow_only"] = (*settings.allow_only, *args.allow_only)
    if args.clean_tag:
        changes["clean_tags"] = (*settings.clean_tags, *args.clean_tag)
    if args.unwrap:
        changes["unwrap_tags"] = (*settings.unwrap_tags, *args.unwrap)
    if args.clean_attr:
        changes["clean_attrs"] = (*settings.clean_attrs, *args.clean_attr)
    if args.clean_empty_tags:
        changes["clean_empty_tags"] = True
    if args.keep_edge_brs:
        changes["clean_edge_brs"] = False
    if args.no_clean:
        changes["clean_pasted_html"] = False
    if args.parser:
        changes["parser"] = args.parser
    return settings.replace(**changes) if changes else settings


def read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()


def run(args: Optional[list[str]] = None) -> int:
    """Run pasteclean with the given arguments. Returns exit code."""
    parsed = build_parser().parse_args(args)

    if parsed.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        settings = apply_overrides(SettingsLoader().load(parsed.config), parsed)
        sanitizer = HTMLSanitizer(settings)
    except SettingsError as exc:
        print(f"pasteclean: {exc}", file=sys.stderr)
        return 2

    try:
        html = read_input(parsed.file)
    except OSError as exc:
        print(f"pasteclean: cannot read {parsed.file}: {exc.strerror}", file=sys.stderr)
        return 1

    output = sanitizer.sanitize(html)
    if parsed.markdown:
        from .markdown import to_markdown
        output = to_markdown(output)

    sys.stdout.write(output)
    if output and not output.endswith("\n"):
        sys.stdout.write("\n")

    return 0


def main() -> None:
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
