from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

from thrift_tools.formatter.formatter_core import format_thrift_content
from thrift_tools.formatter.options import (
    COLLECTION_STYLE_CHOICES,
    TRAILING_COMMA_CHOICES,
    ConfigError,
    FormattingOptions,
    load_options_file,
)
from thrift_tools.generator.outline_generator import generate_outlines

logger = logging.getLogger(__name__)

_ALIGN_OPTIONS = (
    "align_types",
    "align_field_names",
    "align_annotations",
    "align_comments",
    "align_enum_names",
    "align_enum_equals",
    "align_enum_values",
)


def _find_files(paths: List[str]) -> List[str]:
    """Expand directories into the .thrift files found under them."""
    results = []
    for path in paths:
        p = Path(path)
        if p.is_dir():
            results.extend(str(f) for f in sorted(p.rglob("*.thrift")))
        elif p.is_file():
            results.append(str(p))
        else:
            logger.warning("Skipping missing path %s", path)
    return results


def _build_options(args: argparse.Namespace) -> FormattingOptions:
    """Options from --config, then overridden by explicit flags."""
    options = load_options_file(args.config) if args.config else FormattingOptions()
    overrides = {}
    if args.indent_size is not None:
        overrides["indent_size"] = args.indent_size
    if args.max_line_length is not None:
        overrides["max_line_length"] = args.max_line_length
    if args.trailing_comma is not None:
        overrides["trailing_comma"] = args.trailing_comma
    if args.collection_style is not None:
        overrides["collection_style"] = args.collection_style
    if args.use_tabs:
        overrides["insert_spaces"] = False
    if args.no_align:
        overrides.update({name: False for name in _ALIGN_OPTIONS})
    return dataclasses.replace(options, **overrides)


def _read(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def run_format(paths: List[str], options: FormattingOptions, write: bool) -> int:
    """Format files in place (``write``) or print the formatted text."""
    thrift_files = _find_files(paths)
    if not thrift_files:
        print(f"No .thrift files found under {', '.join(paths)}")
        return 1

    for thrift_file in thrift_files:
        original = _read(thrift_file)
        formatted = format_thrift_content(original, options)
        if not write:
            sys.stdout.write(formatted)
            continue
        if formatted != original:
            Path(thrift_file).write_text(formatted, encoding="utf-8")
            print(f"Formatted {thrift_file}")
        else:
            logger.info("Unchanged %s", thrift_file)
    return 0


def run_check(paths: List[str], options: FormattingOptions) -> int:
    """Report files whose formatting would change. Returns 1 if any would."""
    thrift_files = _find_files(paths)
    if not thrift_files:
        print(f"No .thrift files found under {', '.join(paths)}")
        return 1

    unformatted = []
    for thrift_file in thrift_files:
        original = _read(thrift_file)
        if format_thrift_content(original, options) != original:
            unformatted.append(thrift_file)
            print(f"Would reformat {thrift_file}")

    if unformatted:
        print(f"{len(unformatted)} of {len(thrift_files)} file(s) need formatting")
        return 1
    print(f"All {len(thrift_files)} file(s) are formatted")
    return 0


def run_outline(paths: List[str], output_dir: str) -> int:
    """Write a Markdown outline per .thrift file."""
    thrift_files = _find_files(paths)
    if not thrift_files:
        print(f"No .thrift files found under {', '.join(paths)}")
        return 1

    for f in generate_outlines(thrift_files, output_dir):
        print(f"  Generated outline: {f}")
    print("Done!")
    return 0


def _add_format_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("paths", nargs="+", help=".thrift files or directories to scan")
    parser.add_argument("--config", help="JSON file of formatting options (camelCase keys)")
    parser.add_argument("--indent-size", type=int, help="Spaces per indent level")
    parser.add_argument("--max-line-length", type=int, help="Line length used by collection-style auto")
    parser.add_argument("--trailing-comma", choices=TRAILING_COMMA_CHOICES, help="Member separator policy")
    parser.add_argument("--collection-style", choices=COLLECTION_STYLE_CHOICES, help="Const collection layout")
    parser.add_argument("--use-tabs", action="store_true", help="Indent with tabs")
    parser.add_argument("--no-align", action="store_true", help="Disable all column alignment")


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Thrift IDL formatter and outline tool",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    format_parser = subparsers.add_parser("format", help="Format .thrift files")
    _add_format_flags(format_parser)
    format_parser.add_argument("--write", action="store_true", help="Rewrite files in place")

    check_parser = subparsers.add_parser("check", help="Exit 1 if any file is not formatted")
    _add_format_flags(check_parser)

    outline_parser = subparsers.add_parser("outline", help="Generate Markdown outlines")
    outline_parser.add_argument("paths", nargs="+", help=".thrift files or directories to scan")
    outline_parser.add_argument("--output-dir", required=True, help="Directory for generated .md files")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "outline":
        sys.exit(run_outline(args.paths, args.output_dir))

    try:
        options = _build_options(args)
    except ConfigError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "format":
        sys.exit(run_format(args.paths, options, args.write))
    sys.exit(run_check(args.paths, options))
