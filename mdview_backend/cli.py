"""Convert a markdown file to a styled HTML page (or a navigable archive).

Usage:
    mdview [options] <input.md> [output.html]
    python -m mdview_backend --self-contained --preload README.md out.html
"""
from __future__ import annotations

import argparse
import sys

from . import __version__
from .config import DEFAULT_MAX_PAGES, DEFAULT_PRELOAD, DEFAULT_SELF_CONTAINED, DEFAULT_TEMPLATE, ConversionOptions
from .features.convert import convert_document
from .features.templates import TemplateStore


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mdview", description="Markdown to HTML viewer.")
    parser.add_argument("input", nargs="?", help="Path to the markdown file to convert")
    parser.add_argument("output", nargs="?", help="Output path (default: random file in the mdview output directory)")
    parser.add_argument("--template", default=DEFAULT_TEMPLATE, help="Template name to use for styling")
    parser.add_argument(
        "--self-contained",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_SELF_CONTAINED,
        help="Embed images as data URIs and bundle linked local .md files into one archive",
    )
    parser.add_argument(
        "--preload",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_PRELOAD,
        help="Read every image in a directory in the background once one is referenced (with --self-contained)",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=DEFAULT_MAX_PAGES,
        help="Maximum number of pages to include in an archive",
    )
    parser.add_argument("--title", default="", help="Page title (archives default to the output file name)")
    parser.add_argument("--list-templates", action="store_true", help="List available templates and exit")
    parser.add_argument("--version", action="version", version=f"mdview {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    templates = TemplateStore()

    if args.list_templates:
        print("Available templates:")
        for name in templates.names():
            print(f"  - {name}")
        return 0

    if not args.input:
        parser.print_usage(sys.stderr)
        print("Error: input markdown file is required", file=sys.stderr)
        return 1
    if args.max_pages < 1:
        print("Error: --max-pages must be at least 1", file=sys.stderr)
        return 1

    options = ConversionOptions(
        template=args.template,
        self_contained=args.self_contained,
        preload=args.preload,
        max_pages=args.max_pages,
        title=args.title,
    )
    res = convert_document(args.input, args.output, options, templates)
    if not res.ok:
        print(f"Error: {res.error}", file=sys.stderr)
        if res.code == "TEMPLATE_NOT_FOUND":
            print("Use --list-templates to see available templates", file=sys.stderr)
        return 1
    print(f"Generated: {res.data.output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
