"""
Discovery of local markdown links inside a document.

Two passes feed one list: the parsed token tree (structured links) and a
verbatim href scan over the raw text (links inside raw HTML). Both use the
renderer's `resolve_markdown_target`, so a link counts as an archive page here
exactly when the renderer turns it into a navigation reference.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator

from markdown_it.token import Token

from ..render.raw_html import RE_HREF
from ..render.renderer import create_markdown, read_markdown
from ..render.resolver import resolve_markdown_target


def _walk(tokens: Iterable[Token]) -> Iterator[Token]:
    for token in tokens:
        yield token
        if token.children:
            yield from _walk(token.children)


def _dedupe(paths: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for p in paths:
        if p not in seen:
            seen.add(p)
            out.append(p)
    return out


def scan_markdown_links(content: str, base_dir: str) -> list[str]:
    """
    Extract absolute paths of local .md files linked from `content`.

    Args:
        content: Markdown source
        base_dir: Directory relative links resolve against

    Returns:
        Absolute paths in first-seen order, without duplicates
    """
    found: list[str] = []

    md = create_markdown()
    for token in _walk(md.parse(content, {})):
        if token.type != "link_open":
            continue
        target = resolve_markdown_target(str(token.attrGet("href") or ""), base_dir)
        if target is not None:
            found.append(target)

    # Raw HTML is opaque to the parser.
    for m in RE_HREF.finditer(content):
        target = resolve_markdown_target(m.group(1), base_dir)
        if target is not None:
            found.append(target)

    return _dedupe(found)


def has_markdown_links(md_path: str | Path) -> bool:
    """
    Return True if the document links to at least one local markdown file.

    Raises:
        OSError: the document cannot be read
    """
    abs_path = os.path.abspath(str(md_path))
    content = read_markdown(abs_path)
    return bool(scan_markdown_links(content, os.path.dirname(abs_path)))
