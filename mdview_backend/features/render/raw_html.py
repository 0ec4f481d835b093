"""
Reference rewriting for verbatim HTML regions.

Raw HTML in a markdown source is opaque to the token tree, so src/href
attributes and CSS url() values are found by pattern and passed to the same
resolve function the structured handlers use.
"""
from __future__ import annotations

import html
import re
from typing import Callable

from ...shared import Disposition, ReferenceKind
from .resolver import ResolvedReference

ResolveFn = Callable[[str, ReferenceKind], ResolvedReference]

_RE_SRC = re.compile(r"""(src=["'])([^"']+)(["'])""", re.IGNORECASE)
_RE_ANCHOR = re.compile(r"""(<a\s+[^>]*href=["'])([^"']+)(["'][^>]*)(>)""", re.IGNORECASE)
_RE_CSS_URL = re.compile(r"""(url\(["']?)([^"')]+)(["']?\))""", re.IGNORECASE)
_RE_TARGET = re.compile(r"\btarget\s*=", re.IGNORECASE)

# Shared with the archive scanner's verbatim fallback.
RE_HREF = re.compile(r"""href=["']([^"']+)["']""", re.IGNORECASE)


def rewrite_raw_html(content: str, resolve: ResolveFn) -> str:
    """Rewrite every src, anchor href and url() reference in a raw HTML fragment."""

    def repl_src(m: re.Match) -> str:
        return m.group(1) + resolve(m.group(2), "image").value + m.group(3)

    def repl_anchor(m: re.Match) -> str:
        prefix, dest, middle, close = m.group(1), m.group(2), m.group(3), m.group(4)
        resolved = resolve(dest, "link")
        value = resolved.value
        if resolved.disposition == Disposition.NAVIGATION:
            # The key is quoted with ' inside; keep it legal in either attribute quoting.
            value = html.escape(value, quote=True)
        if resolved.opens_new_context and not _RE_TARGET.search(prefix + middle):
            return prefix + value + middle + ' target="_blank"' + close
        return prefix + value + middle + close

    def repl_css(m: re.Match) -> str:
        dest = m.group(2).strip()
        return m.group(1) + resolve(dest, "css").value + m.group(3)

    content = _RE_SRC.sub(repl_src, content)
    content = _RE_ANCHOR.sub(repl_anchor, content)
    content = _RE_CSS_URL.sub(repl_css, content)
    return content
