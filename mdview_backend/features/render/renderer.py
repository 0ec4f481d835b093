"""
DocumentRenderer: markdown source -> complete HTML page.

Link, image and raw-HTML tokens are emitted by PathHandlers, which run every
destination through the resolver. The page is written to the output stream in
three parts: template head, content (one top-level block at a time), footer.
"""
from __future__ import annotations

import html
import io
import os
import re
from pathlib import Path
from typing import Any, Iterator, TextIO

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

from ...config import ConversionOptions
from ...shared import ReferenceKind, get_logger
from ..templates import Template, TemplateStore
from .handlers import CUSTOM_PRIORITY, HandlerRegistry, attr
from .preload_cache import PreloadCache
from .raw_html import rewrite_raw_html
from .resolver import ResolveContext, ResolvedReference, resolve_reference

logger = get_logger(__name__)

ARTICLE_OPEN = '<article class="markdown-body">'
ARTICLE_CLOSE = "</article>"

# Marker pair delimiting the page content; the archive runtime extracts what lies between.
CONTENT_START_MARKER = "<!-- mdview:content:start -->"
CONTENT_END_MARKER = "<!-- mdview:content:end -->"

_DOCUMENT_HEAD = (
    "<!DOCTYPE html>\n"
    '<html lang="en">\n'
    "<head>\n"
    '<meta charset="UTF-8">\n'
    '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
)

_RE_TITLE = re.compile(r"<title>[^<]*</title>", re.IGNORECASE)
_RE_UNSAFE_PROTO = re.compile(r"^(vbscript|javascript):", re.IGNORECASE)


def _escape(value: str) -> str:
    return html.escape(value or "", quote=True)


def _validate_link(url: str) -> bool:
    # The stock validator also drops file: and most data: URLs, which must survive parsing.
    return not _RE_UNSAFE_PROTO.match(url.strip())


def create_markdown() -> MarkdownIt:
    """GFM-flavoured parser: tables, strikethrough, autolinks, task lists, heading ids."""
    md = MarkdownIt(
        "commonmark",
        {"html": True, "breaks": True, "xhtmlOut": True, "typographer": True, "linkify": True},
    )
    md.enable(["table", "strikethrough", "linkify", "replacements", "smartquotes"])
    md.use(anchors_plugin, max_level=6)
    md.use(tasklists_plugin)
    md.validateLink = _validate_link
    return md


def iter_top_level_blocks(tokens: list[Token]) -> Iterator[list[Token]]:
    """Group a token stream into top-level blocks so each can be rendered and flushed."""
    chunk: list[Token] = []
    depth = 0
    for token in tokens:
        chunk.append(token)
        depth += token.nesting
        if depth <= 0:
            yield chunk
            chunk = []
            depth = 0
    if chunk:
        yield chunk


class PathHandlers:
    """Render rules for the token kinds that carry a destination."""

    def __init__(self, context: ResolveContext) -> None:
        self.context = context

    def resolve(self, dest: str, kind: ReferenceKind = "link") -> ResolvedReference:
        return resolve_reference(dest, self.context, kind)

    def register(self, registry: HandlerRegistry, priority: int = CUSTOM_PRIORITY) -> None:
        registry.register("link_open", self.render_link_open, priority)
        registry.register("image", self.render_image, priority)
        registry.register("html_block", self.render_raw_html, priority)
        registry.register("html_inline", self.render_raw_html, priority)

    def render_link_open(self, renderer: Any, tokens: list[Token], idx: int, options: Any, env: Any) -> str:
        token = tokens[idx]
        resolved = self.resolve(attr(token, "href"), "link")
        out = f'<a href="{_escape(resolved.value)}"'
        # Anything that leaves the page opens in a new tab.
        if resolved.opens_new_context:
            out += ' target="_blank"'
        title = attr(token, "title")
        if title:
            out += f' title="{_escape(title)}"'
        return out + ">"

    def render_image(self, renderer: Any, tokens: list[Token], idx: int, options: Any, env: Any) -> str:
        token = tokens[idx]
        resolved = self.resolve(attr(token, "src"), "image")
        alt = renderer.renderInlineAsText(token.children or [], options, env)
        out = f'<img src="{_escape(resolved.value)}" alt="{_escape(alt)}"'
        title = attr(token, "title")
        if title:
            out += f' title="{_escape(title)}"'
        return out + " />"

    def render_raw_html(self, renderer: Any, tokens: list[Token], idx: int, options: Any, env: Any) -> str:
        return rewrite_raw_html(tokens[idx].content, self.resolve)


class DocumentRenderer:
    """
    Render one markdown document into a complete HTML page.

    Args:
        template: Opaque head/style/script text spliced at fixed points
        context: Resolution inputs (base directory, modes, archive root, cache)
        title: Replaces the template's <title> when non-empty
    """

    def __init__(self, template: Template, context: ResolveContext, title: str = "") -> None:
        self.template = template
        self.context = context
        self.title = title
        self.registry = HandlerRegistry()
        PathHandlers(context).register(self.registry)
        self.md = self.registry.install(create_markdown())

    def _head_html(self) -> str:
        template_html = self.template.html
        if self.title:
            new_title = f"<title>{html.escape(self.title, quote=False)}</title>"
            if _RE_TITLE.search(template_html):
                template_html = _RE_TITLE.sub(lambda _m: new_title, template_html, count=1)
            else:
                template_html = new_title + "\n" + template_html
        return template_html

    def write_header(self, writer: TextIO) -> None:
        writer.write(_DOCUMENT_HEAD)
        template_html = self._head_html()
        if template_html:
            writer.write(template_html)
            writer.write("\n")
        if self.template.css:
            writer.write("<style>\n")
            writer.write(self.template.css)
            writer.write("\n</style>\n")
        writer.write("</head>\n<body>\n")
        writer.write(ARTICLE_OPEN + "\n")
        writer.write(CONTENT_START_MARKER + "\n")

    def write_footer(self, writer: TextIO) -> None:
        writer.write("\n" + CONTENT_END_MARKER + "\n")
        writer.write(ARTICLE_CLOSE + "\n")
        if self.template.js:
            writer.write("<script>\n")
            writer.write(self.template.js)
            writer.write("\n</script>\n")
        writer.write("</body>\n</html>\n")

    def render(self, source: str, writer: TextIO) -> None:
        """Stream the full page for `source` into `writer`."""
        self.write_header(writer)
        env: dict[str, Any] = {}
        tokens = self.md.parse(source, env)
        for block in iter_top_level_blocks(tokens):
            writer.write(self.md.renderer.render(block, self.md.options, env))
        self.write_footer(writer)

    def render_to_string(self, source: str) -> str:
        buf = io.StringIO()
        self.render(source, buf)
        return buf.getvalue()


def read_markdown(path: str | Path) -> str:
    # Undecodable bytes should not abort a conversion.
    return Path(path).read_text(encoding="utf-8", errors="replace")


def render_file(
    path: str | Path,
    options: ConversionOptions,
    templates: TemplateStore,
    *,
    archive_root: str = "",
    cache: PreloadCache | None = None,
    title: str | None = None,
) -> str:
    """
    Render a markdown file to a complete HTML page string.

    Args:
        path: Markdown document
        options: Conversion flags (template, self-contained, preload)
        templates: Template store; an unknown template name is fatal
        archive_root: When set, local .md links become archive navigation references
        cache: Shared preload cache; one is created for this call when preload is on
        title: Page title override (defaults to options.title)

    Raises:
        TemplateNotFoundError, OSError (unreadable document)
    """
    abs_path = os.path.abspath(str(path))
    template = templates.get(options.template)
    source = read_markdown(abs_path)

    own_cache = None
    if cache is None and options.preload and options.self_contained:
        own_cache = cache = PreloadCache(options.preload_workers)
    try:
        context = ResolveContext(
            base_dir=os.path.dirname(abs_path),
            self_contained=options.self_contained,
            archive_mode=bool(archive_root),
            archive_root=archive_root,
            cache=cache if options.self_contained else None,
        )
        renderer = DocumentRenderer(template, context, options.title if title is None else title)
        return renderer.render_to_string(source)
    finally:
        if own_cache is not None:
            own_cache.close()
