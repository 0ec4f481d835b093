from .preload_cache import PreloadCache
from .renderer import (
    CONTENT_END_MARKER,
    CONTENT_START_MARKER,
    DocumentRenderer,
    create_markdown,
    read_markdown,
    render_file,
)
from .resolver import (
    ResolveContext,
    ResolvedReference,
    archive_key,
    navigation_href,
    resolve_markdown_target,
    resolve_reference,
)

__all__ = [
    "PreloadCache",
    "DocumentRenderer",
    "create_markdown",
    "read_markdown",
    "render_file",
    "CONTENT_START_MARKER",
    "CONTENT_END_MARKER",
    "ResolveContext",
    "ResolvedReference",
    "archive_key",
    "navigation_href",
    "resolve_markdown_target",
    "resolve_reference",
]
