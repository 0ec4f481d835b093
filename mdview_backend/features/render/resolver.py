"""
Asset/link reference resolution.

Every destination found while rendering (structured links and images, and
src/href/url() values inside verbatim HTML) goes through `resolve_reference`,
which decides one of four dispositions:

- passthrough: anchors and non-file schemes are returned unchanged
- navigation: archive mode only, local markdown targets become
  `javascript:mdviewLoadPage('<key>')`
- data_uri: self-contained mode only, embeddable local files are inlined
- local_file: everything else that resolves locally becomes a file: URL

`archive_key` is the single key normalization used by the graph builder, the
packager and the navigation references; keep them on this one function.
"""
from __future__ import annotations

import base64
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlsplit
from urllib.request import url2pathname

from ...shared import Disposition, ReferenceKind, get_logger, is_markdown_path, mime_type_for

if TYPE_CHECKING:
    from .preload_cache import PreloadCache

logger = get_logger(__name__)

NAVIGATION_FUNCTION = "mdviewLoadPage"
NAVIGATION_PREFIX = f"javascript:{NAVIGATION_FUNCTION}("

# Two or more characters so Windows drive letters ("C:") are not mistaken for a scheme.
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]+:")


@dataclass(frozen=True)
class ResolveContext:
    """Inputs that, together with the filesystem, fully determine a resolution."""

    base_dir: str = ""
    self_contained: bool = False
    archive_mode: bool = False
    archive_root: str = ""
    cache: "PreloadCache | None" = None


@dataclass(frozen=True)
class ResolvedReference:
    value: str
    disposition: Disposition

    @property
    def opens_new_context(self) -> bool:
        """True when the emitted link should carry target="_blank"."""
        if self.disposition == Disposition.NAVIGATION:
            return False
        return not self.value.startswith("#")


def split_destination(dest: str) -> tuple[str, str, str]:
    """Split a destination into (path, query, fragment) without touching the scheme."""
    path, _, fragment = dest.partition("#")
    path, _, query = path.partition("?")
    return path, query, fragment


def _is_file_url(dest: str) -> bool:
    return dest[:5].lower() == "file:"


def is_passthrough(dest: str) -> bool:
    """Anchors, empty destinations and any non-file scheme are left alone."""
    if not dest or dest.startswith("#"):
        return True
    if _is_file_url(dest):
        return False
    return "://" in dest or bool(_SCHEME_RE.match(dest))


def local_path_for(dest: str, base_dir: str) -> str | None:
    """
    Resolve a destination to an absolute local path.

    Relative paths are joined to `base_dir`; `file:` URLs are converted
    directly. Query and fragment are dropped, percent-escapes decoded.

    Returns:
        Absolute normalized path, or None when the destination is not local
        or cannot be resolved (no base directory).
    """
    if _is_file_url(dest):
        parts = urlsplit(dest)
        if parts.netloc and parts.netloc.lower() != "localhost":
            return None
        if not parts.path:
            return None
        return os.path.abspath(url2pathname(parts.path))
    if is_passthrough(dest):
        return None
    if not base_dir:
        return None
    path, _, _ = split_destination(dest)
    if not path:
        return None
    return os.path.abspath(os.path.join(base_dir, unquote(path)))


def resolve_markdown_target(dest: str, base_dir: str) -> str | None:
    """
    Return the absolute path of a local markdown link target, else None.

    Shared by the archive link scanner and the renderer so discovery and
    navigation agree on which destinations are archive pages.
    """
    if not dest or dest.startswith("#"):
        return None
    if _is_file_url(dest):
        target_path = urlsplit(dest).path
    else:
        if is_passthrough(dest):
            return None
        target_path, _, _ = split_destination(dest)
    if not is_markdown_path(unquote(target_path)):
        return None
    return local_path_for(dest, base_dir)


def archive_key(abs_path: str, root_dir: str) -> str:
    """
    Root-relative, forward-slash key for a document inside an archive.

    The result does not depend on the host separator: both os.sep and
    backslashes are normalized to "/".
    """
    try:
        rel = os.path.relpath(abs_path, root_dir)
    except ValueError:
        # Different drives on Windows; fall back to the file name.
        rel = os.path.basename(abs_path)
    if os.sep != "/":
        rel = rel.replace(os.sep, "/")
    return rel.replace("\\", "/")


def navigation_href(key: str) -> str:
    """Encode a bundle key as a navigation reference for the archive runtime."""
    escaped = key.replace("\\", "\\\\").replace("'", "\\'")
    return f"{NAVIGATION_PREFIX}'{escaped}')"


def is_navigation_href(value: str) -> bool:
    return value.startswith(NAVIGATION_PREFIX)


def data_uri(mime: str, data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def _read_asset(path: str, cache: "PreloadCache | None") -> bytes | None:
    if cache is not None:
        # Warm the rest of the directory in the background, never wait on it.
        cache.prefetch_directory(os.path.dirname(path))
        data = cache.get(path)
        if data is not None:
            return data
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        logger.debug("Asset not embeddable, falling back to file URL: %s (%s)", path, exc)
        return None
    if cache is not None:
        cache.put(path, data)
    return data


def resolve_reference(dest: str, ctx: ResolveContext, kind: ReferenceKind = "link") -> ResolvedReference:
    """
    Resolve one destination string.

    Args:
        dest: Raw destination as written in the document
        ctx: Base directory, mode flags and archive root
        kind: "link", "image" or "css" (url() inside verbatim HTML)

    Returns:
        The value to emit and how it was obtained
    """
    dest = dest or ""

    # Must run before the scheme check so file:// markdown links still navigate.
    if kind == "link" and ctx.archive_mode and ctx.archive_root:
        target = resolve_markdown_target(dest, ctx.base_dir)
        if target is not None:
            key = archive_key(target, ctx.archive_root)
            return ResolvedReference(navigation_href(key), Disposition.NAVIGATION)

    if is_passthrough(dest):
        return ResolvedReference(dest, Disposition.PASSTHROUGH)

    abs_path = local_path_for(dest, ctx.base_dir)
    if abs_path is None:
        return ResolvedReference(dest, Disposition.PASSTHROUGH)

    if ctx.self_contained and kind != "link":
        mime = mime_type_for(abs_path, kind)
        if mime:
            data = _read_asset(abs_path, ctx.cache)
            if data is not None:
                return ResolvedReference(data_uri(mime, data), Disposition.DATA_URI)

    uri = Path(abs_path).as_uri()
    if kind == "link":
        fragment = split_destination(dest)[2] if not _is_file_url(dest) else urlsplit(dest).fragment
        if fragment:
            uri = f"{uri}#{fragment}"
    return ResolvedReference(uri, Disposition.LOCAL_FILE)
