"""
Bundle wire format shared with the browser-side navigation runtime.

    <script>
    window.mdviewArchive = {"pages": {"<key>": "<base64(gzip(html))>", ...}, "root": "<key>"};
    </script>
    <script> inflate.js </script>
    <script> navigation.js </script>

The block is injected verbatim before the root page's closing </body>.
"""
from __future__ import annotations

import base64
import binascii
import gzip
import json
import zlib
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from ...config import ARCHIVE_ASSETS_DIR
from ...shared import CompressionError

BUNDLE_GLOBAL = "window.mdviewArchive"
ARCHIVE_MARKER = "<!-- mdview archive -->"


@dataclass
class Bundle:
    root: str
    pages: dict[str, str] = field(default_factory=dict)

    def to_json(self) -> str:
        payload = {"pages": dict(sorted(self.pages.items())), "root": self.root}
        text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
        # Keep the literal from closing its own <script> element.
        return text.replace("</", "<\\/")


def encode_page(html_text: str) -> str:
    """gzip then base64 a rendered page. Any failure here is fatal for the archive."""
    try:
        compressed = gzip.compress(html_text.encode("utf-8"), mtime=0)
    except (OSError, zlib.error, ValueError, MemoryError) as exc:
        raise CompressionError(f"failed to compress page: {exc}") from exc
    return base64.b64encode(compressed).decode("ascii")


def decode_page(payload: str) -> str:
    """Inverse of encode_page (used by tests and tooling; the browser does its own)."""
    try:
        return gzip.decompress(base64.b64decode(payload, validate=True)).decode("utf-8")
    except (OSError, binascii.Error, zlib.error, EOFError) as exc:
        raise CompressionError(f"failed to decode page: {exc}") from exc


@lru_cache(maxsize=None)
def _runtime_script(name: str, root: str = str(ARCHIVE_ASSETS_DIR)) -> str:
    return (Path(root) / name).read_text(encoding="utf-8")


def bundle_script(bundle: Bundle) -> str:
    """Return the literal markup injected into the root page."""
    parts = [
        f"\n{ARCHIVE_MARKER}\n",
        "<script>\n",
        f"{BUNDLE_GLOBAL} = {bundle.to_json()};\n",
        "</script>\n",
        "<script>\n",
        _runtime_script("inflate.js"),
        "\n</script>\n",
        "<script>\n",
        _runtime_script("navigation.js"),
        "\n</script>\n",
    ]
    return "".join(parts)


def inject_before_closing_tag(page: str, closing_tag: str, content: str) -> str:
    """Insert `content` before the last `closing_tag`; append when the tag is absent."""
    index = page.rfind(closing_tag)
    if index == -1:
        return page + content
    return page[:index] + content + page[index:]
