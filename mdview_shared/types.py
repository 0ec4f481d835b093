"""
Shared types, enums, and constants.
"""
import os
from enum import Enum
from typing import Final, Literal

# Kinds of references the resolver understands
ReferenceKind = Literal["link", "image", "css"]


# Error codes
class ErrorCode(str, Enum):
    """Standardized error codes (string enum)."""

    # Input
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"

    # Templates
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"

    # Archive
    COMPRESSION_FAILED = "COMPRESSION_FAILED"
    KEY_COLLISION = "KEY_COLLISION"

    # Output
    WRITE_FAILED = "WRITE_FAILED"

    # Catch-all for anything the service did not classify
    CONVERSION_FAILED = "CONVERSION_FAILED"


class Disposition(str, Enum):
    """How a single asset/link reference was resolved."""

    PASSTHROUGH = "passthrough"
    LOCAL_FILE = "local_file"
    DATA_URI = "data_uri"
    NAVIGATION = "navigation"


# Binary image types that may be embedded as data URIs
IMAGE_MIME_TYPES: Final[dict[str, str]] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".ico": "image/x-icon",
    ".bmp": "image/bmp",
    ".avif": "image/avif",
}

# Assets referenced from CSS url(): images plus web fonts
CSS_ASSET_MIME_TYPES: Final[dict[str, str]] = {
    **IMAGE_MIME_TYPES,
    ".cur": "image/x-icon",
    ".woff2": "font/woff2",
    ".woff": "font/woff",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".eot": "application/vnd.ms-fontobject",
}

MARKDOWN_EXTENSIONS: Final[frozenset[str]] = frozenset({".md"})


def mime_type_for(path: str, kind: ReferenceKind = "image") -> str:
    """
    Infer an embeddable MIME type from the file extension.

    Args:
        path: File name or path
        kind: Reference kind; links never embed

    Returns:
        MIME type, or "" when the extension is unknown for this kind
    """
    ext = os.path.splitext(path)[1].lower()
    if kind == "image":
        return IMAGE_MIME_TYPES.get(ext, "")
    if kind == "css":
        return CSS_ASSET_MIME_TYPES.get(ext, "")
    return ""


def is_markdown_path(path: str) -> bool:
    """Return True if the path names a markdown document (case-insensitive)."""
    return os.path.splitext(path)[1].lower() in MARKDOWN_EXTENSIONS
