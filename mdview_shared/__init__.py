"""Shared utilities for mdview."""
from .errors import (
    ArchiveKeyCollisionError,
    CompressionError,
    DocumentNotFoundError,
    MdviewError,
    OutputWriteError,
    TemplateNotFoundError,
    error_code_for,
)
from .log import conversion_id_var, get_logger, log_structured, log_success
from .result import Result
from .time import now, timer
from .types import (
    Disposition,
    ErrorCode,
    ReferenceKind,
    is_markdown_path,
    mime_type_for,
)

__all__ = [
    "Result",
    "get_logger",
    "log_success",
    "log_structured",
    "conversion_id_var",
    "now",
    "timer",
    "ErrorCode",
    "Disposition",
    "ReferenceKind",
    "mime_type_for",
    "is_markdown_path",
    "MdviewError",
    "DocumentNotFoundError",
    "TemplateNotFoundError",
    "CompressionError",
    "ArchiveKeyCollisionError",
    "OutputWriteError",
    "error_code_for",
]
