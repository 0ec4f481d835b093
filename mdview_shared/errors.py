"""
Operation-level errors.

Per-asset and per-link problems never raise; they degrade and log. Only the
structural failures below abort a conversion.
"""
from __future__ import annotations

from .types import ErrorCode


class MdviewError(Exception):
    """Base class for failures that abort a whole conversion."""

    code: ErrorCode = ErrorCode.CONVERSION_FAILED

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class DocumentNotFoundError(MdviewError):
    code = ErrorCode.NOT_FOUND


class TemplateNotFoundError(MdviewError):
    code = ErrorCode.TEMPLATE_NOT_FOUND


class CompressionError(MdviewError):
    code = ErrorCode.COMPRESSION_FAILED


class ArchiveKeyCollisionError(MdviewError):
    """Two different documents normalized to the same bundle key."""

    code = ErrorCode.KEY_COLLISION


class OutputWriteError(MdviewError):
    code = ErrorCode.WRITE_FAILED


def error_code_for(exc: BaseException) -> ErrorCode:
    """Map an exception to the error code reported to callers."""
    if isinstance(exc, MdviewError):
        return exc.code
    if isinstance(exc, FileNotFoundError):
        return ErrorCode.NOT_FOUND
    return ErrorCode.CONVERSION_FAILED
