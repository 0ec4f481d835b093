"""Backend-facing alias for shared utilities.

Backend modules import from here so the shared package can move without
touching every feature module.
"""

from __future__ import annotations

import mdview_shared as _root_shared

Result = _root_shared.Result
ErrorCode = _root_shared.ErrorCode
Disposition = _root_shared.Disposition
ReferenceKind = _root_shared.ReferenceKind
get_logger = _root_shared.get_logger
log_success = _root_shared.log_success
log_structured = _root_shared.log_structured
conversion_id_var = _root_shared.conversion_id_var
now = _root_shared.now
timer = _root_shared.timer
mime_type_for = _root_shared.mime_type_for
is_markdown_path = _root_shared.is_markdown_path
MdviewError = _root_shared.MdviewError
DocumentNotFoundError = _root_shared.DocumentNotFoundError
TemplateNotFoundError = _root_shared.TemplateNotFoundError
CompressionError = _root_shared.CompressionError
ArchiveKeyCollisionError = _root_shared.ArchiveKeyCollisionError
OutputWriteError = _root_shared.OutputWriteError
error_code_for = _root_shared.error_code_for

__all__ = list(_root_shared.__all__)
