"""
Conversion service: one markdown file in, one HTML file out.

Self-contained conversions of documents that link to other local markdown
files produce an archive; everything else is a single page. Operation-level
failures are returned as Result.Err; per-asset and per-link problems only log.
"""
from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path

from ...config import ConversionOptions
from ...output import resolve_output_path, write_output_atomic
from ...shared import (
    ErrorCode,
    MdviewError,
    Result,
    conversion_id_var,
    error_code_for,
    get_logger,
    log_success,
)
from ..archive import ArchivePackager, build_graph, has_markdown_links
from ..render import render_file
from ..templates import TemplateStore

logger = get_logger(__name__)


@dataclass
class ConversionReport:
    input_path: str
    output_path: str
    archive: bool = False
    pages: int = 1
    missing: list[str] = field(default_factory=list)
    excluded: int = 0


def _wants_archive(abs_input: str, options: ConversionOptions) -> bool:
    if not options.self_contained:
        return False
    try:
        return has_markdown_links(abs_input)
    except OSError as exc:
        # Fall back to a single page; the render below reports unreadable input.
        logger.warning("Failed to check for markdown links: %s", exc)
        return False


def _render_archive(abs_input: str, dest: Path, options: ConversionOptions, templates: TemplateStore, report: ConversionReport) -> str:
    graph = build_graph(abs_input, options.max_pages)
    logger.info("Building archive with %d pages...", graph.count)
    if not options.title:
        options = options.with_title(dest.stem)
    report.archive = True
    report.pages = graph.count
    report.missing = list(graph.missing)
    report.excluded = graph.excluded
    return ArchivePackager(graph, options, templates).render_archive()


def convert_document(
    input_path: str | Path,
    output_path: str | Path | None = None,
    options: ConversionOptions | None = None,
    templates: TemplateStore | None = None,
) -> Result[ConversionReport]:
    """
    Convert `input_path` and write the result.

    Args:
        input_path: Markdown document
        output_path: Destination; a temp-style location is chosen when omitted
        options: Conversion flags (defaults from MDVIEW_* environment)
        templates: Template store (defaults to the bundled templates)

    Returns:
        Result with a ConversionReport, or an error code from ErrorCode
    """
    options = options or ConversionOptions()
    templates = templates or TemplateStore()
    token = conversion_id_var.set(secrets.token_hex(3))
    try:
        abs_input = os.path.abspath(str(input_path))
        if not os.path.isfile(abs_input):
            return Result.Err(ErrorCode.NOT_FOUND, f"input file does not exist: {abs_input}")

        # Unknown templates abort before any work is done.
        templates.get(options.template)
        dest = resolve_output_path(output_path)

        report = ConversionReport(input_path=abs_input, output_path=str(dest))
        if _wants_archive(abs_input, options):
            text = _render_archive(abs_input, dest, options, templates, report)
        else:
            text = render_file(abs_input, options, templates)

        write_output_atomic(dest, text)
        log_success(logger, f"Wrote {report.pages} page(s) to {dest}")
        return Result.Ok(report)
    except MdviewError as exc:
        logger.error("%s", exc)
        return Result.Err(exc.code, str(exc))
    except OSError as exc:
        logger.error("Conversion failed: %s", exc)
        return Result.Err(error_code_for(exc), f"conversion failed: {exc}")
    finally:
        conversion_id_var.reset(token)
