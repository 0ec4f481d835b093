"""
Tests for convert_document and the output writer.
"""
from __future__ import annotations

import os

import pytest

from mdview_backend import output as output_mod
from mdview_backend.config import ConversionOptions
from mdview_backend.features.convert import convert_document
from mdview_backend.output import resolve_output_path, write_output_atomic
from mdview_shared import ErrorCode, OutputWriteError, conversion_id_var


def test_single_page_conversion(write_md, templates, tmp_path):
    doc = write_md("doc.md", "# Title\n\n[ext](https://example.com)")
    out = tmp_path / "out" / "doc.html"
    res = convert_document(doc, out, ConversionOptions(template="plain"), templates)
    assert res.ok, res.error
    report = res.data
    assert report.archive is False
    assert report.pages == 1
    assert report.output_path == str(out.resolve())
    text = out.read_text(encoding="utf-8")
    assert "<h1" in text and "Title" in text
    assert "mdview archive" not in text


def test_markdown_links_without_self_contained_stay_single_page(write_md, templates, tmp_path):
    doc = write_md("doc.md", "[b](b.md)")
    write_md("b.md", "b")
    res = convert_document(doc, tmp_path / "o.html", ConversionOptions(template="plain"), templates)
    assert res.ok
    assert res.data.archive is False
    assert (tmp_path / "b.md").as_uri() in (tmp_path / "o.html").read_text(encoding="utf-8")


def test_self_contained_with_links_builds_archive(write_md, templates, tmp_path):
    doc = write_md("doc.md", "[b](b.md) [c](c.md)")
    write_md("b.md", "b")
    out = tmp_path / "Manual.html"
    options = ConversionOptions(template="plain", self_contained=True)
    res = convert_document(doc, out, options, templates)
    assert res.ok, res.error
    assert res.data.archive is True
    assert res.data.pages == 2
    assert res.data.missing == [os.path.abspath(str(tmp_path / "c.md"))]
    text = out.read_text(encoding="utf-8")
    assert "<title>Manual</title>" in text
    assert "window.mdviewArchive" in text


def test_archive_truncation_is_reported(write_md, templates, tmp_path):
    doc = write_md("doc.md", " ".join(f"[p{i}](p{i}.md)" for i in range(4)))
    for i in range(4):
        write_md(f"p{i}.md", "x")
    options = ConversionOptions(template="plain", self_contained=True, max_pages=2)
    res = convert_document(doc, tmp_path / "o.html", options, templates)
    assert res.ok
    assert res.data.pages == 2
    assert res.data.excluded == 3


def test_missing_input(tmp_path, templates):
    res = convert_document(tmp_path / "nope.md", tmp_path / "o.html", ConversionOptions(template="plain"), templates)
    assert not res.ok
    assert res.code == ErrorCode.NOT_FOUND.value
    assert not (tmp_path / "o.html").exists()


def test_unknown_template(write_md, templates, tmp_path):
    doc = write_md("doc.md", "x")
    res = convert_document(doc, tmp_path / "o.html", ConversionOptions(template="missing"), templates)
    assert not res.ok
    assert res.code == ErrorCode.TEMPLATE_NOT_FOUND.value
    assert not (tmp_path / "o.html").exists()


def test_write_failure_leaves_no_file(write_md, templates, tmp_path, monkeypatch):
    doc = write_md("doc.md", "x")
    out = tmp_path / "o.html"

    def _fail(src, dst):
        raise OSError("read-only")

    monkeypatch.setattr(output_mod.os, "replace", _fail)
    res = convert_document(doc, out, ConversionOptions(template="plain"), templates)
    assert not res.ok
    assert res.code == ErrorCode.WRITE_FAILED.value
    assert not out.exists()
    assert [p.name for p in tmp_path.iterdir() if p.name.endswith(".tmp")] == []


def test_compression_failure_aborts_archive(write_md, templates, tmp_path, monkeypatch):
    from mdview_backend.features.archive import bundle as bundle_mod

    doc = write_md("doc.md", "[b](b.md)")
    write_md("b.md", "b")

    def _boom(*args, **kwargs):
        raise OSError("no")

    monkeypatch.setattr(bundle_mod.gzip, "compress", _boom)
    out = tmp_path / "o.html"
    res = convert_document(doc, out, ConversionOptions(template="plain", self_contained=True), templates)
    assert not res.ok
    assert res.code == ErrorCode.COMPRESSION_FAILED.value
    assert not out.exists()


def test_conversion_id_is_reset(write_md, templates, tmp_path):
    doc = write_md("doc.md", "x")
    convert_document(doc, tmp_path / "o.html", ConversionOptions(template="plain"), templates)
    assert conversion_id_var.get() == ""


def test_default_output_location(write_md, templates, tmp_path, monkeypatch):
    monkeypatch.setenv("MDVIEW_OUTPUT_DIRECTORY", str(tmp_path / "outdir"))
    doc = write_md("doc.md", "x")
    res = convert_document(doc, None, ConversionOptions(template="plain"), templates)
    assert res.ok
    produced = res.data.output_path
    assert os.path.dirname(produced) == str((tmp_path / "outdir").resolve())
    assert produced.endswith(".html")
    assert os.path.isfile(produced)


# ─── output ────────────────────────────────────────────────────────────────


def test_write_output_atomic_replaces_existing(tmp_path):
    target = tmp_path / "x.html"
    target.write_text("old", encoding="utf-8")
    write_output_atomic(target, "new")
    assert target.read_text(encoding="utf-8") == "new"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["x.html"]


def test_write_output_atomic_failure_keeps_existing(tmp_path, monkeypatch):
    target = tmp_path / "x.html"
    target.write_text("old", encoding="utf-8")

    def _fail(src, dst):
        raise OSError("nope")

    monkeypatch.setattr(output_mod.os, "replace", _fail)
    with pytest.raises(OutputWriteError):
        write_output_atomic(target, "new")
    assert target.read_text(encoding="utf-8") == "old"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["x.html"]


def test_resolve_output_path_creates_parents(tmp_path):
    path = resolve_output_path(tmp_path / "a" / "b" / "out.html")
    assert path.parent.is_dir()
    assert path.name == "out.html"
