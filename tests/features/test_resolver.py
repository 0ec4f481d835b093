"""
Tests for the reference resolver: dispositions, archive keys, navigation refs.
"""
from __future__ import annotations

import base64
import os

import pytest

from mdview_backend.features.render.resolver import (
    ResolveContext,
    archive_key,
    is_navigation_href,
    is_passthrough,
    local_path_for,
    navigation_href,
    resolve_markdown_target,
    resolve_reference,
    split_destination,
)
from mdview_shared import Disposition


# ─── passthrough ───────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "dest",
    [
        "",
        "#section",
        "https://example.com/page.md",
        "http://example.com/a.png",
        "mailto:someone@example.com",
        "data:image/png;base64,AAAA",
        "ftp://host/file",
    ],
)
def test_non_local_destinations_pass_through(tmp_path, dest):
    ctx = ResolveContext(base_dir=str(tmp_path), self_contained=True, archive_mode=True, archive_root=str(tmp_path))
    for kind in ("link", "image", "css"):
        res = resolve_reference(dest, ctx, kind)
        assert res.value == dest
        assert res.disposition == Disposition.PASSTHROUGH


def test_is_passthrough_keeps_file_urls_local():
    assert is_passthrough("file:///tmp/a.png") is False
    assert is_passthrough("FILE:///tmp/a.png") is False
    assert is_passthrough("images/a.png") is False


def test_windows_drive_letter_is_not_a_scheme():
    assert is_passthrough("C:/docs/a.png") is False


def test_anchor_does_not_open_new_context(tmp_path):
    res = resolve_reference("#top", ResolveContext(base_dir=str(tmp_path)), "link")
    assert res.opens_new_context is False


def test_external_link_opens_new_context(tmp_path):
    res = resolve_reference("https://example.com", ResolveContext(base_dir=str(tmp_path)), "link")
    assert res.opens_new_context is True


# ─── local files ───────────────────────────────────────────────────────────


def test_relative_image_becomes_file_url_when_not_self_contained(tmp_path, png_bytes):
    (tmp_path / "img").mkdir()
    (tmp_path / "img" / "a.png").write_bytes(png_bytes)
    res = resolve_reference("img/a.png", ResolveContext(base_dir=str(tmp_path)), "image")
    assert res.disposition == Disposition.LOCAL_FILE
    assert res.value == (tmp_path / "img" / "a.png").as_uri()


def test_relative_image_embeds_when_self_contained(tmp_path, png_bytes):
    (tmp_path / "a.png").write_bytes(png_bytes)
    res = resolve_reference("a.png", ResolveContext(base_dir=str(tmp_path), self_contained=True), "image")
    assert res.disposition == Disposition.DATA_URI
    prefix = "data:image/png;base64,"
    assert res.value.startswith(prefix)
    assert base64.b64decode(res.value[len(prefix):]) == png_bytes


def test_missing_asset_falls_back_to_file_url(tmp_path):
    ctx = ResolveContext(base_dir=str(tmp_path), self_contained=True)
    res = resolve_reference("nope.png", ctx, "image")
    assert res.disposition == Disposition.LOCAL_FILE
    assert res.value == (tmp_path / "nope.png").as_uri()


def test_unknown_extension_is_not_embedded(tmp_path):
    (tmp_path / "notes.txt").write_text("hello", encoding="utf-8")
    res = resolve_reference("notes.txt", ResolveContext(base_dir=str(tmp_path), self_contained=True), "image")
    assert res.disposition == Disposition.LOCAL_FILE


def test_links_are_never_embedded(tmp_path, png_bytes):
    (tmp_path / "a.png").write_bytes(png_bytes)
    res = resolve_reference("a.png", ResolveContext(base_dir=str(tmp_path), self_contained=True), "link")
    assert res.disposition == Disposition.LOCAL_FILE


def test_css_url_embeds_fonts(tmp_path):
    (tmp_path / "f.woff2").write_bytes(b"wOF2")
    res = resolve_reference("f.woff2", ResolveContext(base_dir=str(tmp_path), self_contained=True), "css")
    assert res.value.startswith("data:font/woff2;base64,")


def test_local_link_keeps_fragment(tmp_path):
    res = resolve_reference("other.html#part", ResolveContext(base_dir=str(tmp_path)), "link")
    assert res.value == (tmp_path / "other.html").as_uri() + "#part"


def test_file_url_image_embeds(tmp_path, png_bytes):
    path = tmp_path / "b.png"
    path.write_bytes(png_bytes)
    res = resolve_reference(path.as_uri(), ResolveContext(base_dir="", self_contained=True), "image")
    assert res.disposition == Disposition.DATA_URI


def test_percent_escaped_path_resolves(tmp_path, png_bytes):
    (tmp_path / "my pic.png").write_bytes(png_bytes)
    res = resolve_reference("my%20pic.png", ResolveContext(base_dir=str(tmp_path), self_contained=True), "image")
    assert res.disposition == Disposition.DATA_URI


def test_local_path_for_rejects_remote_file_host():
    assert local_path_for("file://server/share/a.png", "/tmp") is None


def test_local_path_without_base_dir_is_unresolved():
    assert local_path_for("a.png", "") is None
    res = resolve_reference("a.png", ResolveContext(base_dir=""), "image")
    assert res.disposition == Disposition.PASSTHROUGH


def test_split_destination():
    assert split_destination("a/b.md?x=1#frag") == ("a/b.md", "x=1", "frag")
    assert split_destination("a.md") == ("a.md", "", "")


# ─── archive navigation ────────────────────────────────────────────────────


def test_markdown_link_navigates_in_archive_mode(tmp_path):
    ctx = ResolveContext(base_dir=str(tmp_path / "docs"), archive_mode=True, archive_root=str(tmp_path))
    res = resolve_reference("guide/intro.md#setup", ctx, "link")
    assert res.disposition == Disposition.NAVIGATION
    assert res.value == "javascript:mdviewLoadPage('docs/guide/intro.md')"
    assert res.opens_new_context is False


def test_file_url_markdown_link_navigates_before_scheme_check(tmp_path):
    target = tmp_path / "sub" / "page.md"
    ctx = ResolveContext(base_dir=str(tmp_path), archive_mode=True, archive_root=str(tmp_path))
    res = resolve_reference(target.as_uri(), ctx, "link")
    assert res.disposition == Disposition.NAVIGATION
    assert res.value == navigation_href("sub/page.md")


def test_remote_markdown_link_is_not_navigation(tmp_path):
    ctx = ResolveContext(base_dir=str(tmp_path), archive_mode=True, archive_root=str(tmp_path))
    res = resolve_reference("https://example.com/README.md", ctx, "link")
    assert res.disposition == Disposition.PASSTHROUGH


def test_markdown_link_outside_archive_mode_is_file_url(tmp_path):
    res = resolve_reference("other.md", ResolveContext(base_dir=str(tmp_path)), "link")
    assert res.disposition == Disposition.LOCAL_FILE
    assert res.opens_new_context is True


def test_markdown_extension_is_case_insensitive(tmp_path):
    assert resolve_markdown_target("NOTES.MD", str(tmp_path)) == os.path.abspath(str(tmp_path / "NOTES.MD"))
    assert resolve_markdown_target("notes.markdown", str(tmp_path)) is None
    assert resolve_markdown_target("#x", str(tmp_path)) is None


def test_archive_key_is_forward_slash_relative(tmp_path):
    nested = tmp_path / "a" / "b" / "c.md"
    assert archive_key(str(nested), str(tmp_path)) == "a/b/c.md"


def test_archive_key_normalizes_backslashes():
    assert archive_key("a\\b\\c.md", "") == "a/b/c.md"


def test_archive_key_matches_navigation_key(tmp_path):
    """Keys built by the graph and refs built by the renderer must agree."""
    target = tmp_path / "x" / "y.md"
    ctx = ResolveContext(base_dir=str(tmp_path / "x"), archive_mode=True, archive_root=str(tmp_path))
    res = resolve_reference("y.md", ctx, "link")
    assert res.value == navigation_href(archive_key(str(target), str(tmp_path)))


def test_navigation_href_escapes_quotes():
    href = navigation_href("it's.md")
    assert href == "javascript:mdviewLoadPage('it\\'s.md')"
    assert is_navigation_href(href)
    assert not is_navigation_href("https://example.com")


def test_resolution_is_deterministic(tmp_path, png_bytes):
    (tmp_path / "a.png").write_bytes(png_bytes)
    ctx = ResolveContext(base_dir=str(tmp_path), self_contained=True)
    first = resolve_reference("a.png", ctx, "image")
    second = resolve_reference("a.png", ctx, "image")
    assert first == second
