import sys
from pathlib import Path

import pytest

from .repo_root import REPO_ROOT

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def write_md(tmp_path):
    """Write a markdown file under tmp_path and return its absolute path."""

    def _write(rel: str, text: str) -> Path:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def templates(tmp_path):
    """A template store holding one small 'plain' template."""
    from mdview_backend.features.templates import TemplateStore

    root = tmp_path / "_templates"
    plain = root / "plain"
    plain.mkdir(parents=True)
    (plain / "template.html").write_text("<title>plain</title>", encoding="utf-8")
    (plain / "template.css").write_text("body { margin: 0; }", encoding="utf-8")
    (plain / "template.js").write_text("window.plain = true;", encoding="utf-8")
    return TemplateStore(root)
