"""
Read-only store of named page templates.

A template is a directory holding up to three files: template.html (spliced
into <head>), template.css (wrapped in <style>) and template.js (wrapped in
<script> before </body>). Missing files are empty strings; the text is never
interpreted.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ...config import TEMPLATES_DIR
from ...shared import TemplateNotFoundError, get_logger

logger = get_logger(__name__)

TEMPLATE_FILES = {
    "html": "template.html",
    "css": "template.css",
    "js": "template.js",
}


@dataclass(frozen=True)
class Template:
    name: str
    html: str = ""
    css: str = ""
    js: str = ""


class TemplateStore:
    def __init__(self, root: Path | str = TEMPLATES_DIR) -> None:
        self._root = Path(root)
        self._loaded: dict[str, Template] = {}

    @property
    def root(self) -> Path:
        return self._root

    def names(self) -> list[str]:
        """List available template names (sorted)."""
        try:
            return sorted(p.name for p in self._root.iterdir() if p.is_dir())
        except OSError:
            logger.warning("Template directory not readable: %s", self._root)
            return []

    def get(self, name: str) -> Template:
        """
        Load a template by name.

        Raises:
            TemplateNotFoundError: unknown name or unreadable template file
        """
        cached = self._loaded.get(name)
        if cached is not None:
            return cached

        # Names are plain directory names; never walk outside the store.
        if not name or Path(name).name != name or name in (".", ".."):
            raise TemplateNotFoundError(f"template {name!r} not found")
        directory = self._root / name
        if not directory.is_dir():
            raise TemplateNotFoundError(f"template {name!r} not found")

        parts: dict[str, str] = {}
        for field_name, filename in TEMPLATE_FILES.items():
            path = directory / filename
            if not path.is_file():
                parts[field_name] = ""
                continue
            try:
                parts[field_name] = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise TemplateNotFoundError(f"failed to read {filename} for template {name!r}: {exc}") from exc

        template = Template(name=name, **parts)
        self._loaded[name] = template
        return template
