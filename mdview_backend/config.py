"""
Configuration for mdview.

Every value can be overridden through an MDVIEW_* environment variable; the
CLI layer turns flags into a ConversionOptions instance on top of these.
"""
import logging
import os
import sys
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path

from .utils import env_bool

logger = logging.getLogger(__name__)


def _env_raw(*names: str, default: str | None = None) -> str | None:
    for name in names:
        if not name:
            continue
        val = os.getenv(name)
        if val is not None and str(val).strip() != "":
            return str(val).strip()
    return default


def _env_int(default: int, *names: str, min_value: int | None = None, max_value: int | None = None) -> int:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid integer for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _env_bool(default: bool, *names: str) -> bool:
    for name in names:
        if name and name in os.environ:
            return env_bool(name, default)
    return default


# Platform detection
IS_WINDOWS = sys.platform == "win32"

APP_NAME = "mdview"

# Bundled assets (templates, archive runtime scripts)
PACKAGE_ROOT = Path(__file__).resolve().parent
ASSETS_DIR = PACKAGE_ROOT / "assets"
TEMPLATES_DIR = ASSETS_DIR / "templates"
ARCHIVE_ASSETS_DIR = ASSETS_DIR / "archive"

DEFAULT_TEMPLATE = _env_raw("MDVIEW_TEMPLATE", default="default") or "default"
DEFAULT_MAX_PAGES = _env_int(10, "MDVIEW_MAX_PAGES", min_value=1)
DEFAULT_SELF_CONTAINED = _env_bool(False, "MDVIEW_SELF_CONTAINED")
DEFAULT_PRELOAD = _env_bool(False, "MDVIEW_PRELOAD")

# Background readers used by the directory preload cache
PRELOAD_MAX_WORKERS = _env_int(8, "MDVIEW_PRELOAD_WORKERS", min_value=1, max_value=64)


def get_output_directory() -> Path:
    """
    Resolve the directory used when no output path is given.

    Priority:
    1) MDVIEW_OUTPUT_DIRECTORY
    2) LOCALAPPDATA/mdview (Windows)
    3) <system temp>/mdview
    """
    env_path = _env_raw("MDVIEW_OUTPUT_DIRECTORY")
    if env_path:
        try:
            return Path(env_path).expanduser().resolve()
        except (OSError, RuntimeError):
            logger.warning("Failed to resolve MDVIEW_OUTPUT_DIRECTORY: %s, using fallback", env_path)
    base = _env_raw("LOCALAPPDATA") if IS_WINDOWS else None
    return Path(base or tempfile.gettempdir()) / APP_NAME


@dataclass(frozen=True)
class ConversionOptions:
    """Plain values consumed by the rendering and archiving core."""

    template: str = DEFAULT_TEMPLATE
    self_contained: bool = DEFAULT_SELF_CONTAINED
    preload: bool = DEFAULT_PRELOAD
    max_pages: int = DEFAULT_MAX_PAGES
    title: str = ""
    preload_workers: int = PRELOAD_MAX_WORKERS

    def with_title(self, title: str) -> "ConversionOptions":
        return replace(self, title=title)
