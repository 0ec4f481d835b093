"""
Logging utilities with consistent formatting and emoji indicators.
"""
import json
import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Final

# Emoji indicators for log levels
EMOJI_MAP: Final[dict[str, str]] = {
    "DEBUG": "\U0001F50D",      # Magnifying glass for debug
    "INFO": "ℹ️",     # Info symbol
    "WARNING": "⚠️",  # Warning sign
    "ERROR": "❌",          # Error cross
    "CRITICAL": "\U0001F525",   # Fire for critical
    "SUCCESS": "✅",        # Success checkmark
}

# Global logger prefix
PREFIX: Final[str] = "\U0001F4C4 mdview"

conversion_id_var: ContextVar[str] = ContextVar("conversion_id", default="")


class CorrelationFilter(logging.Filter):
    """Inject `conversion_id` from `conversion_id_var` into each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Attach `record.conversion_id` for correlation; always returns True."""
        try:
            record.conversion_id = conversion_id_var.get("")
        except Exception:
            record.conversion_id = ""
        return True


class EmojiFormatter(logging.Formatter):
    """Custom formatter that adds emoji based on log level."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a single line with a prefix and emoji."""
        emoji = EMOJI_MAP.get(record.levelname, "\U0001F4C4")

        # Format: 📄 mdview [⚠️] render.resolver [a1b2c3]: message
        try:
            cid = str(getattr(record, "conversion_id", "") or "").strip()
        except Exception:
            cid = ""
        cid_part = f" [{cid}]" if cid else ""
        log_format = f"{PREFIX} [{emoji}] %(name)s{cid_part}: %(message)s"
        formatter = logging.Formatter(log_format)
        return formatter.format(record)


def _has_correlation_filter(logger: logging.Logger) -> bool:
    return any(isinstance(f, CorrelationFilter) for f in list(logger.filters or []))


def _ensure_correlation_filter(logger: logging.Logger) -> None:
    if _has_correlation_filter(logger):
        return
    logger.addFilter(CorrelationFilter())


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Get a logger with the mdview prefix and emoji indicators.

    Args:
        name: Logger name (usually __name__)
        level: Optional logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger instance with emoji formatting
    """
    # Clean name (drop the package prefix so records read "render.resolver")
    if name.startswith("__main__"):
        name = "main"
    elif "." in name:
        parts = name.split(".")
        if "features" in parts:
            idx = parts.index("features")
            name = ".".join(parts[idx + 1:])
        elif parts[0] in ("mdview_backend", "mdview_shared"):
            name = ".".join(parts[1:])

    logger = logging.getLogger(f"mdview.{name}")
    _ensure_correlation_filter(logger)

    if level is not None:
        logger.setLevel(level)
    elif not logger.handlers:
        # Default to INFO if not configured
        logger.setLevel(logging.INFO)

    # Add console handler if none exists
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(EmojiFormatter())
        logger.addHandler(handler)

        # Prevent propagation to avoid duplicate logs
        logger.propagate = False

    return logger

# Add SUCCESS level
SUCCESS_LEVEL: Final[int] = 25  # Between INFO (20) and WARNING (30)
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")

def log_success(logger: logging.Logger, message: str) -> None:
    """
    Log a success message with the checkmark emoji.

    Args:
        logger: Logger instance
        message: Success message
    """
    logger.log(SUCCESS_LEVEL, message)

def log_structured(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Emit a structured JSON log entry with contextual fields."""
    payload = {
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "context": context,
    }
    logger.log(level, json.dumps(payload, ensure_ascii=False))
