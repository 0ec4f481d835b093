"""
mdview: markdown to styled HTML, with optional self-contained multi-page archives.
"""

__version__ = "1.1.2"

__all__ = ["__version__"]
