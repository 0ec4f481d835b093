"""Feature modules: rendering, archiving, templates and the conversion service."""
