from .store import Template, TemplateStore

__all__ = ["Template", "TemplateStore"]
