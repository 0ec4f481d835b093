"""
Node-kind handler registry.

Maps a markdown-it token type to the render function that should emit it.
Each registration carries a priority (lower wins); the parser's built-in
rules count as DEFAULT_PRIORITY, so anything registered at CUSTOM_PRIORITY
takes precedence for the same kind.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Any, Callable

from markdown_it import MarkdownIt

DEFAULT_PRIORITY = 1000
CUSTOM_PRIORITY = 100

# (renderer, tokens, idx, options, env) -> html
RenderHandler = Callable[..., str]


@dataclass(frozen=True)
class _Registration:
    priority: int
    order: int
    handler: RenderHandler


class HandlerRegistry:
    def __init__(self) -> None:
        self._entries: dict[str, list[_Registration]] = {}
        self._counter = 0

    def register(self, kind: str, handler: RenderHandler, priority: int = CUSTOM_PRIORITY) -> None:
        self._counter += 1
        self._entries.setdefault(kind, []).append(_Registration(int(priority), self._counter, handler))

    def kinds(self) -> list[str]:
        return sorted(self._entries)

    def resolve(self, kind: str) -> RenderHandler | None:
        """Return the winning handler for `kind` (lowest priority, first registered)."""
        entries = self._entries.get(kind)
        if not entries:
            return None
        best = min(entries, key=lambda r: (r.priority, r.order))
        if best.priority >= DEFAULT_PRIORITY:
            return None
        return best.handler

    def install(self, md: MarkdownIt) -> MarkdownIt:
        """Bind the winning handler for every registered kind onto the parser's renderer."""
        for kind in self.kinds():
            handler = self.resolve(kind)
            if handler is not None:
                md.renderer.rules[kind] = partial(handler, md.renderer)
        return md


def attr(token: Any, name: str) -> str:
    value = token.attrGet(name)
    return "" if value is None else str(value)
