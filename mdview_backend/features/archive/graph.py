"""
Link graph of the documents that make up one archive.
"""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GraphNode:
    path: str  # absolute path to the .md file
    relative_key: str  # key relative to the root document's directory, "/"-separated
    depth: int  # BFS distance from the root
    links: list[str] = field(default_factory=list)  # absolute paths of linked .md files


@dataclass
class Graph:
    root: str
    nodes: dict[str, GraphNode] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)
    excluded: int = 0
    max_pages: int = 0

    @property
    def count(self) -> int:
        return len(self.nodes)

    @property
    def truncated(self) -> bool:
        return self.excluded > 0

    @property
    def root_node(self) -> GraphNode | None:
        return self.nodes.get(self.root)

    def add_node(self, path: str, relative_key: str, depth: int) -> GraphNode:
        """Add a node; an existing node for `path` is returned unchanged."""
        node = self.nodes.get(path)
        if node is not None:
            return node
        node = GraphNode(path=path, relative_key=relative_key, depth=depth)
        self.nodes[path] = node
        return node

    def has_node(self, path: str) -> bool:
        return path in self.nodes

    def get_node(self, path: str) -> GraphNode | None:
        return self.nodes.get(path)

    def ordered_nodes(self) -> list[GraphNode]:
        """Nodes closest to the root first; ties broken by key for stable output."""
        return sorted(self.nodes.values(), key=lambda n: (n.depth, n.relative_key))

    def __str__(self) -> str:
        return f"Graph(root={self.root}, count={self.count})"
