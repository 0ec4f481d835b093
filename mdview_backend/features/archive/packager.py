"""
ArchivePackager: renders every page of a Graph into one navigable HTML file.

The root document is rendered as a normal page and stays visible; every other
page is rendered standalone in archive mode, gzip+base64 encoded and stored in
the bundle under its root-relative key.
"""
from __future__ import annotations

import os

from ...config import ConversionOptions
from ...shared import ArchiveKeyCollisionError, get_logger, timer
from ..render.preload_cache import PreloadCache
from ..render.renderer import render_file
from ..templates import TemplateStore
from .bundle import Bundle, bundle_script, encode_page, inject_before_closing_tag
from .graph import Graph

logger = get_logger(__name__)


class ArchivePackager:
    def __init__(self, graph: Graph, options: ConversionOptions, templates: TemplateStore) -> None:
        self.graph = graph
        self.options = options
        self.templates = templates
        self.archive_root = os.path.dirname(graph.root)
        self._cache: PreloadCache | None = None

    def _render(self, path: str, title: str) -> str:
        return render_file(
            path,
            self.options,
            self.templates,
            archive_root=self.archive_root,
            cache=self._cache,
            title=title,
        )

    def build_bundle(self) -> Bundle:
        """
        Render, compress and encode every non-root page.

        Raises:
            CompressionError: any page failed to compress
            ArchiveKeyCollisionError: two documents map to the same key
        """
        root_node = self.graph.root_node
        root_key = root_node.relative_key if root_node else os.path.basename(self.graph.root)
        bundle = Bundle(root=root_key)
        owners: dict[str, str] = {root_key: self.graph.root}

        for node in self.graph.ordered_nodes():
            if node.path == self.graph.root:
                continue
            owner = owners.get(node.relative_key)
            if owner is not None and owner != node.path:
                raise ArchiveKeyCollisionError(
                    f"documents {owner} and {node.path} both map to archive key {node.relative_key!r}"
                )
            owners[node.relative_key] = node.path
            # Embedded pages carry no custom title; only the root page is shown as a document.
            bundle.pages[node.relative_key] = encode_page(self._render(node.path, ""))
            logger.debug("Packed %s as %s", node.path, node.relative_key)
        return bundle

    def render_archive(self) -> str:
        """Return the finished archive document (root page plus injected bundle)."""
        if self.options.preload and self.options.self_contained:
            self._cache = PreloadCache(self.options.preload_workers)
        try:
            with timer("archive packaging", logger):
                bundle = self.build_bundle()
                root_html = self._render(self.graph.root, self.options.title)
        finally:
            if self._cache is not None:
                self._cache.close()
                self._cache = None
        return inject_before_closing_tag(root_html, "</body>", bundle_script(bundle))
