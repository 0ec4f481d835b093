from .builder import build_graph
from .bundle import Bundle, bundle_script, decode_page, encode_page
from .graph import Graph, GraphNode
from .packager import ArchivePackager
from .scanner import has_markdown_links, scan_markdown_links

__all__ = [
    "build_graph",
    "Bundle",
    "bundle_script",
    "decode_page",
    "encode_page",
    "Graph",
    "GraphNode",
    "ArchivePackager",
    "has_markdown_links",
    "scan_markdown_links",
]
