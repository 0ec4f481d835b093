"""
Breadth-first discovery of the documents reachable from a root markdown file.
"""
from __future__ import annotations

import logging
import os
from collections import deque

from ...shared import DocumentNotFoundError, get_logger, log_structured
from ..render.renderer import read_markdown
from ..render.resolver import archive_key
from .graph import Graph
from .scanner import scan_markdown_links

logger = get_logger(__name__)


def _count_unreached(pending: list[str], visited: set[str]) -> int:
    """
    Count the distinct existing documents reachable from `pending` that did not
    make it into the graph. Discovery only: nothing is added to the graph.
    """
    seen = set(visited)
    seen.update(pending)
    queue: deque[str] = deque(pending)
    count = 0
    while queue:
        path = queue.popleft()
        if not os.path.isfile(path):
            continue
        count += 1
        try:
            content = read_markdown(path)
        except OSError:
            logger.debug("Failed to read excluded document %s", path, exc_info=True)
            continue
        for link in scan_markdown_links(content, os.path.dirname(path)):
            if link not in seen:
                seen.add(link)
                queue.append(link)
    return count


def build_graph(root_path: str, max_pages: int) -> Graph:
    """
    Discover linked markdown documents starting at `root_path`.

    Each path is enqueued at most once, so cycles terminate and every node keeps
    the depth of its first (shortest) discovery. Discovery stops once
    `max_pages` documents are known; every existing document still reachable
    past the limit is counted once in `graph.excluded`. Missing or unreadable linked documents are skipped with a
    warning.

    Raises:
        DocumentNotFoundError: the root document does not exist or cannot be read
    """
    root = os.path.abspath(root_path)
    if not os.path.isfile(root):
        raise DocumentNotFoundError(f"root file does not exist: {root}")

    limit = max(1, int(max_pages))
    graph = Graph(root=root, max_pages=limit)
    root_dir = os.path.dirname(root)

    queue: deque[tuple[str, int]] = deque([(root, 0)])
    visited: set[str] = {root}
    overflow: set[str] = set()

    while queue and graph.count < limit:
        path, depth = queue.popleft()

        try:
            content = read_markdown(path)
        except OSError as exc:
            if path == root:
                raise DocumentNotFoundError(f"failed to read root file {root}: {exc}") from exc
            logger.warning("Failed to read %s: %s", path, exc)
            continue

        node = graph.add_node(path, archive_key(path, root_dir), depth)
        links = scan_markdown_links(content, os.path.dirname(path))
        node.links = links

        for link in links:
            if link in visited:
                continue
            if graph.count + len(queue) >= limit:
                if os.path.isfile(link):
                    overflow.add(link)
                continue
            if not os.path.isfile(link):
                if link not in graph.missing:
                    logger.warning("Linked file does not exist: %s", link)
                    graph.missing.append(link)
                continue
            visited.add(link)
            overflow.discard(link)
            queue.append((link, depth + 1))

    pending = [path for path, _ in queue] + sorted(overflow - visited)
    graph.excluded = _count_unreached(pending, visited)
    if graph.truncated:
        logger.warning(
            "Maximum page limit (%d) reached, archive truncated: %d pages excluded (raise --max-pages to include them)",
            limit,
            graph.excluded,
        )
    log_structured(
        logger,
        logging.DEBUG,
        "archive graph built",
        root=root,
        pages=graph.count,
        missing=len(graph.missing),
        excluded=graph.excluded,
    )
    return graph
