"""In-memory memoization of built module graphs."""

import threading
from typing import Callable, Optional

from .graph_builder import GraphBuilder
from .module_info import ModuleGraph
from ..utils.logger import setup_logger


class GraphCache:
    """Caches built graphs by entry path for the lifetime of the object.

    The lock only guards the map. Graphs are built outside it, so two threads
    asking for the same entry may both build and the last one stored wins.
    Entries are never invalidated: if files change on disk after the first
    build, callers keep getting the stale graph until they call clear().
    """

    def __init__(self, builder_factory: Optional[Callable[[], GraphBuilder]] = None):
        self._builder_factory = builder_factory or GraphBuilder
        self._graphs: dict[str, ModuleGraph] = {}
        self._lock = threading.Lock()
        self.logger = setup_logger("graph_cache")

    def cached_graph(self, entry) -> ModuleGraph:
        """Return the cached graph for an entry path, building it on a miss."""
        key = str(entry)

        with self._lock:
            graph = self._graphs.get(key)
        if graph is not None:
            self.logger.debug(f"Graph cache hit: {key}")
            return graph

        self.logger.debug(f"Graph cache miss: {key}")
        graph = self._builder_factory().build_graph(entry)

        with self._lock:
            self._graphs[key] = graph
        return graph

    def clear(self) -> None:
        """Drop every cached graph."""
        with self._lock:
            self._graphs.clear()

    def __contains__(self, entry) -> bool:
        with self._lock:
            return str(entry) in self._graphs

    def __len__(self) -> int:
        with self._lock:
            return len(self._graphs)
