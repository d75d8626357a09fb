"""Graph builder for constructing the module dependency graph from an entry point."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .extractor import DEFAULT_SOURCE_SUFFIXES, ModuleExtractor
from .module_info import ModuleGraph, ModuleInfo
from .resolver import ModuleResolver, normalize_module_id
from ..parsers.base_parser import BaseParser
from ..utils.errors import ModuleLoadError
from ..utils.logger import setup_logger


@dataclass
class GraphStatistics:
    """Statistics about a built module graph."""
    entry_id: str = ""
    total_modules: int = 0
    relative_imports: int = 0
    external_imports: int = 0
    total_exports: int = 0

    external_specifiers: set[str] = field(default_factory=set)
    unparseable: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "entry": self.entry_id,
            "modules": self.total_modules,
            "imports": {
                "relative": self.relative_imports,
                "external": self.external_imports,
                "external_specifiers": sorted(self.external_specifiers),
            },
            "exports": self.total_exports,
            "quality": {
                "unparseable": list(self.unparseable),
            }
        }

    def __str__(self) -> str:
        """Human-readable summary."""
        lines = [
            "=== Graph Statistics ===",
            f"Entry: {self.entry_id}",
            f"Modules: {self.total_modules}",
            f"Imports: {self.relative_imports} relative, {self.external_imports} external",
            f"Exports: {self.total_exports}",
        ]

        if self.unparseable:
            lines.extend([
                "",
                f"Unparseable modules: {len(self.unparseable)}"
            ])
            for module_id in self.unparseable:
                lines.append(f"  {module_id}")

        return "\n".join(lines)


class GraphBuilder:
    """Builds the module graph reachable from an entry module.

    The walk is depth-first over relative imports using an explicit stack. Each
    module is stored in an arena slot the first time it is loaded and the
    path -> slot index keeps any module from being parsed twice, whatever the
    shape of the import graph (diamonds, cycles).
    """

    def __init__(
        self,
        config: Optional[dict] = None,
        parser: Optional[BaseParser] = None,
        extractor: Optional[ModuleExtractor] = None
    ):
        """Initialize the graph builder.

        Args:
            config: Optional configuration dictionary (source_suffixes,
                extensions, index_files)
            parser: Syntax front-end to use (default: JSParser)
            extractor: Fully custom extractor; overrides parser
        """
        self.config = config or {}
        self.logger = setup_logger("graph_builder")

        self.source_suffixes = self.config.get("source_suffixes", list(DEFAULT_SOURCE_SUFFIXES))
        self.resolver = ModuleResolver(
            extensions=self.config.get("extensions", []),
            index_files=self.config.get("index_files", []),
        )
        self.extractor = extractor or ModuleExtractor(parser, self.source_suffixes)

        self.stats = GraphStatistics()

    def build_graph(self, entry) -> ModuleGraph:
        """Build the complete module graph starting at an entry module.

        Args:
            entry: Path of the entry module

        Returns:
            Read-only ModuleGraph keyed by module id

        Raises:
            ModuleLoadError: if any module in the walk cannot be read
        """
        entry_id = normalize_module_id(entry)
        self.stats = GraphStatistics(entry_id=entry_id)

        self.logger.info(f"Building module graph from {entry_id}...")

        # Arena: slot -> ModuleInfo, with module id -> slot on the side
        arena: list[ModuleInfo] = []
        index: dict[str, int] = {}

        # (module id, importing module id)
        stack: list[tuple[str, Optional[str]]] = [(entry_id, None)]

        while stack:
            module_id, importer = stack.pop()
            if module_id in index:
                continue

            info = self._load_module(module_id, importer)
            index[module_id] = len(arena)
            arena.append(info)

            deps = [
                self.resolver.resolve(module_id, spec, exists=_is_file)
                for spec in info.relative_imports
            ]
            # Reversed so dependencies are visited in source order
            for dep_id in reversed(deps):
                if dep_id not in index:
                    stack.append((dep_id, module_id))

        modules = {info.id: info for info in arena}
        graph = ModuleGraph(entry_id, modules, order=[info.id for info in arena], resolver=self.resolver)

        self._collect_statistics(graph)
        self.logger.info(
            f"Graph built: {self.stats.total_modules} modules, "
            f"{self.stats.relative_imports} relative imports"
        )
        return graph

    def _load_module(self, module_id: str, importer: Optional[str]) -> ModuleInfo:
        """Read and extract a single module."""
        try:
            source = Path(module_id).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(f"Error reading {module_id}: {e}")
            raise ModuleLoadError(module_id, str(e), importer) from e

        self.logger.debug(f"Parsing {module_id}")
        return self.extractor.extract(module_id, source)

    def _collect_statistics(self, graph: ModuleGraph) -> None:
        stats = self.stats
        stats.total_modules = len(graph)

        for module_id in graph.order:
            info = graph[module_id]
            stats.relative_imports += len(info.relative_imports)
            stats.external_imports += len(info.external_imports)
            stats.external_specifiers.update(info.external_imports)
            stats.total_exports += len(info.exports)
            if info.parse_error is not None:
                stats.unparseable.append(module_id)


def _is_file(module_id: str) -> bool:
    return Path(module_id).is_file()


def build_graph(entry, config: Optional[dict] = None) -> ModuleGraph:
    """Build a module graph with a fresh GraphBuilder."""
    return GraphBuilder(config).build_graph(entry)
