"""Module records and the read-only module graph."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Optional

import networkx as nx

from .resolver import ModuleResolver, is_relative


@dataclass(frozen=True)
class ModuleInfo:
    """Facts extracted from one module. Never mutated after creation."""
    id: str
    imports: tuple[str, ...] = ()
    exports: frozenset[str] = frozenset()
    used_symbols: frozenset[str] = frozenset()
    # specifier -> names imported from it by their exported name ("*" = any)
    import_bindings: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )
    parse_error: Optional[str] = None

    @classmethod
    def empty(cls, module_id: str, parse_error: Optional[str] = None) -> "ModuleInfo":
        """Record for a module that contributes nothing to the analysis."""
        return cls(id=module_id, parse_error=parse_error)

    @property
    def relative_imports(self) -> list[str]:
        """Import specifiers that are followed during graph construction."""
        return [spec for spec in self.imports if is_relative(spec)]

    @property
    def external_imports(self) -> list[str]:
        """Import specifiers that are recorded but never followed."""
        return [spec for spec in self.imports if not is_relative(spec)]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "imports": list(self.imports),
            "exports": sorted(self.exports),
            "used_symbols": sorted(self.used_symbols),
            "parse_error": self.parse_error,
        }


class ModuleGraph(Mapping):
    """Mapping of module id to ModuleInfo, built once per entry point.

    The mapping is read-only; consumers such as the tree shaker only read it.
    """

    FORMAT = "modshake_module_graph_v1"

    def __init__(
        self,
        entry_id: str,
        modules: dict[str, ModuleInfo],
        order: Optional[list[str]] = None,
        resolver: Optional[ModuleResolver] = None
    ):
        self.entry_id = entry_id
        self._modules = MappingProxyType(dict(modules))
        self.order = tuple(order if order is not None else modules)
        self.resolver = resolver or ModuleResolver()

    def __getitem__(self, module_id: str) -> ModuleInfo:
        return self._modules[module_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)

    def __repr__(self) -> str:
        return f"ModuleGraph(entry={self.entry_id!r}, modules={len(self)})"

    @property
    def modules(self) -> Mapping[str, ModuleInfo]:
        """Read-only view of the module table."""
        return self._modules

    def resolve(self, importer_id: str, specifier: str) -> str:
        """Resolve a relative specifier against the modules in this graph."""
        return self.resolver.resolve(importer_id, specifier, exists=self._modules.__contains__)

    def dependencies(self, module_id: str) -> list[str]:
        """Resolved ids of a module's relative imports, in source order."""
        info = self._modules.get(module_id)
        if info is None:
            return []
        return [self.resolve(module_id, spec) for spec in info.relative_imports]

    def to_networkx(self) -> nx.DiGraph:
        """Directed import graph over relative imports (importer -> dependency)."""
        graph = nx.DiGraph()
        for module_id, info in self._modules.items():
            graph.add_node(
                module_id,
                exports=sorted(info.exports),
                parse_error=info.parse_error,
                is_entry=module_id == self.entry_id
            )
        for module_id, info in self._modules.items():
            for spec in info.relative_imports:
                dep_id = self.resolve(module_id, spec)
                if graph.has_edge(module_id, dep_id):
                    graph[module_id][dep_id]["specifiers"].append(spec)
                else:
                    graph.add_edge(module_id, dep_id, specifiers=[spec])
        return graph

    def to_dict(self, kept: Optional[set[str]] = None) -> dict:
        """Serialize the graph, optionally with a kept-set."""
        data = {
            "format": self.FORMAT,
            "entry": self.entry_id,
            "modules": [
                {
                    "id": module_id,
                    "exports": sorted(self._modules[module_id].exports),
                    "imports": list(self._modules[module_id].imports),
                }
                for module_id in self.order
            ],
        }
        if kept is not None:
            data["kept"] = sorted(kept)
        return data

    def export_json(self, output_path: Path, kept: Optional[set[str]] = None) -> None:
        """Export the graph to JSON format."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(kept), f, indent=2)
