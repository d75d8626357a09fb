"""Symbol-level tree shaking over a built module graph."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..graph.module_info import ModuleGraph, ModuleInfo
from ..graph.resolver import is_relative, normalize_module_id
from ..utils.logger import setup_logger


KEY_SEPARATOR = "::"


class UsageMode(Enum):
    """How a module signals that it uses a symbol."""
    NAMES = "names"      # any identifier with that name anywhere in the module
    IMPORTS = "imports"  # only names actually imported across the edge


def kept_key(module_id: str, symbol: str) -> str:
    """Kept-set entry for one export of one module."""
    return f"{module_id}{KEY_SEPARATOR}{symbol}"


def split_kept_key(key: str) -> tuple[str, str]:
    """Inverse of kept_key."""
    module_id, _, symbol = key.rpartition(KEY_SEPARATOR)
    return module_id, symbol


@dataclass
class ShakeResult:
    """Result of tree shaking from one entry module."""
    entry_id: str
    mode: UsageMode = UsageMode.NAMES
    kept: set[str] = field(default_factory=set)
    dropped: set[str] = field(default_factory=set)
    reachable: set[str] = field(default_factory=set)
    pairs_processed: int = 0

    @property
    def total_exports(self) -> int:
        return len(self.kept) + len(self.dropped)

    def kept_by_module(self) -> dict[str, list[str]]:
        """Kept symbol names grouped per module."""
        grouped: dict[str, list[str]] = {}
        for key in sorted(self.kept):
            module_id, symbol = split_kept_key(key)
            grouped.setdefault(module_id, []).append(symbol)
        return grouped

    def format(self) -> str:
        """Format shake results for display."""
        lines = [
            "TREE SHAKING",
            f"Entry: {self.entry_id}",
            f"Mode: {self.mode.value}",
            f"Reachable modules: {len(self.reachable)}",
            f"Exports kept: {len(self.kept)} of {self.total_exports}",
            ""
        ]

        if self.kept:
            lines.append(f"=== KEPT ({len(self.kept)}) ===")
            for key in sorted(self.kept):
                lines.append(f"  {key}")
            lines.append("")

        if self.dropped:
            lines.append(f"=== DROP CANDIDATES ({len(self.dropped)}) ===")
            for key in sorted(self.dropped)[:50]:
                lines.append(f"  {key}")
            if len(self.dropped) > 50:
                lines.append(f"  ... and {len(self.dropped) - 50} more")
        else:
            lines.append("Every export is reachable.")

        return "\n".join(lines)


class TreeShaker:
    """Decides which exports of which modules are reachable from an entry.

    Usage is name based by default: a module "uses" a symbol if any identifier
    in it carries that name, so the kept-set over-approximates true usage.
    UsageMode.IMPORTS narrows propagation to names that are really imported
    across each edge.
    """

    def __init__(self, graph: ModuleGraph, mode: UsageMode = UsageMode.NAMES):
        self.graph = graph
        self.mode = mode
        self.logger = setup_logger("tree_shaker")

        # Arena of module records; every traversal below works on slot numbers
        self._ids: list[str] = list(graph.keys())
        self._slot: dict[str, int] = {module_id: i for i, module_id in enumerate(self._ids)}
        self._infos: list[ModuleInfo] = [graph[module_id] for module_id in self._ids]

        # edges[slot] = [(dependency slot, specifier)], relative imports only
        self._edges: list[list[tuple[int, str]]] = [[] for _ in self._ids]
        # consumers[slot] = [(consumer slot, specifier used by the consumer)]
        self._consumers: list[list[tuple[int, str]]] = [[] for _ in self._ids]
        # Modules re-exporting or namespace-importing a whole dependency
        self._forwards_all: list[bool] = [
            any(
                "*" in names
                for spec, names in info.import_bindings.items()
                if is_relative(spec)
            )
            for info in self._infos
        ]
        self._build_indexes()

    def _build_indexes(self) -> None:
        """Build the forward edge list and the reverse-dependency index."""
        for slot, info in enumerate(self._infos):
            for spec in info.relative_imports:
                dep_id = self.graph.resolve(info.id, spec)
                dep_slot = self._slot.get(dep_id)
                if dep_slot is None:
                    self.logger.debug(f"{info.id}: '{spec}' resolves outside the graph ({dep_id})")
                    continue
                self._edges[slot].append((dep_slot, spec))
                self._consumers[dep_slot].append((slot, spec))

    def consumers(self, module_id: str) -> list[str]:
        """Ids of the modules importing a module (reverse-dependency index)."""
        slot = self._slot.get(normalize_module_id(module_id))
        if slot is None:
            return []
        seen = dict.fromkeys(self._ids[consumer] for consumer, _ in self._consumers[slot])
        return list(seen)

    def reachable_modules(self, entry_id: str) -> set[str]:
        """Module ids reachable from the entry over relative imports."""
        start = self._slot.get(normalize_module_id(entry_id))
        if start is None:
            return set()

        visited: set[int] = set()
        stack = [start]
        while stack:
            slot = stack.pop()
            if slot in visited:
                continue
            visited.add(slot)
            for dep_slot, _spec in self._edges[slot]:
                if dep_slot not in visited:
                    stack.append(dep_slot)

        return {self._ids[slot] for slot in visited}

    def shake(self, entry_id: str) -> ShakeResult:
        """Compute kept and dropped exports for an entry module.

        Args:
            entry_id: Id (path) of the entry module

        Returns:
            ShakeResult; `kept` holds "<module id>::<symbol>" strings
        """
        entry_id = normalize_module_id(entry_id)
        result = ShakeResult(entry_id=entry_id, mode=self.mode)
        result.reachable = self.reachable_modules(entry_id)

        entry_slot = self._slot.get(entry_id)
        if entry_slot is None:
            self.logger.warning(f"Entry module {entry_id} is not in the graph; nothing kept")
            result.dropped = self._all_exports()
            return result

        kept: set[str] = set()
        processed: set[tuple[int, str]] = set()
        worklist = [(entry_slot, symbol) for symbol in self._infos[entry_slot].used_symbols]

        while worklist:
            pair = worklist.pop()
            if pair in processed:
                continue
            processed.add(pair)
            slot, symbol = pair
            info = self._infos[slot]

            if symbol in info.exports:
                kept.add(kept_key(info.id, symbol))

            for target in self._propagation_targets(slot, symbol):
                if (target, symbol) not in processed:
                    worklist.append((target, symbol))

        # Every export of the entry is kept, used or not
        entry_info = self._infos[entry_slot]
        for name in entry_info.exports:
            kept.add(kept_key(entry_id, name))

        result.kept = kept
        result.dropped = self._all_exports() - kept
        result.pairs_processed = len(processed)

        self.logger.debug(
            f"Shook {entry_id}: {len(kept)} kept, {len(result.dropped)} dropped, "
            f"{len(processed)} (module, symbol) pairs"
        )
        return result

    def _propagation_targets(self, slot: int, symbol: str) -> list[int]:
        """Modules a (module, symbol) obligation flows to.

        Obligations cross every import edge touching the module, towards the
        modules it imports and towards its consumers. The receiving module
        must itself mention the symbol, unless it re-exports a whole module
        (`export * from`), or the obligation leaves through a wildcard edge of
        the sending module; barrels never mention the names they forward. In
        IMPORTS mode the importing side of the edge must also import that name
        through the edge's specifier.
        """
        targets = []

        for dep_slot, spec in self._edges[slot]:
            if not (self._is_wildcard(slot, spec) or self._accepts(dep_slot, symbol)):
                continue
            if self.mode is UsageMode.IMPORTS and not self._imports_name(slot, spec, symbol):
                continue
            targets.append(dep_slot)

        for consumer_slot, spec in self._consumers[slot]:
            if not self._accepts(consumer_slot, symbol):
                continue
            if self.mode is UsageMode.IMPORTS and not self._imports_name(consumer_slot, spec, symbol):
                continue
            targets.append(consumer_slot)

        return targets

    def _accepts(self, slot: int, symbol: str) -> bool:
        return symbol in self._infos[slot].used_symbols or self._forwards_all[slot]

    def _is_wildcard(self, importer_slot: int, spec: str) -> bool:
        return "*" in self._infos[importer_slot].import_bindings.get(spec, frozenset())

    def _imports_name(self, importer_slot: int, spec: str, symbol: str) -> bool:
        names = self._infos[importer_slot].import_bindings.get(spec, frozenset())
        return symbol in names or "*" in names

    def _all_exports(self) -> set[str]:
        return {
            kept_key(info.id, name)
            for info in self._infos
            for name in info.exports
        }


def tree_shake(
    graph: ModuleGraph,
    entry_id: Optional[str] = None,
    mode: UsageMode = UsageMode.NAMES
) -> set[str]:
    """Kept-set for an entry module: "<module id>::<symbol>" strings."""
    if entry_id is None:
        entry_id = graph.entry_id
    return TreeShaker(graph, mode).shake(entry_id).kept
