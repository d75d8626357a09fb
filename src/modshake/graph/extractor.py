"""Turns a front-end syntax summary into a ModuleInfo."""

from types import MappingProxyType
from typing import Optional, Sequence

from .module_info import ModuleInfo
from ..parsers.base_parser import BaseParser, ExportKind, SyntaxSummary
from ..parsers.js_parser import JSParser
from ..utils.errors import ParseError
from ..utils.logger import setup_logger


DEFAULT_SOURCE_SUFFIXES = (".ts", ".tsx", ".mts", ".cts", ".js", ".jsx", ".mjs", ".cjs")

# Export kinds whose names are runtime bindings of the module
VALUE_EXPORT_KINDS = (
    ExportKind.VARIABLE,
    ExportKind.FUNCTION,
    ExportKind.CLASS,
    ExportKind.ENUM,
    ExportKind.NAMED,
    ExportKind.NAMESPACE,
)


def normalize_specifier(specifier: str, suffixes: Sequence[str] = DEFAULT_SOURCE_SUFFIXES) -> str:
    """Reattach a recognized source suffix to a specifier.

    Some front-ends hand the suffix back separately from the stem; callers must
    not assume it is already present, so a specifier ending in one of the
    suffixes is rebuilt as stem + suffix.
    """
    for suffix in suffixes:
        if suffix and specifier.endswith(suffix):
            return specifier[:-len(suffix)] + suffix
    return specifier


class DeclarationExtractor:
    """Collects import specifiers and exported names from a syntax summary."""

    def __init__(self, source_suffixes: Sequence[str] = DEFAULT_SOURCE_SUFFIXES):
        self.source_suffixes = tuple(source_suffixes)

    def imports(self, summary: SyntaxSummary) -> tuple[str, ...]:
        """Import specifiers in source order."""
        return tuple(
            normalize_specifier(decl.specifier, self.source_suffixes)
            for decl in summary.imports
        )

    def exports(self, summary: SyntaxSummary) -> frozenset[str]:
        """Exported names, aliases resolved to the original local name."""
        names = set()
        for decl in summary.exports:
            if decl.kind in VALUE_EXPORT_KINDS:
                names.update(decl.names)
        return frozenset(names)

    def import_bindings(self, summary: SyntaxSummary) -> dict[str, frozenset[str]]:
        """Names imported per specifier; "*" stands for a namespace import."""
        bindings: dict[str, set[str]] = {}
        for decl in summary.imports:
            spec = normalize_specifier(decl.specifier, self.source_suffixes)
            names = bindings.setdefault(spec, set())
            names.update(decl.names)
            if decl.namespace:
                names.add("*")
        return {spec: frozenset(names) for spec, names in bindings.items()}


class UsageCollector:
    """Collects every identifier name referenced in a module, without scoping."""

    def collect(self, summary: SyntaxSummary) -> frozenset[str]:
        return frozenset(summary.identifiers)


class ModuleExtractor:
    """Runs the front-end plus both collectors for a single module.

    A syntax failure is contained here: the module gets an empty ModuleInfo so
    the rest of the graph still builds.
    """

    def __init__(
        self,
        parser: Optional[BaseParser] = None,
        source_suffixes: Sequence[str] = DEFAULT_SOURCE_SUFFIXES
    ):
        self.parser = parser or JSParser()
        self.declarations = DeclarationExtractor(source_suffixes)
        self.usages = UsageCollector()
        self.logger = setup_logger("module_extractor")

    def extract(self, module_id: str, source: str) -> ModuleInfo:
        """Build the ModuleInfo for one module's source text."""
        try:
            summary = self.parser.parse_source(source, module_id)
        except ParseError as e:
            self.logger.warning(f"Syntax error in {module_id}: {e}; module contributes nothing")
            return ModuleInfo.empty(module_id, parse_error=str(e))

        for warning in summary.warnings:
            self.logger.debug(f"{module_id}: {warning}")

        return ModuleInfo(
            id=module_id,
            imports=self.declarations.imports(summary),
            exports=self.declarations.exports(summary),
            used_symbols=self.usages.collect(summary),
            import_bindings=MappingProxyType(self.declarations.import_bindings(summary)),
        )
