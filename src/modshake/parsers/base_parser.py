"""Base parser class and the declaration/usage stream produced by front-ends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Optional


class ExportKind(Enum):
    """Kinds of export statements a front-end can report."""
    VARIABLE = auto()
    FUNCTION = auto()
    CLASS = auto()
    ENUM = auto()
    NAMED = auto()
    NAMESPACE = auto()
    ALL = auto()
    DEFAULT = auto()
    TYPE = auto()


@dataclass
class ImportDecl:
    """A single import declaration (or re-export source)."""
    specifier: str
    line: int = 0
    # Names imported by their exported name, e.g. `add` for `import { add as plus }`
    names: list[str] = field(default_factory=list)
    namespace: bool = False
    type_only: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "specifier": self.specifier,
            "line": self.line,
            "names": list(self.names),
            "namespace": self.namespace,
            "type_only": self.type_only,
        }


@dataclass
class ExportDecl:
    """A single export statement."""
    kind: ExportKind
    names: list[str] = field(default_factory=list)
    source: Optional[str] = None
    line: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.name,
            "names": list(self.names),
            "source": self.source,
            "line": self.line,
        }


@dataclass
class SyntaxSummary:
    """Everything the analysis core needs to know about one module's syntax."""
    file_path: str
    imports: list[ImportDecl] = field(default_factory=list)
    exports: list[ExportDecl] = field(default_factory=list)
    identifiers: set[str] = field(default_factory=set)
    warnings: list[str] = field(default_factory=list)

    @property
    def import_count(self) -> int:
        """Number of import declarations."""
        return len(self.imports)

    @property
    def export_count(self) -> int:
        """Number of export statements."""
        return len(self.exports)


class BaseParser(ABC):
    """Base class for all syntax front-ends."""

    @abstractmethod
    def parse_source(self, source: str, file_path: str = "<memory>") -> SyntaxSummary:
        """Parse module text. Raises ParseError on a syntax failure."""
        pass

    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """Return list of file extensions this parser handles."""
        pass

    def can_parse(self, file_path: Path) -> bool:
        """Check if this parser can handle the given file."""
        return file_path.suffix.lower() in self.supported_extensions()

    def parse_file(self, file_path: Path) -> SyntaxSummary:
        """Read and parse a file.

        Read failures propagate as OSError; only syntax problems raise ParseError.
        """
        content = Path(file_path).read_text(encoding="utf-8")
        return self.parse_source(content, str(file_path))
