"""Resolution of relative import specifiers to module ids."""

import posixpath
from typing import Callable, Iterator, Optional, Sequence


def is_relative(specifier: str) -> bool:
    """Relative specifiers begin with a dot and are followed; others are external."""
    return specifier.startswith(".")


def normalize_module_id(path) -> str:
    """Canonical string id for a module path.

    Separators become forward slashes and `.`/`..` segments are collapsed, so
    the same file reached through different relative routes gets one id.
    """
    text = str(path).replace("\\", "/")
    if not text:
        return text
    return posixpath.normpath(text)


class ModuleResolver:
    """Maps (importing module id, relative specifier) to a dependency id.

    Resolution is purely lexical: the specifier is joined to the directory of
    the importing module. When extensions or index files are configured, the
    candidates `<base><ext>` and `<base>/<index><ext>` are tried in order and
    the first one accepted by the caller's `exists` predicate wins; the bare
    joined path is the fallback.
    """

    def __init__(
        self,
        extensions: Sequence[str] = (),
        index_files: Sequence[str] = ()
    ):
        self.extensions = tuple(extensions)
        self.index_files = tuple(index_files)

    def base_path(self, importer_id: str, specifier: str) -> str:
        """Join a specifier to the importing module's directory."""
        directory = posixpath.dirname(normalize_module_id(importer_id))
        return normalize_module_id(posixpath.join(directory or ".", specifier))

    def candidates(self, importer_id: str, specifier: str) -> Iterator[str]:
        """Candidate ids for a specifier, most specific first."""
        base = self.base_path(importer_id, specifier)
        yield base
        for ext in self.extensions:
            yield base + ext
        for index in self.index_files:
            for ext in self.extensions or ("",):
                yield normalize_module_id(posixpath.join(base, index + ext))

    def resolve(
        self,
        importer_id: str,
        specifier: str,
        exists: Optional[Callable[[str], bool]] = None
    ) -> str:
        """Resolve a relative specifier to a module id."""
        base = self.base_path(importer_id, specifier)
        if exists is None or not (self.extensions or self.index_files):
            return base
        for candidate in self.candidates(importer_id, specifier):
            if exists(candidate):
                return candidate
        return base
