"""Exception types raised by modshake."""

from typing import Optional


class ModshakeError(Exception):
    """Base class for all modshake failures."""


class ParseError(ModshakeError):
    """The syntax front-end could not make sense of a module."""

    def __init__(self, message: str, line: int = 0):
        self.line = line
        if line:
            message = f"line {line}: {message}"
        super().__init__(message)


class ModuleLoadError(ModshakeError):
    """A module file could not be read. Fatal to the build."""

    def __init__(self, module_id: str, reason: str, importer: Optional[str] = None):
        self.module_id = module_id
        self.importer = importer
        self.reason = reason
        message = f"Cannot load module '{module_id}': {reason}"
        if importer:
            message += f" (imported from '{importer}')"
        super().__init__(message)


class ConfigError(ModshakeError):
    """A configuration value is missing or invalid."""
