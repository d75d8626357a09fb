"""Syntax front-ends producing declaration/usage summaries."""

from .base_parser import BaseParser, SyntaxSummary, ImportDecl, ExportDecl, ExportKind
from .js_parser import JSParser

__all__ = ["BaseParser", "SyntaxSummary", "ImportDecl", "ExportDecl", "ExportKind", "JSParser"]
