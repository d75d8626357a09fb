"""Tests for DeclarationExtractor, UsageCollector and ModuleExtractor."""

import logging

from modshake.graph.extractor import (
    DeclarationExtractor,
    ModuleExtractor,
    UsageCollector,
    normalize_specifier,
)
from modshake.parsers import JSParser


def summarize(source: str):
    return JSParser().parse_source(source, "mod.ts")


def test_normalize_specifier_keeps_suffix():
    assert normalize_specifier("./math.ts") == "./math.ts"
    assert normalize_specifier("./widget.tsx") == "./widget.tsx"
    assert normalize_specifier("./data.json") == "./data.json"
    assert normalize_specifier("react") == "react"


def test_declaration_extractor():
    summary = summarize(
        'import { add } from "./math.ts";\n'
        'import * as util from "./util";\n'
        "export const total = add(1, 2);\n"
        "export interface Hidden {}\n"
        "function helper() {}\n"
        "export { helper as publicHelper };\n"
    )
    extractor = DeclarationExtractor()

    assert extractor.imports(summary) == ("./math.ts", "./util")
    assert extractor.exports(summary) == frozenset({"total", "helper"})

    bindings = extractor.import_bindings(summary)
    assert bindings["./math.ts"] == frozenset({"add"})
    assert bindings["./util"] == frozenset({"*"})


def test_usage_collector_is_unscoped():
    summary = summarize(
        "function f() { const shadow = 1; return shadow; }\n"
        "export const value = f();\n"
    )

    used = UsageCollector().collect(summary)

    assert used == frozenset({"f", "shadow", "value"})


def test_module_extractor_builds_module_info():
    info = ModuleExtractor().extract(
        "lib/math.ts",
        "export function add(a, b) { return a + b; }\n"
    )

    assert info.id == "lib/math.ts"
    assert info.imports == ()
    assert info.exports == frozenset({"add"})
    assert info.used_symbols == frozenset({"add", "a", "b"})
    assert info.parse_error is None


def test_syntax_error_yields_empty_module(caplog):
    with caplog.at_level(logging.WARNING):
        info = ModuleExtractor().extract(
            "broken.ts",
            'import { a } from "./a";\nexport const s = "unterminated;\n'
        )

    assert info.id == "broken.ts"
    assert info.imports == ()
    assert info.exports == frozenset()
    assert info.used_symbols == frozenset()
    assert info.parse_error is not None
    assert "broken.ts" in caplog.text


def test_custom_front_end_is_substitutable():
    class FixedParser(JSParser):
        def parse_source(self, source, file_path="<memory>"):
            summary = super().parse_source("export const fixed = 1;", file_path)
            summary.identifiers.add("extra")
            return summary

    info = ModuleExtractor(parser=FixedParser()).extract("any.ts", "ignored")

    assert info.exports == frozenset({"fixed"})
    assert "extra" in info.used_symbols
