"""Tests for GraphBuilder and ModuleGraph."""

import json
from collections import Counter

import pytest

from modshake.graph import GraphBuilder, ModuleExtractor, ModuleGraph, build_graph
from modshake.utils.errors import ModuleLoadError


class CountingExtractor(ModuleExtractor):
    """Extractor recording how often each module is parsed."""

    def __init__(self):
        super().__init__()
        self.calls = Counter()

    def extract(self, module_id, source):
        self.calls[module_id] += 1
        return super().extract(module_id, source)


def test_builds_scenario_graph(project):
    project({
        "entry.ts": 'import { add } from "./math.ts";\nconsole.log(add(1, 2));\n',
        "math.ts": "export function add() {}\nexport function sub() {}\n",
    })

    graph = build_graph("entry.ts")

    assert isinstance(graph, ModuleGraph)
    assert graph.entry_id == "entry.ts"
    assert set(graph) == {"entry.ts", "math.ts"}
    assert graph["entry.ts"].imports == ("./math.ts",)
    assert graph["math.ts"].exports == frozenset({"add", "sub"})


def test_nested_directories(project):
    project({
        "src/index.ts": 'import { helper } from "./lib/helper.ts";\nhelper();\n',
        "src/lib/helper.ts": 'import { shared } from "../shared.ts";\nexport const helper = () => shared;\n',
        "src/shared.ts": "export const shared = 1;\n",
    })

    graph = build_graph("./src/index.ts")

    assert graph.entry_id == "src/index.ts"
    assert list(graph.order) == ["src/index.ts", "src/lib/helper.ts", "src/shared.ts"]


def test_cycle_builds_each_module_once(project):
    project({
        "a.ts": 'import { b } from "./b.ts";\nexport const a = () => b();\n',
        "b.ts": 'import { a } from "./a.ts";\nexport const b = () => a();\n',
    })
    extractor = CountingExtractor()

    graph = GraphBuilder(extractor=extractor).build_graph("a.ts")

    assert sorted(graph) == ["a.ts", "b.ts"]
    assert extractor.calls == {"a.ts": 1, "b.ts": 1}


def test_diamond_and_back_edges_parse_once(project):
    project({
        "entry.ts": 'import "./left.ts";\nimport "./right.ts";\n',
        "left.ts": 'import "./shared.ts";\n',
        "right.ts": 'import "./shared.ts";\nimport "./left.ts";\n',
        "shared.ts": 'import "./entry.ts";\nexport const s = 1;\n',
    })
    extractor = CountingExtractor()

    graph = GraphBuilder(extractor=extractor).build_graph("entry.ts")

    assert len(graph) == 4
    assert set(extractor.calls.values()) == {1}


def test_visit_order_is_depth_first_in_source_order(project):
    project({
        "entry.ts": 'import "./one.ts";\nimport "./two.ts";\n',
        "one.ts": 'import "./deep.ts";\n',
        "two.ts": "",
        "deep.ts": "",
    })

    graph = build_graph("entry.ts")

    assert list(graph.order) == ["entry.ts", "one.ts", "deep.ts", "two.ts"]


def test_external_specifiers_are_recorded_not_followed(project):
    project({
        "entry.ts": 'import React from "react";\nimport { x } from "./x.ts";\nReact(x);\n',
        "x.ts": 'import "lodash";\nexport const x = 1;\n',
    })
    builder = GraphBuilder()

    graph = builder.build_graph("entry.ts")

    assert set(graph) == {"entry.ts", "x.ts"}
    assert graph["entry.ts"].imports == ("react", "./x.ts")
    assert builder.stats.external_imports == 2
    assert builder.stats.external_specifiers == {"react", "lodash"}
    assert builder.stats.relative_imports == 1


def test_reexport_sources_are_followed(project):
    project({
        "entry.ts": 'import { x } from "./f.ts";\nx();\n',
        "f.ts": 'export { x } from "./g.ts";\n',
        "g.ts": "export function x() {}\n",
    })

    graph = build_graph("entry.ts")

    assert "g.ts" in graph


def test_missing_module_aborts_build(project):
    project({
        "entry.ts": 'import { gone } from "./missing.ts";\ngone();\n',
    })

    with pytest.raises(ModuleLoadError) as exc_info:
        build_graph("entry.ts")

    assert exc_info.value.module_id == "missing.ts"
    assert exc_info.value.importer == "entry.ts"
    assert "missing.ts" in str(exc_info.value)


def test_missing_entry_aborts_build(project):
    project({})

    with pytest.raises(ModuleLoadError):
        build_graph("nowhere.ts")


def test_unparseable_module_does_not_abort_build(project):
    project({
        "entry.ts": 'import "./broken.ts";\nimport "./fine.ts";\n',
        "broken.ts": 'import "./never-followed.ts";\nconst s = "oops;\n',
        "fine.ts": "export const fine = true;\n",
    })
    builder = GraphBuilder()

    graph = builder.build_graph("entry.ts")

    assert set(graph) == {"entry.ts", "broken.ts", "fine.ts"}
    assert graph["broken.ts"].imports == ()
    assert graph["broken.ts"].used_symbols == frozenset()
    assert builder.stats.unparseable == ["broken.ts"]


def test_extension_resolution(project):
    project({
        "entry.ts": 'import { util } from "./lib";\nutil();\n',
        "lib/index.ts": "export const util = () => 1;\n",
    })

    graph = build_graph("entry.ts", {"extensions": [".ts"], "index_files": ["index"]})

    assert set(graph) == {"entry.ts", "lib/index.ts"}
    assert graph.dependencies("entry.ts") == ["lib/index.ts"]


def test_graph_is_read_only(project):
    project({"entry.ts": "export const a = 1;\n"})

    graph = build_graph("entry.ts")

    with pytest.raises(TypeError):
        graph.modules["other.ts"] = graph["entry.ts"]
    with pytest.raises(AttributeError):
        graph["entry.ts"].exports = frozenset()


def test_to_networkx(project):
    project({
        "a.ts": 'import "./b.ts";\nimport "react";\nexport const a = 1;\n',
        "b.ts": 'import "./a.ts";\n',
    })

    digraph = build_graph("a.ts").to_networkx()

    assert set(digraph.nodes) == {"a.ts", "b.ts"}
    assert set(digraph.edges) == {("a.ts", "b.ts"), ("b.ts", "a.ts")}
    assert digraph.nodes["a.ts"]["is_entry"] is True
    assert digraph.nodes["a.ts"]["exports"] == ["a"]


def test_export_json(project):
    root = project({
        "entry.ts": 'import { add } from "./math.ts";\nadd();\n',
        "math.ts": "export function add() {}\n",
    })
    graph = build_graph("entry.ts")

    graph.export_json(root / "out" / "graph.json", kept={"math.ts::add"})

    data = json.loads((root / "out" / "graph.json").read_text(encoding="utf-8"))
    assert data["format"] == ModuleGraph.FORMAT
    assert data["entry"] == "entry.ts"
    assert data["modules"] == [
        {"id": "entry.ts", "exports": [], "imports": ["./math.ts"]},
        {"id": "math.ts", "exports": ["add"], "imports": []},
    ]
    assert data["kept"] == ["math.ts::add"]


def test_statistics_summary(project):
    project({
        "entry.ts": 'import { add } from "./math.ts";\nadd();\n',
        "math.ts": "export function add() {}\nexport function sub() {}\n",
    })
    builder = GraphBuilder()
    builder.build_graph("entry.ts")

    stats = builder.stats
    assert stats.total_modules == 2
    assert stats.total_exports == 2
    assert stats.to_dict()["imports"]["relative"] == 1
    assert "Modules: 2" in str(stats)


def test_module_info_is_hashable(project):
    project({
        "entry.ts": 'import { add } from "./math.ts";\nadd();\n',
        "math.ts": "export function add() {}\n",
    })
    graph = build_graph("entry.ts")

    infos = {graph[module_id] for module_id in graph}

    assert len(infos) == 2
    assert graph["entry.ts"] in infos
