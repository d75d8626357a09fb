"""Tests for the tree shaker."""

import pytest

from modshake.analyzers import TreeShaker, UsageMode, kept_key, tree_shake
from modshake.analyzers.tree_shaker import split_kept_key
from modshake.graph import ModuleGraph, ModuleInfo, build_graph


def make_graph(entry_id, *infos):
    """Graph built straight from ModuleInfo records, no files involved."""
    return ModuleGraph(entry_id, {info.id: info for info in infos})


@pytest.fixture
def scenario(project):
    project({
        "entry.ts": 'import { add } from "./math.ts";\nconsole.log(add(1, 2));\n',
        "math.ts": "export function add(a, b) { return a + b; }\n"
                   "export function sub(a, b) { return a - b; }\n",
    })
    return build_graph("entry.ts")


def test_kept_key_format():
    assert kept_key("lib/math.ts", "add") == "lib/math.ts::add"
    assert split_kept_key("lib/math.ts::add") == ("lib/math.ts", "add")


def test_scenario_keeps_only_used_export(scenario):
    kept = tree_shake(scenario, "entry.ts")

    assert kept == {"math.ts::add"}
    assert "math.ts::sub" not in kept
    assert not any(key.startswith("entry.ts::") for key in kept)


def test_entry_exports_are_always_kept():
    graph = make_graph(
        "entry.ts",
        ModuleInfo(
            id="entry.ts",
            exports=frozenset({"run", "unused"}),
            used_symbols=frozenset({"run", "unused"}),
        ),
    )

    assert tree_shake(graph) == {"entry.ts::run", "entry.ts::unused"}


def test_entry_exports_kept_even_when_never_mentioned():
    # The front-end always reports exported names as identifiers; a custom
    # one might not, and the entry surface is still kept.
    graph = make_graph("entry.ts", ModuleInfo(id="entry.ts", exports=frozenset({"api"})))

    assert tree_shake(graph) == {"entry.ts::api"}


def test_transitive_reexport(project):
    project({
        "entry.ts": 'import { x } from "./f.ts";\nx();\n',
        "f.ts": 'import { x } from "./g.ts";\nexport { x };\n',
        "g.ts": "export const x = 1;\nexport const y = 2;\n",
    })

    kept = tree_shake(build_graph("entry.ts"))

    assert {"f.ts::x", "g.ts::x"} <= kept
    assert "g.ts::y" not in kept


def test_unmentioned_symbol_does_not_propagate():
    graph = make_graph(
        "entry.ts",
        ModuleInfo(
            id="entry.ts",
            imports=("./mid.ts",),
            used_symbols=frozenset({"value"}),
        ),
        ModuleInfo(
            id="mid.ts",
            imports=("./leaf.ts",),
            used_symbols=frozenset({"other"}),
        ),
        ModuleInfo(
            id="leaf.ts",
            exports=frozenset({"value"}),
            used_symbols=frozenset({"value"}),
        ),
    )

    assert tree_shake(graph) == set()


def test_cycle_terminates(project):
    project({
        "a.ts": 'import { b } from "./b.ts";\nexport const a = () => b();\n',
        "b.ts": 'import { a } from "./a.ts";\nexport const b = () => a();\n',
    })
    graph = build_graph("a.ts")

    result = TreeShaker(graph).shake("a.ts")

    assert result.kept == {"a.ts::a", "b.ts::b"}
    assert result.dropped == set()


def test_self_import_terminates():
    graph = make_graph(
        "self.ts",
        ModuleInfo(
            id="self.ts",
            imports=("./self.ts",),
            exports=frozenset({"me"}),
            used_symbols=frozenset({"me"}),
        ),
    )

    assert tree_shake(graph) == {"self.ts::me"}


def test_unrelated_local_name_keeps_export_in_name_mode(project):
    project({
        "entry.ts": 'import { add } from "./math.ts";\nconst sub = 1;\nadd(sub);\n',
        "math.ts": "export function add() {}\nexport function sub() {}\n",
    })
    graph = build_graph("entry.ts")

    assert "math.ts::sub" in tree_shake(graph, mode=UsageMode.NAMES)
    assert "math.ts::sub" not in tree_shake(graph, mode=UsageMode.IMPORTS)


def test_namespace_import_keeps_mentioned_names_in_import_mode(project):
    project({
        "entry.ts": 'import * as math from "./math.ts";\nmath.sub();\n',
        "math.ts": "export function add() {}\nexport function sub() {}\n",
    })
    graph = build_graph("entry.ts")

    kept = tree_shake(graph, mode=UsageMode.IMPORTS)

    assert kept == {"math.ts::sub"}


def test_import_mode_never_keeps_more_than_name_mode(project):
    project({
        "entry.ts": 'import { a } from "./lib.ts";\nimport "./side.ts";\nconst b = a;\n',
        "lib.ts": 'import { c } from "./side.ts";\nexport const a = c;\nexport const b = 2;\n',
        "side.ts": "export const c = 3;\nexport const b = 4;\n",
    })
    graph = build_graph("entry.ts")

    strict = tree_shake(graph, mode=UsageMode.IMPORTS)
    loose = tree_shake(graph, mode=UsageMode.NAMES)

    assert strict <= loose
    assert "lib.ts::b" in loose
    assert "lib.ts::b" not in strict


def test_missing_entry_keeps_nothing(scenario):
    result = TreeShaker(scenario).shake("nowhere.ts")

    assert result.kept == set()
    assert result.dropped == {"math.ts::add", "math.ts::sub"}
    assert result.reachable == set()


def test_kept_plus_dropped_covers_every_export(scenario):
    result = TreeShaker(scenario).shake("entry.ts")

    assert result.kept | result.dropped == {"math.ts::add", "math.ts::sub"}
    assert result.kept.isdisjoint(result.dropped)
    assert result.total_exports == 2


def test_consumers_index(scenario):
    shaker = TreeShaker(scenario)

    assert shaker.consumers("math.ts") == ["entry.ts"]
    assert shaker.consumers("entry.ts") == []
    assert shaker.consumers("unknown.ts") == []


def test_reachable_modules():
    graph = make_graph(
        "entry.ts",
        ModuleInfo(id="entry.ts", imports=("./a.ts", "react")),
        ModuleInfo(id="a.ts"),
        ModuleInfo(id="orphan.ts", imports=("./a.ts",)),
    )

    assert TreeShaker(graph).reachable_modules("entry.ts") == {"entry.ts", "a.ts"}


def test_shaking_does_not_mutate_graph(scenario):
    before = {module_id: scenario[module_id] for module_id in scenario}

    tree_shake(scenario)
    tree_shake(scenario, mode=UsageMode.IMPORTS)

    assert {module_id: scenario[module_id] for module_id in scenario} == before


def test_repeated_shakes_agree(scenario):
    shaker = TreeShaker(scenario)

    assert shaker.shake("entry.ts").kept == shaker.shake("./entry.ts").kept


def test_result_helpers(scenario):
    result = TreeShaker(scenario).shake("entry.ts")

    assert result.kept_by_module() == {"math.ts": ["add"]}
    text = result.format()
    assert "math.ts::add" in text
    assert "math.ts::sub" in text


def test_component_used_from_jsx_is_kept(project):
    project({
        "App.tsx": 'import { Button } from "./button.ts";\n'
                   "export function App() {\n"
                   "  return <div><Button /></div>;\n"
                   "}\n",
        "button.ts": "export function Button() {}\nexport function Unused() {}\n",
    })
    graph = build_graph("App.tsx")

    assert graph["App.tsx"].parse_error is None
    assert tree_shake(graph) == {"App.tsx::App", "button.ts::Button"}


@pytest.mark.parametrize("mode", [UsageMode.NAMES, UsageMode.IMPORTS])
def test_export_all_barrel_forwards_usage(project, mode):
    project({
        "entry.ts": 'import { add } from "./index.ts";\nadd(1, 2);\n',
        "index.ts": 'export * from "./math.ts";\n',
        "math.ts": "export function add() {}\nexport function sub() {}\n",
    })

    kept = tree_shake(build_graph("entry.ts"), mode=mode)

    assert kept == {"math.ts::add"}


def test_nested_barrels_forward_usage(project):
    project({
        "entry.ts": 'import { helper } from "./lib/index.ts";\nhelper();\n',
        "lib/index.ts": 'export * from "./utils/index.ts";\n',
        "lib/utils/index.ts": 'export * from "./helper.ts";\nexport * from "./other.ts";\n',
        "lib/utils/helper.ts": "export const helper = () => 1;\n",
        "lib/utils/other.ts": "export const other = 2;\n",
    })

    kept = tree_shake(build_graph("entry.ts"))

    assert kept == {"lib/utils/helper.ts::helper"}
