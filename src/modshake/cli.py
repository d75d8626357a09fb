"""modshake - Command Line Interface.

Builds module graphs from an entry file and reports which exports survive
tree shaking.
"""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

from .graph import GraphBuilder, GraphCache, ModuleGraph
from .graph.graph_builder import GraphStatistics
from .analyzers import DependencyAnalyzer, TreeShaker, UsageMode
from .parsers import JSParser
from .utils.config import config
from .utils.errors import ConfigError, ModshakeError, ParseError
from .utils.logger import setup_logger


console = Console()


def _get_graph(ctx, entry: Path) -> ModuleGraph:
    """Get the graph for an entry from the process cache."""
    cache: GraphCache = ctx.obj["cache"]
    with console.status("[bold blue]Building graph...[/bold blue]"):
        return cache.cached_graph(entry)


def _usage_mode(strict: bool) -> UsageMode:
    if strict:
        return UsageMode.IMPORTS
    value = config.usage_mode
    try:
        return UsageMode(value)
    except ValueError:
        choices = ", ".join(mode.value for mode in UsageMode)
        raise ConfigError(f"Invalid analysis.usage_mode '{value}' (expected one of: {choices})") from None


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file (default: ./modshake.yaml)"
)
@click.pass_context
def cli(ctx, verbose, config_path):
    """modshake - Build module graphs and tree-shake exports."""
    ctx.ensure_object(dict)
    config.load(config_path)

    log_file = config.get("logging.file")
    level = "DEBUG" if verbose else config.get("logging.level", "WARNING")
    setup_logger(level=level, log_file=Path(log_file) if log_file else None)

    ctx.obj["verbose"] = verbose
    ctx.obj["cache"] = GraphCache(lambda: GraphBuilder(config.builder_config()))


@cli.command()
@click.argument("entry", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output JSON file for graph export"
)
@click.pass_context
def graph(ctx, entry, output):
    """Build the module graph reachable from ENTRY.

    Example:
        modshake graph src/index.ts
        modshake graph src/index.ts -o graph.json
    """
    console.print(Panel(
        f"[bold blue]modshake[/bold blue]\n"
        f"Entry: [cyan]{escape(str(entry))}[/cyan]",
        title="Building",
        border_style="blue"
    ))

    builder = GraphBuilder(config.builder_config())
    try:
        module_graph = builder.build_graph(entry)
    except ModshakeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        ctx.exit(1)

    _display_statistics(builder.stats)
    _display_modules(module_graph)

    if output:
        module_graph.export_json(output)
        console.print(f"\n[green]Graph exported to:[/green] {escape(str(output))}")


@cli.command()
@click.argument("entry", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--strict", is_flag=True, help="Only follow names that are actually imported")
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output JSON file with the graph and kept-set"
)
@click.pass_context
def shake(ctx, entry, strict, output):
    """Tree-shake the graph of ENTRY and list kept exports.

    Example:
        modshake shake src/index.ts
        modshake shake src/index.ts --strict -o shake.json
    """
    try:
        mode = _usage_mode(strict)
        module_graph = _get_graph(ctx, entry)
    except ModshakeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        ctx.exit(1)

    result = TreeShaker(module_graph, mode).shake(module_graph.entry_id)

    table = Table(title=f"Kept exports ({len(result.kept)} of {result.total_exports})")
    table.add_column("Module", style="blue")
    table.add_column("Kept", style="green")
    for module_id, names in result.kept_by_module().items():
        table.add_row(escape(module_id), escape(", ".join(names)))
    console.print(table)

    if result.dropped:
        dropped = Table(title=f"Drop candidates ({len(result.dropped)})")
        dropped.add_column("Export", style="yellow")
        for key in sorted(result.dropped)[:50]:
            dropped.add_row(escape(key))
        console.print(dropped)
        if len(result.dropped) > 50:
            console.print(f"[dim]... and {len(result.dropped) - 50} more[/dim]")
    else:
        console.print("[green]Every export is reachable.[/green]")

    if output:
        module_graph.export_json(output, kept=result.kept)
        console.print(f"\n[green]Result exported to:[/green] {escape(str(output))}")


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def parse(file_path):
    """Parse a single file and show extracted information.

    Example:
        modshake parse src/math.ts
    """
    parser = JSParser()
    if not parser.can_parse(file_path):
        console.print(f"[red]Unsupported file type: {escape(file_path.suffix)}[/red]")
        return

    try:
        summary = parser.parse_file(file_path)
    except ParseError as e:
        console.print(f"[red]Syntax error in {escape(str(file_path))}: {escape(str(e))}[/red]")
        return

    console.print(f"[bold]Parsing:[/bold] {escape(str(file_path))}\n")

    imports_table = Table(title=f"Imports ({summary.import_count})")
    imports_table.add_column("Specifier", style="cyan")
    imports_table.add_column("Names", style="green")
    imports_table.add_column("Line", style="magenta")
    for decl in summary.imports:
        names = ", ".join(decl.names)
        if decl.namespace:
            names = (names + ", *") if names else "*"
        imports_table.add_row(escape(decl.specifier), escape(names), str(decl.line))
    console.print(imports_table)

    exports_table = Table(title=f"Exports ({summary.export_count})")
    exports_table.add_column("Kind", style="cyan")
    exports_table.add_column("Names", style="green")
    exports_table.add_column("Line", style="magenta")
    for decl in summary.exports:
        exports_table.add_row(decl.kind.name, escape(", ".join(decl.names)), str(decl.line))
    console.print(exports_table)

    console.print(f"\n[bold]Identifiers ({len(summary.identifiers)}):[/bold] "
                  f"{escape(', '.join(sorted(summary.identifiers)[:40]))}")
    if len(summary.identifiers) > 40:
        console.print(f"[dim]... and {len(summary.identifiers) - 40} more[/dim]")

    for warning in summary.warnings:
        console.print(f"[yellow]{escape(warning)}[/yellow]")


@cli.command()
@click.argument("entry", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--cycles", is_flag=True, help="Detect circular imports")
@click.option("--unused", is_flag=True, help="List exports that are drop candidates")
@click.option("--strict", is_flag=True, help="Only follow names that are actually imported")
@click.pass_context
def analyze(ctx, entry, cycles, unused, strict):
    """Run import analysis on the graph of ENTRY.

    Example:
        modshake analyze src/index.ts --cycles
        modshake analyze src/index.ts --unused
    """
    if not any([cycles, unused]):
        console.print("[yellow]Specify an analysis type: --cycles or --unused[/yellow]")
        return

    try:
        mode = _usage_mode(strict) if unused else None
        module_graph = _get_graph(ctx, entry)
    except ModshakeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        ctx.exit(1)

    analyzer = DependencyAnalyzer(module_graph)

    if cycles:
        console.print("[bold blue]Detecting circular imports...[/bold blue]\n")
        result = analyzer.detect_circular_imports(max_cycles=config.get("analysis.max_cycles", 50))
        console.print(result.format(), markup=False)

    if unused:
        console.print("[bold blue]Finding unused exports...[/bold blue]\n")
        result = analyzer.find_unused_exports(mode=mode)
        console.print(result.format(), markup=False)


# ===== HELPER FUNCTIONS =====

def _display_statistics(stats: GraphStatistics):
    """Display graph statistics."""
    graph_table = Table(title="Graph Statistics", show_header=False)
    graph_table.add_column("Metric", style="cyan")
    graph_table.add_column("Value", style="green", justify="right")
    graph_table.add_row("Modules", str(stats.total_modules))
    graph_table.add_row("Relative imports", str(stats.relative_imports))
    graph_table.add_row("External imports", str(stats.external_imports))
    graph_table.add_row("Exports", str(stats.total_exports))
    console.print(graph_table)
    console.print()

    if stats.unparseable:
        console.print(Panel(
            "\n".join(f"[yellow]{escape(module_id)}[/yellow]" for module_id in stats.unparseable),
            title=f"Unparseable modules ({len(stats.unparseable)})",
            border_style="yellow"
        ))


def _display_modules(module_graph: ModuleGraph):
    """Display the modules of a graph in visit order."""
    table = Table(title=f"Modules ({len(module_graph)})")
    table.add_column("Module", style="blue")
    table.add_column("Imports", style="cyan")
    table.add_column("Exports", style="green")

    for module_id in module_graph.order[:100]:
        info = module_graph[module_id]
        table.add_row(
            escape(module_id),
            escape(", ".join(info.imports)),
            escape(", ".join(sorted(info.exports)))
        )

    console.print(table)
    if len(module_graph) > 100:
        console.print(f"[dim]... and {len(module_graph) - 100} more[/dim]")


if __name__ == "__main__":
    cli()
