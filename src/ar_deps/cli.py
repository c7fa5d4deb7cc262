"""Command line entry points for the project."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from ar_deps import __version__
from ar_deps.analysis.scc import internal_edges
from ar_deps.analysis.visualization import plot_dependency_graph
from ar_deps.config import CLUSTER_MODES, AnalysisConfig, ToolPaths
from ar_deps.errors import ArDepsError
from ar_deps.io.binutils import CxxFiltDemangler, NmSymbolLister, identity_demangler
from ar_deps.pipelines.archive_deps import DependencyAnalysis, analyze_archives, write_outputs


def _resolve_archives(archives: List[Path]) -> List[Path]:
    resolved: List[Path] = []
    for item in archives:
        candidate = item.expanduser().resolve()
        if not candidate.exists():
            raise typer.BadParameter(f"Archive not found: {candidate}")
        resolved.append(candidate)
    if not resolved:
        raise typer.BadParameter("At least one archive is required.")
    return resolved


def _run_analysis(config: AnalysisConfig) -> DependencyAnalysis:
    try:
        return analyze_archives(config, lister=NmSymbolLister(config.tools))
    except ArDepsError as exc:
        _fail(str(exc), exc)


def _fail(message: str, exc: Exception) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


app = typer.Typer(help="Inspect link dependencies between the objects of static archives.")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    display_version: bool = typer.Option(False, "--version", "-V", help="Show version and exit."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Report progress while reading archives."),
) -> None:
    """Configure logging and print the package version when requested."""

    if display_version:
        typer.echo(__version__)
        raise typer.Exit()

    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("analyze")
def analyze(
    archives: List[Path] = typer.Argument(..., help="Static library archives (.a) to analyse."),
    dot: Optional[str] = typer.Option(None, "--dot", help="Write a Graphviz description of the dependency graph ('-' for stdout)."),
    sccs: Optional[str] = typer.Option(None, "--sccs", help="Write strongly connected components, one per line ('-' for stdout)."),
    external: bool = typer.Option(False, "--external/--no-external", help="Show unresolved symbols as vertices."),
    cluster: str = typer.Option("scc", "--cluster", "-c", help="Graph clustering: scc, archive or none."),
    plot: Optional[Path] = typer.Option(None, "--plot", help="Optional PNG rendering of the dependency graph."),
    max_nodes: Optional[int] = typer.Option(200, help="Limit the number of nodes drawn in the PNG."),
    demangle: bool = typer.Option(True, "--demangle/--no-demangle", help="Demangle symbol names in diagnostics."),
    members: bool = typer.Option(True, "--members/--no-members", help="Include members without global symbols (ar t)."),
    nm: str = typer.Option("nm", envvar="NM", help="nm executable."),
    ar: str = typer.Option("ar", envvar="AR", help="ar executable."),
    cxxfilt: str = typer.Option("c++filt", envvar="CXXFILT", help="c++filt executable."),
) -> None:
    """Build the object dependency graph and report its strongly connected components.

    Without --dot or --sccs the components are written to standard output.
    """

    cluster = cluster.lower()
    if cluster not in CLUSTER_MODES:
        raise typer.BadParameter(f"Unsupported cluster mode: {cluster} (expected one of {', '.join(CLUSTER_MODES)})")

    config = AnalysisConfig.from_archives(
        _resolve_archives(archives),
        tools=ToolPaths(nm=nm, ar=ar, cxxfilt=cxxfilt),
        dot_output=dot,
        scc_output=sccs,
        plot_output=plot,
        show_external=external,
        cluster=cluster,
        demangle=demangle,
        list_members=members,
    )

    analysis = _run_analysis(config)
    try:
        write_outputs(analysis, config)
    except OSError as exc:
        _fail(f"Failed to write output: {exc}", exc)

    if config.plot_output is not None:
        try:
            png_path = plot_dependency_graph(analysis.graph, analysis.components, config.plot_output, max_nodes=max_nodes)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        except OSError as exc:
            _fail(f"Failed to write visualization: {exc}", exc)
        typer.echo(f"Visualization saved to {png_path}", err=True)


@app.command("cycles")
def cycles(
    archives: List[Path] = typer.Argument(..., help="Static library archives (.a) to analyse."),
    symbols: bool = typer.Option(True, "--symbols/--no-symbols", help="List the symbols that bind each cycle."),
    demangle: bool = typer.Option(True, "--demangle/--no-demangle", help="Demangle binding symbols and diagnostics."),
    nm: str = typer.Option("nm", envvar="NM", help="nm executable."),
    ar: str = typer.Option("ar", envvar="AR", help="ar executable."),
    cxxfilt: str = typer.Option("c++filt", envvar="CXXFILT", help="c++filt executable."),
) -> None:
    """Summarise circular dependency clusters between archive members."""

    config = AnalysisConfig.from_archives(
        _resolve_archives(archives),
        tools=ToolPaths(nm=nm, ar=ar, cxxfilt=cxxfilt),
        demangle=demangle,
    )
    analysis = _run_analysis(config)

    pretty = CxxFiltDemangler(config.tools.cxxfilt) if demangle else identity_demangler
    found = analysis.cycles
    typer.echo(f"Objects: {len(analysis.table.objects)}  Dependencies: {analysis.graph.number_of_edges()}")
    if not found:
        typer.secho("No circular dependencies found.", fg=typer.colors.GREEN)
        return

    typer.secho(f"Circular dependency clusters: {len(found)}", fg=typer.colors.YELLOW)
    for idx, component in enumerate(found, start=1):
        typer.echo(f"{idx:2d}. {len(component)} objects: {' '.join(sorted(component))}")
        if not symbols:
            continue
        for source, target, names in internal_edges(analysis.graph, component):
            try:
                shown = [pretty(name) for name in names[:5]]
            except ArDepsError as exc:
                _fail(str(exc), exc)
            display = ", ".join(shown)
            if len(names) > 5:
                display += f", ... (+{len(names) - 5})"
            typer.echo(f"      {source} -> {target}: {display}")


def run() -> None:
    """Entry point used by ``python -m ar_deps.cli``."""

    app()


if __name__ == "__main__":
    run()
