"""High-level orchestration of an archive dependency analysis."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol

import networkx as nx

from ar_deps.analysis.dependency_graph import build_dependency_graph
from ar_deps.analysis.formatting import render_components, render_dot, write_text
from ar_deps.analysis.scc import Component, cyclic_components, tarjan_scc
from ar_deps.analysis.symbols import SymbolTable, build_symbol_table, merge_symbol_tables
from ar_deps.config import AnalysisConfig
from ar_deps.io.binutils import CxxFiltDemangler, NmSymbolLister, identity_demangler

LOGGER = logging.getLogger(__name__)


class SymbolLister(Protocol):
    """Source of raw symbol listing lines and member names for an archive."""

    def list_symbols(self, archive: Path) -> Iterable[str]:
        ...

    def list_members(self, archive: Path) -> list[str]:
        ...


class Demangler(Protocol):
    def __call__(self, symbol: str) -> str:
        ...


@dataclass(slots=True)
class DependencyAnalysis:
    table: SymbolTable
    graph: nx.DiGraph
    components: list[Component]

    @property
    def cycles(self) -> list[Component]:
        return cyclic_components(self.components)


def analyze_archives(
    config: AnalysisConfig,
    *,
    lister: SymbolLister | None = None,
    demangler: Demangler | None = None,
) -> DependencyAnalysis:
    """
    Run the full analysis: list symbols per archive, merge, build the graph, compute SCCs.

    Archives are processed sequentially in the order given; any collaborator failure aborts the
    run.
    """

    lister = lister or NmSymbolLister(config.tools)
    if demangler is None:
        demangler = CxxFiltDemangler(config.tools.cxxfilt) if config.demangle else identity_demangler

    tables = []
    for archive in config.archives:
        LOGGER.info("Reading symbols from %s", archive)
        members = lister.list_members(archive) if config.list_members else []
        tables.append(
            build_symbol_table(lister.list_symbols(archive), archive=archive, members=members, demangle=demangler)
        )

    table = merge_symbol_tables(tables)
    graph = build_dependency_graph(table, show_external=config.show_external)
    components = tarjan_scc(graph)
    LOGGER.info(
        "%s objects, %s dependencies, %s components (%s cyclic)",
        len(table.objects),
        graph.number_of_edges(),
        len(components),
        len(cyclic_components(components)),
    )
    return DependencyAnalysis(table=table, graph=graph, components=components)


def write_outputs(analysis: DependencyAnalysis, config: AnalysisConfig) -> None:
    """Write the graph description and component listing requested by ``config``."""

    if config.dot_output is not None:
        write_text(render_dot(analysis.graph, analysis.components, cluster=config.cluster), config.dot_output)
    if config.scc_output is not None:
        write_text(render_components(analysis.components), config.scc_output)


__all__ = ["DependencyAnalysis", "Demangler", "SymbolLister", "analyze_archives", "write_outputs"]
