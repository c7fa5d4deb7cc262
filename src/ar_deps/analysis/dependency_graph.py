"""Build the object-level dependency graph from a symbol table."""

from __future__ import annotations

import logging

import networkx as nx

from ar_deps.analysis.symbols import ObjectId, SymbolTable

LOGGER = logging.getLogger(__name__)

OBJECT_KIND = "object"
EXTERNAL_KIND = "external"


def _add_object_node(graph: nx.DiGraph, object_id: ObjectId) -> str:
    node = object_id.label
    if node not in graph:
        graph.add_node(node, kind=OBJECT_KIND, archive=object_id.archive, member=object_id.member)
    return node


def build_dependency_graph(table: SymbolTable, *, show_external: bool = False) -> nx.DiGraph:
    """
    Create a directed graph with an edge ``needy -> provider`` per resolved dependency.

    Each edge stores the sorted ``symbols`` that produced it. With ``show_external`` every needed
    symbol without a provider in the table becomes an isolated ``external`` vertex.
    """

    graph = nx.DiGraph(name=",".join(table.archive_names), archives=list(table.archives))
    edge_symbols: dict[tuple[str, str], set[str]] = {}

    for object_id in sorted(table.objects):
        _add_object_node(graph, object_id)

    for object_id, record in table.objects.items():
        needy = object_id.label
        for symbol in record.needs:
            provider = table.provider_of(symbol)
            if provider is None:
                if show_external and symbol not in graph:
                    graph.add_node(symbol, kind=EXTERNAL_KIND, archive=None, member=None)
                continue
            target = _add_object_node(graph, provider)
            edge_symbols.setdefault((needy, target), set()).add(symbol)

    for (needy, provider), symbols in sorted(edge_symbols.items()):
        graph.add_edge(needy, provider, symbols=sorted(symbols))

    graph.graph["node_count"] = graph.number_of_nodes()
    graph.graph["edge_count"] = graph.number_of_edges()
    LOGGER.debug("Dependency graph %s: %s nodes, %s edges", graph.graph["name"], graph.number_of_nodes(), graph.number_of_edges())
    return graph


def external_nodes(graph: nx.DiGraph) -> list[str]:
    return sorted(node for node, data in graph.nodes(data=True) if data.get("kind") == EXTERNAL_KIND)


def providers_of(graph: nx.DiGraph, node: str) -> list[str]:
    """Distinct objects ``node`` depends on, sorted."""

    return sorted(graph.successors(node))


__all__ = [
    "EXTERNAL_KIND",
    "OBJECT_KIND",
    "build_dependency_graph",
    "external_nodes",
    "providers_of",
]
