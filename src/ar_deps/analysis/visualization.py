"""Static rendering of archive dependency graphs."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
import networkx as nx

from ar_deps.analysis.dependency_graph import EXTERNAL_KIND
from ar_deps.analysis.scc import Component, component_index, cyclic_components

EXTERNAL_COLOUR = "#bbbbbb"
CYCLE_EDGE_COLOUR = "#d62728"


def _subset_graph(graph: nx.DiGraph, max_nodes: int | None) -> nx.DiGraph:
    if max_nodes is None or graph.number_of_nodes() <= max_nodes:
        return graph

    degrees = sorted(graph.degree, key=lambda item: (-item[1], item[0]))
    keep = {node for node, _ in degrees[:max_nodes]}
    return graph.subgraph(keep).copy()


def _archive_colours(graph: nx.DiGraph) -> dict[str, tuple]:
    archives = sorted({data.get("archive") for _, data in graph.nodes(data=True) if data.get("archive")})
    palette = plt.get_cmap("tab20")
    return {archive: palette(idx % palette.N) for idx, archive in enumerate(archives)}


def plot_dependency_graph(
    graph: nx.DiGraph,
    components: Sequence[Component],
    output_path: Path,
    *,
    max_nodes: int | None = 200,
    layout: str = "spring",
    show_labels: bool = True,
    title: str | None = None,
) -> Path:
    """
    Render the dependency graph to ``output_path`` as a PNG.

    Nodes are coloured by archive, external symbols are grey, and members of circular
    dependency clusters get a red outline along with the edges that bind them.
    """

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    graph = _subset_graph(graph, max_nodes)
    if graph.number_of_nodes() == 0:
        raise ValueError("Graph contains no nodes to visualize.")

    cyclic = {node for component in cyclic_components(components) for node in component}
    colours = _archive_colours(graph)
    node_colours = []
    outlines = []
    for node, data in graph.nodes(data=True):
        if data.get("kind") == EXTERNAL_KIND:
            node_colours.append(EXTERNAL_COLOUR)
        else:
            node_colours.append(colours.get(data.get("archive"), EXTERNAL_COLOUR))
        outlines.append(CYCLE_EDGE_COLOUR if node in cyclic else "none")

    position = component_index(components)
    cycle_edges = []
    other_edges = []
    for source, target in graph.edges():
        if source in cyclic and source != target and position.get(source) == position.get(target):
            cycle_edges.append((source, target))
        else:
            other_edges.append((source, target))

    if layout == "kamada-kawai":
        positions = nx.kamada_kawai_layout(graph)
    else:
        positions = nx.spring_layout(graph, seed=42, iterations=100)

    plt.figure(figsize=(12, 12))
    nx.draw_networkx_edges(graph, positions, edgelist=other_edges, alpha=0.3, width=0.5, arrows=True)
    nx.draw_networkx_edges(graph, positions, edgelist=cycle_edges, edge_color=CYCLE_EDGE_COLOUR, width=1.0, arrows=True)
    nx.draw_networkx_nodes(graph, positions, node_color=node_colours, edgecolors=outlines, node_size=120, alpha=0.9)

    if show_labels and graph.number_of_nodes() <= 150:
        labels = {node: data.get("member") or node for node, data in graph.nodes(data=True)}
        nx.draw_networkx_labels(graph, positions, labels=labels, font_size=7)

    if title is None:
        title = f"{graph.graph.get('name', '')}: {graph.number_of_nodes()} nodes, {len(cyclic)} in cycles"

    plt.title(title)
    plt.axis("off")
    plt.tight_layout()
    plt.savefig(output_path, dpi=200)
    plt.close()
    return output_path


__all__ = ["plot_dependency_graph"]
