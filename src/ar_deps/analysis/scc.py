"""Strongly connected components of the dependency graph (Tarjan's algorithm)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Sequence

import networkx as nx

Component = tuple[str, ...]


@dataclass
class _TarjanState:
    """Traversal context shared by every depth-first search of one run."""

    counter: int = 0
    stack: list[str] = field(default_factory=list)
    index: dict[str, int] = field(default_factory=dict)
    lowlink: dict[str, int] = field(default_factory=dict)
    on_stack: set[str] = field(default_factory=set)
    components: list[Component] = field(default_factory=list)

    def discover(self, vertex: str) -> None:
        self.index[vertex] = self.counter
        self.lowlink[vertex] = self.counter
        self.counter += 1
        self.stack.append(vertex)
        self.on_stack.add(vertex)

    def settle(self, root: str) -> None:
        component: list[str] = []
        while True:
            vertex = self.stack.pop()
            self.on_stack.discard(vertex)
            component.append(vertex)
            if vertex == root:
                break
        self.components.append(tuple(component))


def _successors(graph: nx.DiGraph, vertex: str) -> Iterator[str]:
    return iter(sorted(graph.successors(vertex)))


def _strongconnect(graph: nx.DiGraph, root: str, state: _TarjanState) -> None:
    state.discover(root)
    # Explicit DFS frames (vertex, remaining successors) replace call-stack recursion.
    frames: list[tuple[str, Iterator[str]]] = [(root, _successors(graph, root))]

    while frames:
        vertex, successors = frames[-1]
        descended = False
        for successor in successors:
            if successor not in state.index:
                state.discover(successor)
                frames.append((successor, _successors(graph, successor)))
                descended = True
                break
            if successor in state.on_stack:
                state.lowlink[vertex] = min(state.lowlink[vertex], state.index[successor])
        if descended:
            continue

        frames.pop()
        if state.lowlink[vertex] == state.index[vertex]:
            state.settle(vertex)
        if frames:
            parent = frames[-1][0]
            state.lowlink[parent] = min(state.lowlink[parent], state.lowlink[vertex])


def tarjan_scc(graph: nx.DiGraph) -> list[Component]:
    """
    Return the strongly connected components of ``graph`` in reverse topological order.

    With edges pointing from dependent to dependency, every component is emitted after all the
    components it depends on. Vertices and successors are visited in sorted order, so the result
    is identical across runs.
    """

    state = _TarjanState()
    for vertex in sorted(graph.nodes):
        if vertex not in state.index:
            _strongconnect(graph, vertex, state)
    return list(state.components)


def cyclic_components(components: Sequence[Component]) -> list[Component]:
    """Components with more than one member, i.e. circular dependency clusters."""

    return [component for component in components if len(component) > 1]


def component_index(components: Sequence[Component]) -> dict[str, int]:
    """Map each vertex to the position of its component in ``components``."""

    return {vertex: position for position, component in enumerate(components) for vertex in component}


def internal_edges(graph: nx.DiGraph, component: Component) -> list[tuple[str, str, list[str]]]:
    """Edges between members of ``component`` with the symbols that create them."""

    members = set(component)
    edges = []
    for source in sorted(members):
        for target in sorted(graph.successors(source)):
            if target in members:
                edges.append((source, target, list(graph.edges[source, target].get("symbols", []))))
    return edges


__all__ = ["Component", "component_index", "cyclic_components", "internal_edges", "tarjan_scc"]
