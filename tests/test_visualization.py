"""Tests for the PNG rendering of dependency graphs."""

from __future__ import annotations

from pathlib import Path

import networkx as nx
import pytest

from ar_deps.analysis.scc import tarjan_scc
from ar_deps.analysis.visualization import plot_dependency_graph


def _graph() -> nx.DiGraph:
    graph = nx.DiGraph(name="libdemo.a")
    for member in ("a.o", "b.o", "c.o"):
        graph.add_node(f"libdemo.a({member})", kind="object", archive="libdemo.a", member=member)
    graph.add_node("printf", kind="external", archive=None, member=None)
    graph.add_edge("libdemo.a(a.o)", "libdemo.a(b.o)", symbols=["pong"])
    graph.add_edge("libdemo.a(b.o)", "libdemo.a(a.o)", symbols=["ping"])
    graph.add_edge("libdemo.a(c.o)", "libdemo.a(a.o)", symbols=["ping"])
    return graph


def test_plot_dependency_graph(tmp_path: Path) -> None:
    graph = _graph()
    output = tmp_path / "figures" / "deps.png"

    result = plot_dependency_graph(graph, tarjan_scc(graph), output)

    assert result == output
    assert output.read_bytes().startswith(b"\x89PNG")


def test_plot_rejects_empty_graph(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        plot_dependency_graph(nx.DiGraph(), [], tmp_path / "empty.png")
