"""Text renderings of the dependency graph and its components."""

from __future__ import annotations

import sys
from collections import defaultdict
from pathlib import Path
from typing import Sequence

import networkx as nx

from ar_deps.analysis.dependency_graph import EXTERNAL_KIND
from ar_deps.analysis.scc import Component
from ar_deps.config import CLUSTER_MODES, STDOUT
from ar_deps.errors import InvalidClusterModeError

INDENT = "    "
# Dependents are drawn below their dependencies; edges point upwards, needy -> provider.
LAYOUT_HINT = "rankdir=BT;"


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_components(components: Sequence[Component]) -> str:
    """One line per component, members separated by spaces, in emission order."""

    return "".join(" ".join(component) + "\n" for component in components)


def _scc_clusters(components: Sequence[Component]) -> list[tuple[str, str, list[str]]]:
    clusters = []
    for position, component in enumerate(components):
        if len(component) < 2:
            continue
        label = f"SCC {position} ({len(component)} objects)"
        clusters.append((f"cluster_scc_{position}", label, sorted(component)))
    return clusters


def _archive_clusters(graph: nx.DiGraph) -> list[tuple[str, str, list[str]]]:
    by_archive: dict[str, list[str]] = defaultdict(list)
    for node, data in graph.nodes(data=True):
        if data.get("kind") == EXTERNAL_KIND or not data.get("archive"):
            continue
        by_archive[data["archive"]].append(node)

    clusters = []
    for position, archive in enumerate(sorted(by_archive)):
        clusters.append((f"cluster_archive_{position}", archive, sorted(by_archive[archive])))
    return clusters


def render_dot(graph: nx.DiGraph, components: Sequence[Component], *, cluster: str = "scc") -> str:
    """
    Render ``graph`` as a strict Graphviz digraph.

    ``cluster`` selects how vertices are grouped: ``scc`` draws one cluster per multi-member
    component, ``archive`` one cluster per source archive, and ``none`` emits no clusters.
    Vertices, edge statements and providers are sorted so the document is byte-for-byte
    reproducible.
    """

    if cluster not in CLUSTER_MODES:
        raise InvalidClusterModeError(cluster, CLUSTER_MODES)

    if cluster == "scc":
        clusters = _scc_clusters(components)
    elif cluster == "archive":
        clusters = _archive_clusters(graph)
    else:
        clusters = []

    lines = [f"strict digraph {_quote(graph.graph.get('name', ''))} {{", f"{INDENT}{LAYOUT_HINT}"]

    clustered: set[str] = set()
    for cluster_id, label, members in clusters:
        lines.append(f"{INDENT}subgraph {_quote(cluster_id)} {{")
        lines.append(f"{INDENT * 2}label={_quote(label)};")
        for member in members:
            lines.append(f"{INDENT * 2}{_quote(member)};")
            clustered.add(member)
        lines.append(f"{INDENT}}}")

    for node in sorted(graph.nodes):
        if node not in clustered:
            lines.append(f"{INDENT}{_quote(node)};")

    for node in sorted(graph.nodes):
        providers = sorted(graph.successors(node))
        if not providers:
            continue
        targets = " ".join(_quote(provider) for provider in providers)
        lines.append(f"{INDENT}{_quote(node)} -> {{ {targets} }};")

    lines.append("}")
    return "\n".join(lines) + "\n"


def write_text(text: str, destination: str | Path) -> None:
    """Write ``text`` to ``destination``; ``-`` means standard output."""

    if str(destination) == STDOUT:
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    path = Path(destination).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


__all__ = ["LAYOUT_HINT", "render_components", "render_dot", "write_text"]
