"""Deterministic node and edge ordering shared by the renderers."""

from __future__ import annotations

from nugetgraph.model import DependencyGraph


def sorted_nodes(graph: DependencyGraph) -> list[str]:
    return sorted(graph.nodes, key=lambda k: (k.lower(), k))


def sorted_edges(graph: DependencyGraph) -> list[tuple[str, str]]:
    return sorted(graph.edges)
