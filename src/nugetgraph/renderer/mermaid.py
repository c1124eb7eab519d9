"""Render a dependency graph as a Mermaid flow chart."""

from __future__ import annotations

from nugetgraph.model import DependencyGraph, split_key
from nugetgraph.renderer._order import sorted_edges, sorted_nodes


def mermaid_id(key: str) -> str:
    """Mermaid node ids may only contain letters, digits and underscores."""
    return "".join(ch if ch.isalnum() else "_" for ch in key)


def _label(key: str) -> str:
    name, suffix = split_key(key)
    label = name if suffix is None else f"{name} ({suffix})"
    return label.replace('"', "#quot;")


def render_mermaid(
    graph: DependencyGraph, *, source_name: str, environment: str
) -> str:
    lines = [
        "%% Mermaid graph (paste into Markdown)",
        "graph LR",
        f"  %% {source_name} | {environment}",
    ]
    for key in sorted_nodes(graph):
        lines.append(f'  {mermaid_id(key)}["{_label(key)}"]')
    for src, dst in sorted_edges(graph):
        lines.append(f"  {mermaid_id(src)} --> {mermaid_id(dst)}")
    return "\n".join(lines) + "\n"
