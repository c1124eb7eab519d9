"""Render a dependency graph as Graphviz DOT."""

from __future__ import annotations

from nugetgraph.model import DependencyGraph, split_key
from nugetgraph.renderer._order import sorted_edges, sorted_nodes


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _dot_id(key: str) -> str:
    return f'"{_escape(key)}"'


def _label(key: str) -> str:
    name, suffix = split_key(key)
    if suffix is None:
        return _escape(key)
    return f"{_escape(name)}\\n{_escape(suffix)}"


def render_dot(graph: DependencyGraph, *, source_name: str, environment: str) -> str:
    """Return a left-to-right ``digraph`` with one box per node."""
    lines = [
        "digraph NuGetDeps {",
        "  rankdir=LR;",
        "  node [shape=box, fontsize=10];",
        f'  label="NuGet dependencies for {_escape(source_name)}\\nTFM: '
        f'{_escape(environment)}"; labelloc=top; fontsize=12;',
    ]
    for key in sorted_nodes(graph):
        lines.append(f'  {_dot_id(key)} [label="{_label(key)}"];')
    for src, dst in sorted_edges(graph):
        lines.append(f"  {_dot_id(src)} -> {_dot_id(dst)};")
    lines.append("}")
    return "\n".join(lines) + "\n"
