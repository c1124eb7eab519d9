"""Text renderers for dependency graphs."""

from __future__ import annotations

from enum import Enum

from nugetgraph.model import DependencyGraph
from nugetgraph.renderer.dot import render_dot
from nugetgraph.renderer.mermaid import render_mermaid

__all__ = ["OutputFormat", "render", "render_dot", "render_mermaid"]


class OutputFormat(str, Enum):
    DOT = "dot"
    MERMAID = "mermaid"

    @property
    def extension(self) -> str:
        return "mmd" if self is OutputFormat.MERMAID else "dot"


def render(
    graph: DependencyGraph,
    fmt: OutputFormat | str = OutputFormat.DOT,
    *,
    source_name: str,
    environment: str,
) -> str:
    """Render *graph* as DOT or Mermaid text."""
    if OutputFormat(fmt) is OutputFormat.MERMAID:
        return render_mermaid(graph, source_name=source_name, environment=environment)
    return render_dot(graph, source_name=source_name, environment=environment)
