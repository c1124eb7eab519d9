"""Data model for dependency graphs and resolved manifest entries."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

PROJECT_MARKER = "(project)"


def split_key(key: str) -> tuple[str, str | None]:
    """Split a node identifier at its first ``/`` into (name, suffix)."""
    slash = key.find("/")
    if slash <= 0:
        return key, None
    return key[:slash], key[slash + 1 :]


def project_key(name: str) -> str:
    return f"{name}/{PROJECT_MARKER}"


def is_project_key(key: str) -> bool:
    return key.endswith("/" + PROJECT_MARKER)


@dataclass
class ResolvedEntry:
    """One resolved library under a target framework."""

    key: str  # "Newtonsoft.Json/13.0.3"
    name: str
    dependencies: list[str] = field(default_factory=list)


class DependencyGraph:
    """Case-insensitive node set plus a deduplicated set of directed edges.

    Node identifiers keep the casing they were first added with; later
    additions that differ only by case map onto the stored form.  Edges are
    always stored with the stored forms of their endpoints, so every edge
    endpoint is a member of the node set.
    """

    def __init__(
        self,
        nodes: Iterable[str] = (),
        edges: Iterable[tuple[str, str]] = (),
    ) -> None:
        self._nodes: dict[str, str] = {}
        self._edges: dict[tuple[str, str], tuple[str, str]] = {}
        for node in nodes:
            self.add_node(node)
        for src, dst in edges:
            self.add_edge(src, dst)

    def add_node(self, key: str) -> str:
        """Add *key* and return its stored form."""
        return self._nodes.setdefault(key.lower(), key)

    def add_edge(self, src: str, dst: str) -> None:
        src = self.add_node(src)
        dst = self.add_node(dst)
        self._edges.setdefault((src.lower(), dst.lower()), (src, dst))

    def has_node(self, key: str) -> bool:
        return key.lower() in self._nodes

    def has_edge(self, src: str, dst: str) -> bool:
        return (src.lower(), dst.lower()) in self._edges

    @property
    def nodes(self) -> set[str]:
        return set(self._nodes.values())

    @property
    def edges(self) -> set[tuple[str, str]]:
        return set(self._edges.values())

    def project_nodes(self) -> list[str]:
        return [k for k in self._nodes.values() if is_project_key(k)]

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has_node(key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyGraph):
            return NotImplemented
        return self._nodes.keys() == other._nodes.keys() and (
            self._edges.keys() == other._edges.keys()
        )

    def __repr__(self) -> str:
        return f"DependencyGraph(nodes={len(self._nodes)}, edges={len(self._edges)})"
