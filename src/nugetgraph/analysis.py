"""Post-build graph analysis (project/package collapsing, cycle detection)."""

from __future__ import annotations

import logging

from nugetgraph.model import DependencyGraph, is_project_key, split_key

logger = logging.getLogger(__name__)


def collapse_project_packages(graph: DependencyGraph) -> DependencyGraph:
    """Merge package nodes into the project node with the same bare name.

    A package named like an in-repo project (``MyLib/2.0.0`` next to
    ``MyLib/(project)``) is the artifact that project produces, so its edges
    are redirected to the project node and the package node is dropped.
    Edges that become self-loops are removed.  The name match alone decides;
    a genuinely unrelated package that happens to share a project's name is
    collapsed as well.

    Returns a new graph; *graph* is not modified.
    """
    project_by_name: dict[str, str] = {}
    for key in sorted(graph.project_nodes()):
        name, _ = split_key(key)
        project_by_name.setdefault(name.lower(), key)

    package_to_project: dict[str, str] = {}
    for key in graph.nodes:
        if is_project_key(key):
            continue
        name, version = split_key(key)
        if version is None:
            continue
        project = project_by_name.get(name.lower())
        if project is not None:
            package_to_project[key.lower()] = project

    result = DependencyGraph()
    for key in graph.nodes:
        if key.lower() not in package_to_project:
            result.add_node(key)

    for src, dst in graph.edges:
        src = package_to_project.get(src.lower(), src)
        dst = package_to_project.get(dst.lower(), dst)
        if src.lower() != dst.lower():
            result.add_edge(src, dst)

    if package_to_project:
        logger.debug("Collapsed %d package node(s) into projects", len(package_to_project))
    return result


def find_cycles(graph: DependencyGraph) -> list[list[str]]:
    """Return strongly-connected components of size ≥ 2 using Tarjan's algorithm.

    Each returned list is a group of node IDs that are mutually reachable via
    dependency edges, i.e. a dependency cycle.  Nodes that are not part of
    any cycle are omitted.

    The depth-first search keeps its own work stack, so long package chains
    do not hit the interpreter's recursion limit.
    """
    adjacency: dict[str, list[str]] = {key: [] for key in graph.nodes}
    for src, dst in sorted(graph.edges, key=lambda e: (e[0].lower(), e[1].lower())):
        adjacency[src].append(dst)

    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    sccs: list[list[str]] = []

    def _push(v: str) -> None:
        index[v] = lowlink[v] = len(index)
        stack.append(v)
        on_stack.add(v)

    for root in sorted(adjacency, key=str.lower):
        if root in index:
            continue
        _push(root)
        work = [(root, iter(adjacency[root]))]
        while work:
            v, successors = work[-1]
            for w in successors:
                if w not in index:
                    _push(w)
                    work.append((w, iter(adjacency[w])))
                    break
                if w in on_stack:
                    lowlink[v] = min(lowlink[v], index[w])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[v])
                if lowlink[v] == index[v]:
                    scc: list[str] = []
                    while True:
                        w = stack.pop()
                        on_stack.discard(w)
                        scc.append(w)
                        if w == v:
                            break
                    if len(scc) >= 2:
                        sccs.append(sorted(scc, key=str.lower))

    return sccs
