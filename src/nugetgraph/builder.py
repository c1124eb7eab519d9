"""Build a package/project dependency graph from restore manifests.

The walk starts at one project's ``project.assets.json`` and follows its
project references depth-first, merging every visited project's resolved
packages into a single :class:`~nugetgraph.model.DependencyGraph`.  Each
manifest is processed at most once per run (tracked by its lower-cased
absolute path), which keeps diamond-shaped and cyclic reference graphs
finite.

Project references are discovered from two independent sources: the
manifest's ``project`` section and, for the root project only, the
``<ProjectReference>`` items of its ``.csproj``.  Either may list references
the other omits; overlapping discoveries collapse through the graph's set
semantics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from nugetgraph.detect import (
    find_project_file,
    guess_project_name,
    normalize_path,
    project_root,
    resolve_manifest,
)
from nugetgraph.errors import ManifestNotFoundError, NugetGraphError
from nugetgraph.extractors.assets import Manifest, TargetEnvironment, load_manifest
from nugetgraph.extractors.csproj import read_project_references
from nugetgraph.model import DependencyGraph, project_key

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    graph: DependencyGraph
    manifest_path: Path
    environment: str


class GraphBuilder:
    """Accumulates one run's nodes, edges and visited manifests."""

    def __init__(self, preferred_environment: str | None = None) -> None:
        self.preferred_environment = preferred_environment
        self.graph = DependencyGraph()
        # lower-cased manifest path -> project node it was first recorded as
        self._visited: dict[str, str] = {}

    @property
    def manifests_visited(self) -> int:
        return len(self._visited)

    def build(self, root_location: Path, root_name: str | None = None) -> BuildResult:
        """Walk the project at *root_location* and everything it references.

        Failures reading the root manifest are fatal; failures further down
        only truncate the affected branch.
        """
        location = normalize_path(root_location)
        manifest_path = resolve_manifest(location)
        if manifest_path is None:
            raise ManifestNotFoundError(f"project.assets.json not found for {location}")

        manifest = load_manifest(manifest_path)
        env = manifest.environment(self.preferred_environment)
        logger.info("Target framework: %s", env.name)

        root_key = self.graph.add_node(
            project_key(root_name or guess_project_name(location))
        )
        self._mark_visited(manifest_path, root_key)
        self._walk(location, manifest, env, root_key)

        project_file = find_project_file(location)
        if project_file is not None:
            for child in read_project_references(project_file):
                child_manifest = resolve_manifest(child)
                if not _exists(child, child_manifest):
                    logger.debug("%s: referenced project %s not found", project_file, child)
                    continue
                child_key = self._add_child(root_key, child, child_manifest)
                self._scan_shallow(child_manifest, child_key)

        logger.debug(
            "Built graph: %d nodes, %d edges, %d manifest(s)",
            len(self.graph),
            len(self.graph.edges),
            self.manifests_visited,
        )
        return BuildResult(self.graph, manifest_path, env.name)

    def _mark_visited(self, manifest_path: Path, key: str) -> bool:
        """Record *manifest_path* as project *key*; False if already recorded."""
        visit_key = _visit_key(manifest_path)
        if visit_key in self._visited:
            return False
        self._visited[visit_key] = key
        return True

    def _add_child(
        self, parent_key: str, location: Path, manifest_path: Path | None
    ) -> str:
        """Add the edge parent -> child and return the child's node.

        A manifest seen before keeps the node it was first recorded as, so the
        root stays a single node when a cycle leads back to it.
        """
        key = None
        if manifest_path is not None:
            key = self._visited.get(_visit_key(manifest_path))
        if key is None:
            key = project_key(guess_project_name(location))
        if key.lower() != parent_key.lower():
            self.graph.add_edge(parent_key, key)
        return self.graph.add_node(key)

    def _visit(self, location: Path, parent_key: str) -> None:
        """Process a referenced project unless its manifest was seen before."""
        manifest_path = resolve_manifest(location)
        if not _exists(location, manifest_path):
            logger.warning("Referenced project %s not found; skipping", location)
            return

        this_key = self._add_child(parent_key, location, manifest_path)
        if manifest_path is None:
            logger.warning("No project.assets.json for %s; skipping its packages", location)
            return

        if not self._mark_visited(manifest_path, this_key):
            return

        try:
            manifest = load_manifest(manifest_path)
            env = manifest.environment(self.preferred_environment)
        except NugetGraphError as e:
            logger.warning("Skipping %s: %s", location, e)
            return

        self._walk(location, manifest, env, this_key)

    def _walk(
        self,
        location: Path,
        manifest: Manifest,
        env: TargetEnvironment,
        this_key: str,
    ) -> None:
        self._add_packages(manifest, env, this_key)

        base_dir = _project_dir(location, manifest)
        for ref in manifest.project_references(env.name):
            self._visit(normalize_path(base_dir / ref.replace("\\", "/")), this_key)

    def _scan_shallow(self, manifest_path: Path | None, this_key: str) -> None:
        """Add a project's own packages without following its references."""
        if manifest_path is None:
            return
        try:
            manifest = load_manifest(manifest_path)
            env = manifest.environment(self.preferred_environment)
        except NugetGraphError as e:
            logger.debug("Skipping %s: %s", manifest_path, e)
            return
        self._add_packages(manifest, env, this_key)

    def _add_packages(
        self, manifest: Manifest, env: TargetEnvironment, this_key: str
    ) -> None:
        """Add resolved packages, package->package and project->package edges."""
        for entry in env.entries:
            self.graph.add_node(entry.key)
            for dep in entry.dependencies:
                dep_key = env.resolve(dep)
                if dep_key is None:
                    logger.debug("%s: unresolved dependency %s", entry.key, dep)
                    continue
                self.graph.add_edge(entry.key, dep_key)

        for dep in manifest.direct_dependencies(env.name):
            dep_key = env.resolve(dep)
            if dep_key is not None:
                self.graph.add_edge(this_key, dep_key)


def _visit_key(manifest_path: Path) -> str:
    return str(normalize_path(manifest_path)).lower()


def _exists(location: Path, manifest_path: Path | None) -> bool:
    """True when *location* is a restored project or has a project file."""
    return manifest_path is not None or find_project_file(location) is not None


def _project_dir(location: Path, manifest: Manifest) -> Path:
    """Directory relative project references are resolved against.

    Falls back to the manifest's recorded ``projectPath`` when the manifest
    lives outside the usual ``<project>/obj`` folder.
    """
    base_dir = project_root(location) or location.parent
    if find_project_file(location) is None:
        declared = manifest.project_path
        if declared is not None and declared.is_absolute() and declared.parent.is_dir():
            return declared.parent
    return base_dir


def build_graph(
    root_location: Path,
    root_name: str | None = None,
    preferred_environment: str | None = None,
) -> BuildResult:
    """Build the unified dependency graph rooted at *root_location*."""
    return GraphBuilder(preferred_environment).build(root_location, root_name)
