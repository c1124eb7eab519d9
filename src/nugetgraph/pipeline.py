"""Orchestrator: locate → (restore) → build → collapse → render → save."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from nugetgraph.analysis import collapse_project_packages, find_cycles
from nugetgraph.builder import build_graph
from nugetgraph.config import Settings
from nugetgraph.detect import (
    guess_project_name,
    normalize_path,
    resolve_manifest,
    resolve_project_directory,
)
from nugetgraph.errors import ManifestNotFoundError, ProjectDirectoryNotFoundError
from nugetgraph.extractors.restore import run_restore
from nugetgraph.model import DependencyGraph
from nugetgraph.renderer import OutputFormat, render
from nugetgraph.renderer.images import render_images

logger = logging.getLogger(__name__)

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


@dataclass
class RunResult:
    text: str
    output_path: Path
    graph: DependencyGraph
    environment: str
    images: list[Path] = field(default_factory=list)


def locate_manifest(path: Path, settings: Settings) -> Path:
    """Find the manifest for *path*, restoring the project if necessary."""
    manifest = resolve_manifest(path)
    if manifest is not None:
        return manifest

    project_dir = resolve_project_directory(path)
    if project_dir is None:
        raise ProjectDirectoryNotFoundError(f"Unable to resolve project directory: {path}")

    if not settings.restore:
        raise ManifestNotFoundError(f"project.assets.json not found for {path}")

    run_restore(project_dir, timeout=settings.timeout)
    manifest = resolve_manifest(project_dir) or resolve_manifest(path)
    if manifest is None:
        raise ManifestNotFoundError("project.assets.json not found after restore.")
    return manifest


def output_filename(
    project_name: str,
    fmt: OutputFormat,
    output_dir: Path,
    now: datetime | None = None,
) -> Path:
    """``<Project>_dependencies_<timestamp>.<ext>`` inside *output_dir*."""
    name = _INVALID_FILENAME_CHARS.sub("_", project_name) or "dependencies"
    timestamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return output_dir / f"{name}_dependencies_{timestamp}.{fmt.extension}"


def _open_best(result: RunResult) -> None:
    """Open the PNG if there is one, else the SVG, else the text file."""
    import webbrowser

    by_suffix = {p.suffix: p for p in result.images}
    target = by_suffix.get(".png") or by_suffix.get(".svg") or result.output_path
    logger.info("Opening %s", target)
    if not webbrowser.open(target.as_uri()):
        logger.warning("Could not open %s; please open it manually.", target)


def run(
    path: str | Path,
    *,
    settings: Settings | None = None,
    output: Path | None = None,
) -> RunResult:
    """Run the full pipeline for *path* and return what was produced.

    Nothing is written when the root project cannot be analysed.
    """
    settings = settings or Settings()
    path = normalize_path(path)

    manifest = locate_manifest(path, settings)
    logger.info("Found assets: %s", manifest)
    location = path if resolve_manifest(path) is not None else manifest
    project_name = guess_project_name(location)

    built = build_graph(location, project_name, settings.tfm)
    graph = collapse_project_packages(built.graph)
    logger.info("Found %d nodes and %d dependencies", len(graph), len(graph.edges))

    cycles = find_cycles(graph)
    for cycle in cycles:
        logger.warning("Dependency cycle: %s", " -> ".join(cycle))

    fmt = OutputFormat(settings.output_format)
    text = render(
        graph,
        fmt,
        source_name=built.manifest_path.name,
        environment=built.environment,
    )

    out_path = output or output_filename(
        project_name, fmt, settings.output_dir or Path.cwd()
    )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text, encoding="utf-8")
    logger.info("%s saved to: %s", "Mermaid" if fmt is OutputFormat.MERMAID else "DOT", out_path)

    result = RunResult(
        text=text,
        output_path=out_path,
        graph=graph,
        environment=built.environment,
    )

    if fmt is OutputFormat.DOT and settings.images:
        result.images = render_images(out_path, timeout=settings.timeout)

    if settings.open_output:
        _open_best(result)

    return result
