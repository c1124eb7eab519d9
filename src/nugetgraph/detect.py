"""Locate project files and restore manifests on disk."""

from __future__ import annotations

import os
from pathlib import Path

from nugetgraph.extractors.assets import ASSETS_FILE_NAME

PROJECT_SUFFIX = ".csproj"


def normalize_path(path: str | os.PathLike[str]) -> Path:
    """Absolute, ``..``-collapsed form of *path*; surrounding quotes stripped."""
    if isinstance(path, str):
        path = path.strip().strip('"')
    return Path(os.path.abspath(os.path.expanduser(path)))


def is_manifest(path: Path) -> bool:
    return path.is_file() and path.name.lower() == ASSETS_FILE_NAME


def is_project_file(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() == PROJECT_SUFFIX


def _first_project_file(directory: Path) -> Path | None:
    candidates = sorted(
        p for p in directory.glob("*") if p.suffix.lower() == PROJECT_SUFFIX
    )
    return next((p for p in candidates if p.is_file()), None)


def _project_dir_of_manifest(manifest: Path) -> Path:
    """Walk up from ``obj/.../project.assets.json`` to the project directory."""
    directory = manifest.parent
    while directory.name.lower() != "obj":
        if directory.parent == directory:
            return manifest.parent
        directory = directory.parent
    return directory.parent


def resolve_manifest(path: Path) -> Path | None:
    """Find the ``project.assets.json`` belonging to *path*.

    *path* may be the manifest itself, a ``.csproj`` file, or a project
    directory.  Returns None when nothing has been restored yet.
    """
    if is_manifest(path):
        return path

    if is_project_file(path):
        obj_dir = path.parent / "obj"
        candidate = obj_dir / ASSETS_FILE_NAME
        if candidate.is_file():
            return candidate
        if obj_dir.is_dir():
            return next(
                (p for p in sorted(obj_dir.rglob(ASSETS_FILE_NAME)) if p.is_file()),
                None,
            )
        return None

    if path.is_dir():
        candidate = path / "obj" / ASSETS_FILE_NAME
        if candidate.is_file():
            return candidate

    return None


def resolve_project_directory(path: Path) -> Path | None:
    """Return the directory ``dotnet restore`` should run in, or None."""
    if is_project_file(path):
        return path.parent

    if path.is_dir():
        project_file = _first_project_file(path)
        return project_file.parent if project_file else path

    # A .csproj path that does not exist (yet) but whose folder does.
    if path.suffix.lower() == PROJECT_SUFFIX and path.parent.is_dir():
        return path.parent

    return None


def find_project_file(path: Path) -> Path | None:
    """Return the ``.csproj`` for a project file, directory, or manifest."""
    if is_project_file(path):
        return path
    if is_manifest(path):
        return _first_project_file(_project_dir_of_manifest(path))
    if path.is_dir():
        return _first_project_file(path)
    return None


def project_root(path: Path) -> Path | None:
    """Directory of the project that *path* (file, directory or manifest) denotes."""
    if is_manifest(path):
        return _project_dir_of_manifest(path)
    if path.is_file():
        return path.parent
    if path.is_dir():
        return path
    return None


def guess_project_name(path: Path) -> str:
    """Guess a project's display name from its ``.csproj`` or directory name."""
    project_file = find_project_file(path)
    if project_file is not None:
        return project_file.stem
    root = project_root(path)
    if root is not None and root.name:
        return root.name
    return path.stem
