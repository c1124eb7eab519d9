"""Read resolved NuGet dependencies from ``project.assets.json``."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from nugetgraph.errors import (
    EnvironmentNotFoundError,
    ManifestMalformedError,
    ManifestNotFoundError,
)
from nugetgraph.model import ResolvedEntry, split_key

logger = logging.getLogger(__name__)

ASSETS_FILE_NAME = "project.assets.json"


def choose_environment(available: Iterable[str], preferred: str | None = None) -> str:
    """Pick a target framework key from *available*.

    An exact match of *preferred* wins, then a case-insensitive exact match;
    otherwise *preferred* may be a case-insensitive prefix of exactly one key.
    Anything else falls back to the first key in document order.
    """
    keys = list(available)
    if not keys:
        raise EnvironmentNotFoundError("No target frameworks in assets file.")

    if preferred:
        if preferred in keys:
            return preferred
        lowered = preferred.lower()
        for key in keys:
            if key.lower() == lowered:
                return key
        matches = [k for k in keys if k.lower().startswith(lowered)]
        if len(matches) == 1:
            return matches[0]
        logger.debug(
            "TFM %r matched %d targets; using %s", preferred, len(matches), keys[0]
        )

    return keys[0]


@dataclass
class TargetEnvironment:
    """The resolved libraries of one target framework."""

    name: str
    entries: list[ResolvedEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        # First occurrence wins when two keys share a bare name.
        self._name_to_key: dict[str, str] = {}
        for entry in self.entries:
            self._name_to_key.setdefault(entry.name.lower(), entry.key)

    def resolve(self, name: str) -> str | None:
        """Return the fully qualified key for bare dependency *name*, or None."""
        key = self._name_to_key.get(name.lower())
        if key is not None:
            return key
        prefix = name.lower() + "/"
        for entry in self.entries:
            if entry.key.lower().startswith(prefix):
                self._name_to_key[name.lower()] = entry.key
                return entry.key
        return None


@dataclass
class Manifest:
    """A parsed ``project.assets.json`` document."""

    path: Path
    targets: dict[str, Any]
    project: dict[str, Any] = field(default_factory=dict)

    @property
    def environments(self) -> list[str]:
        return list(self.targets)

    @property
    def project_path(self) -> Path | None:
        """The ``.csproj`` this manifest was restored for, if recorded."""
        restore = self.project.get("restore")
        if not isinstance(restore, dict):
            return None
        raw = restore.get("projectPath")
        if not isinstance(raw, str) or not raw:
            return None
        return Path(raw)

    def choose_environment(self, preferred: str | None = None) -> str:
        return choose_environment(self.targets, preferred)

    def environment(self, preferred: str | None = None) -> TargetEnvironment:
        name = self.choose_environment(preferred)
        libraries = self.targets.get(name)
        entries: list[ResolvedEntry] = []
        if isinstance(libraries, dict):
            for key, lib in libraries.items():
                entries.append(_parse_entry(key, lib))
        return TargetEnvironment(name=name, entries=entries)

    def direct_dependencies(self, environment: str) -> list[str]:
        """Names of packages the project itself references for *environment*."""
        framework = _framework_section(self.project.get("frameworks"), environment)
        if framework is None:
            return []
        deps = framework.get("dependencies")
        if not isinstance(deps, dict):
            return []
        return list(deps)

    def project_references(self, environment: str) -> list[str]:
        """Paths of referenced projects, relative to this project or absolute.

        References may be listed at ``project.projectReferences``, under
        ``project.frameworks[tfm]`` or under ``project.restore.frameworks[tfm]``.
        """
        sections: list[Any] = [self.project.get("projectReferences")]

        framework = _framework_section(self.project.get("frameworks"), environment)
        if framework is not None:
            sections.append(framework.get("projectReferences"))

        restore = self.project.get("restore")
        if isinstance(restore, dict):
            framework = _framework_section(restore.get("frameworks"), environment)
            if framework is not None:
                sections.append(framework.get("projectReferences"))

        refs: list[str] = []
        seen: set[str] = set()
        for section in sections:
            if not isinstance(section, dict):
                continue
            for ref in section:
                if ref.lower() not in seen:
                    seen.add(ref.lower())
                    refs.append(ref)
        return refs


def _parse_entry(key: str, lib: Any) -> ResolvedEntry:
    name, _ = split_key(key)
    if not isinstance(lib, dict):
        return ResolvedEntry(key=key, name=name)
    deps = lib.get("dependencies")
    return ResolvedEntry(
        key=key,
        name=name,
        dependencies=list(deps) if isinstance(deps, dict) else [],
    )


def _framework_section(frameworks: Any, environment: str) -> dict | None:
    """Return the per-framework section of *frameworks* matching *environment*."""
    if not isinstance(frameworks, dict) or not frameworks:
        return None
    lowered = {k.lower(): k for k in frameworks}
    # Runtime-specific targets look like "net8.0/win-x64".
    for candidate in (environment, environment.split("/", 1)[0]):
        key = lowered.get(candidate.lower())
        if key is not None:
            break
    else:
        key = choose_environment(frameworks, environment)
    section = frameworks[key]
    return section if isinstance(section, dict) else None


def load_manifest(path: Path) -> Manifest:
    """Parse *path* into a :class:`Manifest`."""
    try:
        with open(path, encoding="utf-8-sig") as f:
            data = json.load(f)
    except OSError as e:
        raise ManifestNotFoundError(f"Cannot read {path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ManifestMalformedError(f"Invalid {path.name}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestMalformedError(f"Invalid {path.name}: expected a JSON object.")

    targets = data.get("targets")
    if not isinstance(targets, dict):
        raise ManifestMalformedError(f"Invalid {path.name}: 'targets' not found.")

    project = data.get("project")
    return Manifest(
        path=path,
        targets=targets,
        project=project if isinstance(project, dict) else {},
    )
