"""Read ``<ProjectReference>`` items directly from an MSBuild project file."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from nugetgraph.detect import normalize_path

logger = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    # Old-style projects put everything in the MSBuild XML namespace.
    return tag.rsplit("}", 1)[-1]


def read_project_references(csproj_path: Path) -> list[Path]:
    """Return absolute paths of the projects referenced by *csproj_path*.

    Relative ``Include`` values are resolved against the project's directory.
    Duplicates (compared case-insensitively) are dropped; order is preserved.
    """
    try:
        tree = ET.parse(csproj_path)
    except (OSError, ET.ParseError) as e:
        logger.debug("Could not parse %s: %s", csproj_path, e)
        return []

    project_dir = csproj_path.parent
    refs: list[Path] = []
    seen: set[str] = set()
    for elem in tree.getroot().iter():
        if not isinstance(elem.tag, str) or _local_name(elem.tag) != "ProjectReference":
            continue
        include = (elem.get("Include") or "").strip()
        if not include:
            continue
        path = normalize_path(project_dir / include.replace("\\", "/"))
        if str(path).lower() in seen:
            continue
        seen.add(str(path).lower())
        refs.append(path)

    logger.debug("%s: %d project reference(s)", csproj_path.name, len(refs))
    return refs
