"""User settings, read from ``.nugetgraph.toml`` and overridden on the CLI."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from nugetgraph.renderer import OutputFormat

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = (".nugetgraph.toml", "nugetgraph.toml")


@dataclass(frozen=True)
class Settings:
    tfm: str | None = None
    output_format: OutputFormat = OutputFormat.DOT
    output_dir: Path | None = None
    images: bool = True  # PNG/SVG via Graphviz for DOT output
    open_output: bool = False
    restore: bool = True  # run `dotnet restore` when no manifest exists
    timeout: float = 300.0

    def merged(self, **overrides: Any) -> Settings:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _coerce(table: Any, base_dir: Path) -> dict[str, Any]:
    if not isinstance(table, dict):
        raise TypeError("[nugetgraph] must be a table")
    known = {f.name for f in fields(Settings)}
    values: dict[str, Any] = {}
    for key, value in table.items():
        key = key.replace("-", "_")
        if key not in known:
            logger.debug("Ignoring unknown setting %r", key)
            continue
        if key == "output_format":
            value = OutputFormat(value)
        elif key == "output_dir":
            value = base_dir / value
        elif key == "timeout":
            value = float(value)
        values[key] = value
    return values


def load_settings(*search_dirs: Path) -> Settings:
    """Read the ``[nugetgraph]`` table of the first config file found.

    Directories are searched in order; a file that cannot be read or parsed
    is skipped.
    """
    for directory in search_dirs:
        for name in CONFIG_FILE_NAMES:
            path = directory / name
            if not path.is_file():
                continue
            try:
                with open(path, "rb") as f:
                    data = tomllib.load(f)
                values = _coerce(data.get("nugetgraph", {}), path.parent)
            except (OSError, tomllib.TOMLDecodeError, ValueError, TypeError) as e:
                logger.warning("Ignoring %s: %s", path, e)
                continue
            logger.debug("Loaded settings from %s", path)
            return Settings(**values)
    return Settings()
