"""Generate ``project.assets.json`` by running ``dotnet restore``."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from nugetgraph.errors import ExternalToolError

logger = logging.getLogger(__name__)


def run_restore(project_dir: Path, timeout: float | None = 300.0) -> None:
    """Run ``dotnet restore`` in *project_dir*, raising on any failure."""
    logger.info("Running 'dotnet restore' in %s...", project_dir)
    try:
        result = subprocess.run(
            ["dotnet", "restore"],
            capture_output=True,
            text=True,
            cwd=str(project_dir),
            timeout=timeout,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        raise ExternalToolError(f"Could not run dotnet restore: {e}") from e

    if result.returncode != 0:
        logger.debug("dotnet restore output:\n%s", result.stdout)
        raise ExternalToolError(
            "dotnet restore failed: "
            + (result.stderr.strip() or f"exit code {result.returncode}")
        )
