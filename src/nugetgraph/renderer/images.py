"""Convert DOT files to PNG/SVG with the Graphviz ``dot`` command."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

IMAGE_FORMATS = ("png", "svg")


def is_graphviz_available() -> bool:
    """Return True if ``dot -V`` runs successfully."""
    if not shutil.which("dot"):
        return False
    try:
        result = subprocess.run(
            ["dot", "-V"],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


def convert_dot(dot_file: Path, fmt: str, timeout: float | None = 300.0) -> Path | None:
    """Render *dot_file* to ``<stem>.<fmt>`` next to it; None on failure."""
    out_file = dot_file.with_suffix(f".{fmt}")
    try:
        result = subprocess.run(
            ["dot", f"-T{fmt}", str(dot_file), "-o", str(out_file)],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("Could not run dot -T%s: %s", fmt, e)
        return None

    if result.returncode != 0 or not out_file.exists():
        logger.warning(
            "dot -T%s failed: %s",
            fmt,
            result.stderr.strip() if result.stderr else "unknown error",
        )
        return None
    return out_file


def render_images(dot_file: Path, timeout: float | None = 300.0) -> list[Path]:
    """Produce every image format Graphviz can make for *dot_file*."""
    if not is_graphviz_available():
        logger.warning(
            "Graphviz not found - install it for PNG/SVG output "
            "(https://graphviz.org/download/)"
        )
        return []

    images: list[Path] = []
    for fmt in IMAGE_FORMATS:
        image = convert_dot(dot_file, fmt, timeout=timeout)
        if image is not None:
            logger.info("%s saved to: %s", fmt.upper(), image)
            images.append(image)
    return images
