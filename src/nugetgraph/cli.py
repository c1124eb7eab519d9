"""Command-line interface for nugetgraph."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from pathlib import Path

from nugetgraph.config import Settings, load_settings
from nugetgraph.detect import normalize_path, resolve_project_directory
from nugetgraph.errors import NugetGraphError
from nugetgraph.pipeline import run
from nugetgraph.renderer import OutputFormat

logger = logging.getLogger(__name__)


def analyze(
    path: str | Path,
    settings: Settings,
    *,
    output: Path | None = None,
    write: Callable[[str], None] = print,
) -> int:
    """Run the pipeline for *path* and return a process exit code."""
    try:
        result = run(path, settings=settings, output=output)
    except NugetGraphError as e:
        logger.error("Error: %s", e)
        return e.exit_code
    except Exception as e:  # noqa: BLE001
        logger.error("Error: %s", e)
        if e.__cause__ is not None:
            logger.error("   Inner: %s", e.__cause__)
        logger.debug("Unhandled error", exc_info=True)
        return 1

    if output is None:
        write(result.text.rstrip("\n"))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nugetgraph",
        description="Render NuGet package and project dependencies as DOT or Mermaid.",
    )
    parser.add_argument(
        "project_path",
        nargs="?",
        default=None,
        help=".csproj file, project folder, or project.assets.json "
        "(omit for interactive mode)",
    )
    parser.add_argument(
        "--tfm",
        default=None,
        help="Target framework to graph (exact name or unique prefix)",
    )
    parser.add_argument(
        "--mermaid",
        action="store_true",
        help="Output a Mermaid flow chart (.mmd) instead of DOT",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file path (default: <Project>_dependencies_<timestamp>.dot)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for auto-named output files (default: current directory)",
    )
    parser.add_argument(
        "--no-images",
        action="store_true",
        help="Do not render PNG/SVG with Graphviz",
    )
    parser.add_argument(
        "--no-restore",
        action="store_true",
        help="Fail instead of running 'dotnet restore' when no assets file exists",
    )
    parser.add_argument(
        "--open",
        action="store_true",
        dest="open_output",
        help="Open the generated graph when done",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if args.verbose:
        logging.getLogger("nugetgraph").setLevel(logging.DEBUG)

    search_dirs = [Path.cwd()]
    if args.project_path:
        project_dir = resolve_project_directory(normalize_path(args.project_path))
        if project_dir is not None:
            search_dirs.insert(0, project_dir)

    settings = load_settings(*search_dirs).merged(
        tfm=args.tfm,
        output_format=OutputFormat.MERMAID if args.mermaid else None,
        output_dir=args.output_dir,
        images=False if args.no_images else None,
        restore=False if args.no_restore else None,
        open_output=True if args.open_output else None,
    )

    if args.project_path is None:
        from nugetgraph.shell import run_shell

        return run_shell(settings)

    return analyze(args.project_path, settings, output=args.output)
