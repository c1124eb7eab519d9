"""Interactive prompt: analyse one project per input line."""

from __future__ import annotations

import shlex
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from nugetgraph.cli import analyze
from nugetgraph.config import Settings
from nugetgraph.renderer import OutputFormat

HELP_TEXT = """\
Usage:
  <path>                 Path to .csproj, folder, or project.assets.json
  <path> --mermaid       Output in Mermaid format (.mmd)
  <path> --tfm=net8.0    Specify target framework
  help                   Show this help
  exit                   Quit

DOT output is also rendered to PNG and SVG when Graphviz is installed.

Examples:
  C:\\MyProject\\MyApp.csproj
  ../AnotherProject --mermaid
  . --tfm=net8.0
"""


def parse_command(line: str) -> tuple[str, dict[str, object]]:
    """Split an input line into a path and settings overrides."""
    # Non-POSIX mode keeps Windows backslashes intact.
    parts = [p.strip("\"'") for p in shlex.split(line, posix=False)]
    if not parts:
        raise ValueError("empty command")
    path, options = parts[0], parts[1:]
    overrides: dict[str, object] = {}
    i = 0
    while i < len(options):
        opt = options[i]
        if opt.lower() == "--mermaid":
            overrides["output_format"] = OutputFormat.MERMAID
        elif opt.lower().startswith("--tfm="):
            overrides["tfm"] = opt.split("=", 1)[1] or None
        elif opt.lower() == "--tfm" and i + 1 < len(options):
            i += 1
            overrides["tfm"] = options[i]
        else:
            raise ValueError(f"unknown option: {opt}")
        i += 1
    return path, overrides


def run_shell(
    settings: Settings,
    *,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> int:
    """Prompt for project paths until ``exit`` or end of input."""
    write("NuGet Dependency Graph Analyzer")
    write("===============================")
    write(f"Output directory: {settings.output_dir or Path.cwd()}")
    write(f"Session started: {datetime.now():%Y-%m-%d %H:%M:%S}")
    write("")

    while True:
        write("Enter project path (.csproj, project folder, or project.assets.json):")
        write("Or type 'exit' to quit, 'help' for options")
        try:
            line = read("> ").strip()
        except EOFError:
            return 0

        if not line:
            continue
        if line.lower() in ("exit", "quit"):
            write("Goodbye!")
            return 0
        if line.lower() == "help":
            write(HELP_TEXT)
            continue

        try:
            path, overrides = parse_command(line)
        except ValueError as e:
            write(f"Invalid input: {e}")
            continue

        write(f"Analyzing: {path}")
        write("-" * 50)
        code = analyze(path, settings.merged(**overrides), write=write)
        write("-" * 50)
        if code == 0:
            write("Analysis completed successfully!")
        else:
            write(f"Analysis failed with code: {code}")
        write("")
