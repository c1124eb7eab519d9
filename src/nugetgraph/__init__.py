"""Render NuGet package and project dependency graphs as DOT or Mermaid."""

__version__ = "0.1.0"
