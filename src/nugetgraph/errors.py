"""Exceptions raised while building a dependency graph, with CLI exit codes."""

from __future__ import annotations


class NugetGraphError(Exception):
    """Base class for fatal errors; ``exit_code`` is returned by the CLI."""

    exit_code = 1


class ProjectDirectoryNotFoundError(NugetGraphError):
    exit_code = 3


class ExternalToolError(NugetGraphError):
    """An external command (``dotnet restore``) failed or could not run."""

    exit_code = 4


class ManifestNotFoundError(NugetGraphError):
    exit_code = 5


class ManifestMalformedError(NugetGraphError):
    """The manifest is not JSON or lacks the ``targets`` object."""

    exit_code = 6


class EnvironmentNotFoundError(NugetGraphError):
    exit_code = 7
