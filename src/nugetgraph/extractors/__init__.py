"""Readers for .NET restore manifests and MSBuild project files."""
