"""Shared fixtures: on-disk .NET projects with restore manifests."""

import json
from pathlib import Path

import pytest

TFM = "net8.0"


def write_project(
    root,
    name,
    *,
    packages=None,
    direct=(),
    refs=(),
    restore_refs=(),
    top_refs=(),
    csproj_refs=(),
    tfm=TFM,
    targets=None,
    assets=True,
):
    """Create ``root/name/name.csproj`` and, optionally, its assets file.

    *packages* maps resolved keys ("Pkg/1.0.0") to the bare names they depend
    on.  *refs* go under ``project.frameworks[tfm].projectReferences``,
    *restore_refs* under ``project.restore.frameworks[tfm]`` and *top_refs*
    under ``project.projectReferences``.
    """
    project_dir = Path(root) / name
    project_dir.mkdir(parents=True, exist_ok=True)
    csproj = project_dir / f"{name}.csproj"
    items = "".join(
        f'    <ProjectReference Include="{ref}" />\n' for ref in csproj_refs
    )
    csproj.write_text(
        '<Project Sdk="Microsoft.NET.Sdk">\n'
        "  <ItemGroup>\n"
        f"{items}"
        "  </ItemGroup>\n"
        "</Project>\n"
    )

    if not assets:
        return csproj

    if targets is None:
        libraries = {}
        for key, deps in (packages or {}).items():
            entry = {"type": "package"}
            if deps:
                entry["dependencies"] = {d: "1.0.0" for d in deps}
            libraries[key] = entry
        targets = {tfm: libraries}

    framework = {}
    if direct:
        framework["dependencies"] = {d: {"target": "Package"} for d in direct}
    if refs:
        framework["projectReferences"] = {r: {} for r in refs}

    project = {
        "restore": {
            "projectPath": str(csproj),
            "frameworks": {
                tfm: {"projectReferences": {r: {"projectPath": r} for r in restore_refs}}
            },
        },
        "frameworks": {tfm: framework},
    }
    if top_refs:
        project["projectReferences"] = {r: {} for r in top_refs}

    obj_dir = project_dir / "obj"
    obj_dir.mkdir(exist_ok=True)
    (obj_dir / "project.assets.json").write_text(
        json.dumps({"version": 3, "targets": targets, "project": project})
    )
    return csproj


@pytest.fixture
def make_project(tmp_path):
    def _make(name, **kwargs):
        return write_project(tmp_path, name, **kwargs)

    return _make
