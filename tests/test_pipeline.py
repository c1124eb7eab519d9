"""Tests for the end-to-end pipeline."""

from datetime import datetime
from unittest.mock import patch

import pytest

from nugetgraph.config import Settings
from nugetgraph.errors import (
    ExternalToolError,
    ManifestNotFoundError,
    ProjectDirectoryNotFoundError,
)
from nugetgraph.pipeline import output_filename, run
from nugetgraph.renderer import OutputFormat


@pytest.fixture
def app(make_project, tmp_path):
    make_project(
        "App",
        packages={
            "Serilog/3.0.0": ["Newtonsoft.Json"],
            "Newtonsoft.Json/13.0.3": [],
            "Lib/1.0.0": [],
        },
        direct=["Serilog", "Lib"],
        refs=["../Lib/Lib.csproj"],
    )
    make_project("Lib", packages={"Dapper/2.1.0": []}, direct=["Dapper"])
    return tmp_path / "App"


def _settings(tmp_path, **kwargs):
    return Settings(output_dir=tmp_path / "out", images=False).merged(**kwargs)


def test_dot_run_writes_timestamped_file(app, tmp_path):
    result = run(app, settings=_settings(tmp_path))
    assert result.output_path.parent == tmp_path / "out"
    assert result.output_path.name.startswith("App_dependencies_")
    assert result.output_path.suffix == ".dot"
    assert result.output_path.read_text(encoding="utf-8") == result.text
    assert result.environment == "net8.0"
    assert result.images == []


def test_package_named_like_project_is_collapsed(app, tmp_path):
    result = run(app, settings=_settings(tmp_path))
    assert "Lib/1.0.0" not in result.graph
    assert result.graph.has_edge("App/(project)", "Lib/(project)")
    assert result.graph.has_edge("Lib/(project)", "Dapper/2.1.0")
    assert '"Lib/1.0.0"' not in result.text


def test_mermaid_run_with_explicit_output(app, tmp_path):
    out = tmp_path / "graphs" / "deps.mmd"
    result = run(
        app,
        settings=_settings(tmp_path, output_format=OutputFormat.MERMAID),
        output=out,
    )
    assert result.output_path == out
    text = out.read_text(encoding="utf-8")
    assert text.startswith("%% Mermaid graph")
    assert "App__project_ --> Lib__project_" in text


def test_images_rendered_for_dot(app, tmp_path):
    with patch("nugetgraph.pipeline.render_images", return_value=[]) as images:
        run(app, settings=_settings(tmp_path, images=True))
    images.assert_called_once()


def test_images_skipped_for_mermaid(app, tmp_path):
    with patch("nugetgraph.pipeline.render_images") as images:
        run(app, settings=_settings(tmp_path, images=True, output_format=OutputFormat.MERMAID))
    images.assert_not_called()


def test_open_prefers_png(app, tmp_path):
    png = tmp_path / "out" / "graph.png"
    with (
        patch("nugetgraph.pipeline.render_images", return_value=[tmp_path / "g.svg", png]),
        patch("webbrowser.open", return_value=True) as opener,
    ):
        run(app, settings=_settings(tmp_path, images=True, open_output=True))
    opener.assert_called_once_with(png.as_uri())


def test_deep_package_chain_is_rendered(make_project, tmp_path):
    keys = [f"P{i}/1.0.0" for i in range(1500)]
    packages = {key: [] for key in keys}
    for key, nxt in zip(keys, keys[1:]):
        packages[key] = [nxt.split("/")[0]]
    make_project("App", packages=packages, direct=["P0"])

    result = run(tmp_path / "App", settings=_settings(tmp_path))
    assert result.graph.has_edge("P1498/1.0.0", "P1499/1.0.0")
    assert result.output_path.is_file()


def test_unresolvable_path(tmp_path):
    with pytest.raises(ProjectDirectoryNotFoundError):
        run(tmp_path / "no" / "such", settings=_settings(tmp_path))


def test_missing_manifest_without_restore(make_project, tmp_path):
    make_project("App", assets=False)
    with pytest.raises(ManifestNotFoundError):
        run(tmp_path / "App", settings=_settings(tmp_path, restore=False))
    assert not (tmp_path / "out").exists()


def test_restore_generates_manifest(make_project, tmp_path):
    csproj = make_project("App", assets=False)

    def fake_restore(project_dir, timeout=None):
        make_project("App", packages={"Serilog/3.0.0": []}, direct=["Serilog"])

    with patch("nugetgraph.pipeline.run_restore", side_effect=fake_restore) as restore:
        result = run(csproj, settings=_settings(tmp_path))
    restore.assert_called_once_with(tmp_path / "App", timeout=300.0)
    assert result.graph.has_edge("App/(project)", "Serilog/3.0.0")


def test_restore_failure_propagates(make_project, tmp_path):
    make_project("App", assets=False)
    with patch(
        "nugetgraph.pipeline.run_restore", side_effect=ExternalToolError("dotnet restore failed")
    ):
        with pytest.raises(ExternalToolError):
            run(tmp_path / "App", settings=_settings(tmp_path))


def test_manifest_still_missing_after_restore(make_project, tmp_path):
    make_project("App", assets=False)
    with patch("nugetgraph.pipeline.run_restore"):
        with pytest.raises(ManifestNotFoundError, match="after restore"):
            run(tmp_path / "App", settings=_settings(tmp_path))


class TestOutputFilename:
    NOW = datetime(2024, 5, 6, 7, 8, 9)

    def test_pattern(self, tmp_path):
        path = output_filename("App", OutputFormat.DOT, tmp_path, now=self.NOW)
        assert path == tmp_path / "App_dependencies_20240506_070809.dot"

    def test_invalid_characters_replaced(self, tmp_path):
        path = output_filename('a:b/c*"d', OutputFormat.MERMAID, tmp_path, now=self.NOW)
        assert path.name == "a_b_c__d_dependencies_20240506_070809.mmd"

    def test_empty_name(self, tmp_path):
        path = output_filename("", OutputFormat.DOT, tmp_path, now=self.NOW)
        assert path.name.startswith("dependencies_dependencies_")
