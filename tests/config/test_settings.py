"""Tests for LineageSettings source priority."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from lineagectl.config.settings import LineageSettings


@pytest.mark.usefixtures("_isolated_config")
class TestLineageSettings:
    def test_defaults_without_config(self, tmp_path: Path) -> None:
        settings = LineageSettings.from_cli(cwd=tmp_path)
        assert settings.config_path is None
        assert settings.layout.max_nodes == 500
        assert settings.json_output is False

    def test_toml_discovered(self, tmp_path: Path) -> None:
        (tmp_path / "lineagectl.toml").write_text("[search]\nmin_query_length = 3\n")
        settings = LineageSettings.from_cli(cwd=tmp_path)
        assert settings.search.min_query_length == 3
        assert settings.config_path is not None

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        cfg = tmp_path / "other.toml"
        cfg.write_text('[layout]\ndirection = "LR"\n')
        settings = LineageSettings.from_cli(config_path=str(cfg), cwd=tmp_path)
        assert settings.layout.direction == "LR"

    def test_explicit_config_missing(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException):
            LineageSettings.from_cli(config_path=str(tmp_path / "absent.toml"))

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "lineagectl.toml").write_text("[layout\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            LineageSettings.from_cli(cwd=tmp_path)

    def test_cli_flags(self, tmp_path: Path) -> None:
        settings = LineageSettings.from_cli(cwd=tmp_path, json_output=True, verbose=True)
        assert settings.json_output is True
        assert settings.verbose is True

    def test_nested_env_var_override(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("LINEAGECTL_LAYOUT__MAX_NODES", "25")
        settings = LineageSettings.from_cli(cwd=tmp_path)
        assert settings.layout.max_nodes == 25

    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "lineagectl.toml").write_text("[layout]\nmax_nodes = 50\n")
        monkeypatch.setenv("LINEAGECTL_LAYOUT__MAX_NODES", "25")
        assert LineageSettings.from_cli(cwd=tmp_path).layout.max_nodes == 25

    def test_lineage_config_projection(self, tmp_path: Path) -> None:
        (tmp_path / "lineagectl.toml").write_text("[view]\nrelayout_on_filter = false\n")
        config = LineageSettings.from_cli(cwd=tmp_path).lineage_config()
        assert config.view.relayout_on_filter is False

    def test_frozen(self, tmp_path: Path) -> None:
        settings = LineageSettings.from_cli(cwd=tmp_path)
        with pytest.raises(Exception):
            settings.verbose = True  # type: ignore[misc]
