"""Tests for tailharvest.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from tailharvest.config import (
    DEFAULT_CLI_TIMEOUT,
    DEFAULT_RENDER_TIMEOUT,
    ConfigurationError,
    HarvestConfig,
    load_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, HarvestConfig)
    assert config.root == tmp_path.resolve()
    assert config.scan.extensions == [".razor", ".cshtml"]
    assert config.scan.exclude_paths == []
    assert config.render.timeout == DEFAULT_RENDER_TIMEOUT
    assert config.symbols.namespaces == []
    assert config.fallback.enabled is True
    assert config.tailwind.output is None
    assert config.tailwind.scaffold is True
    assert config.tailwind.run_cli is True
    assert config.tailwind.cli_timeout == DEFAULT_CLI_TIMEOUT


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".tailharvest.yml"
    config_file.write_text(
        """
scan:
  extensions: ["razor", ".HTML"]
  exclude_paths:
    - "legacy/"
render:
  timeout: 2.5
symbols:
  namespaces: ["acme_styles"]
fallback:
  enabled: "no"
tailwind:
  output: "../wwwroot/css/site.css"
  scaffold: false
  run_cli: false
  cli_timeout: 30
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.scan.extensions == [".razor", ".html"]
    assert config.scan.exclude_paths == ["legacy/"]
    assert config.render.timeout == pytest.approx(2.5)
    assert config.symbols.namespaces == ["acme_styles"]
    assert config.fallback.enabled is False
    assert config.tailwind.output == "../wwwroot/css/site.css"
    assert config.tailwind.scaffold is False
    assert config.tailwind.run_cli is False
    assert config.tailwind.cli_timeout == pytest.approx(30.0)


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".tailharvest.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".tailharvest.yml").write_text("scan: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(tmp_path)


def test_load_config_rejects_non_positive_timeout(tmp_path: Path) -> None:
    (tmp_path / ".tailharvest.yml").write_text("render:\n  timeout: 0\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(tmp_path)


def test_load_config_treats_empty_file_as_defaults(tmp_path: Path) -> None:
    (tmp_path / ".tailharvest.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.fallback.enabled is True
