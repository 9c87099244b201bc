"""Tests for ddl-graph.toml loading."""

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from ddl_graph.config.loader import load_graph_config
from ddl_graph.config.models import GraphConfig


class TestLoadGraphConfig:
    """Verify load_graph_config() reads every section and fills defaults."""

    def test_full_config(self, tmp_path: Path) -> None:
        """Every section maps onto GraphConfig."""
        config_file = tmp_path / "ddl-graph.toml"
        config_file.write_text(textwrap.dedent("""\
            [database]
            name = "shop"
            charset = "utf8mb4"
            drop_existing = true

            [parser]
            quote = '"'

            [link]
            error_on_duplicate = true
            integrity_check = false

            [schema]
            file = "dump.sql"
        """))

        config = load_graph_config(config_file)

        assert config == GraphConfig(
            name="shop",
            charset="utf8mb4",
            drop_existing=True,
            quote='"',
            error_on_duplicate=True,
            integrity_check=False,
            schema_file="dump.sql",
        )

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        """An empty file yields the default configuration."""
        config_file = tmp_path / "ddl-graph.toml"
        config_file.write_text("")

        config = load_graph_config(config_file)

        assert config.name == ""
        assert config.charset == "utf8"
        assert config.quote == "`"
        assert config.integrity_check is True
        assert config.error_on_duplicate is False
        assert config.schema_file == "schema.sql"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """A missing file raises FileNotFoundError naming the path."""
        with pytest.raises(FileNotFoundError, match="ddl-graph config not found"):
            load_graph_config(tmp_path / "nope.toml")

    def test_default_path_is_cwd(self, tmp_path: Path, monkeypatch) -> None:
        """Without a path, ./ddl-graph.toml is read."""
        (tmp_path / "ddl-graph.toml").write_text('[database]\nname = "from_cwd"\n')
        monkeypatch.chdir(tmp_path)

        assert load_graph_config().name == "from_cwd"

    def test_invalid_quote_rejected(self, tmp_path: Path) -> None:
        """A multi-character quote fails validation."""
        config_file = tmp_path / "ddl-graph.toml"
        config_file.write_text('[parser]\nquote = "``"\n')

        with pytest.raises(ValidationError, match="single non-space character"):
            load_graph_config(config_file)

    def test_invalid_toml_raises_value_error(self, tmp_path: Path) -> None:
        """Broken TOML surfaces as ValueError."""
        config_file = tmp_path / "ddl-graph.toml"
        config_file.write_text("[database\nname = ")

        with pytest.raises(ValueError):
            load_graph_config(config_file)
