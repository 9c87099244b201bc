"""TOML loader for ddl-graph configuration."""

import tomllib
from pathlib import Path

from ddl_graph.config.models import GraphConfig


def load_graph_config(config_path: Path | None = None) -> GraphConfig:
    """Load graph configuration from a TOML file.

    Expected layout (every key optional):

        [database]
        name = "shop"
        charset = "utf8mb4"
        drop_existing = false

        [parser]
        quote = "`"

        [link]
        error_on_duplicate = false
        integrity_check = true

        [schema]
        file = "schema.sql"

    Args:
        config_path: Path to the config file (default: ./ddl-graph.toml)

    Returns:
        GraphConfig with defaults filled in

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the file is not valid TOML or a value is invalid
    """
    if config_path is None:
        config_path = Path.cwd() / "ddl-graph.toml"

    if not config_path.exists():
        raise FileNotFoundError(f"ddl-graph config not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    database = data.get("database", {})
    parser = data.get("parser", {})
    link = data.get("link", {})
    schema_settings = data.get("schema", {})

    return GraphConfig(
        name=database.get("name", ""),
        charset=database.get("charset", "utf8"),
        drop_existing=database.get("drop_existing", False),
        quote=parser.get("quote", "`"),
        error_on_duplicate=link.get("error_on_duplicate", False),
        integrity_check=link.get("integrity_check", True),
        schema_file=schema_settings.get("file", "schema.sql"),
    )
