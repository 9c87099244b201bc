"""Configuration management: TOML loading and config models.

Usage:
    >>> from ddl_graph.config import load_graph_config, GraphConfig
"""

from ddl_graph.config.loader import load_graph_config
from ddl_graph.config.models import GraphConfig

__all__ = ["load_graph_config", "GraphConfig"]
