"""Pydantic models for ddl-graph configuration."""

from pydantic import BaseModel, field_validator


# ============================================================================
# Configuration Models
# ============================================================================


class GraphConfig(BaseModel):
    """Complete ddl-graph configuration from ddl-graph.toml."""

    name: str = ""
    charset: str = "utf8"
    drop_existing: bool = False
    quote: str = "`"  # identifier quote character
    error_on_duplicate: bool = False
    integrity_check: bool = True
    schema_file: str = "schema.sql"

    @field_validator("quote")
    @classmethod
    def _single_character(cls, value: str) -> str:
        if len(value) != 1 or value.isspace():
            raise ValueError(f"quote must be a single non-space character, got {value!r}")
        return value
