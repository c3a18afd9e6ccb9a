"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:     str = "cguide"
    db_url:       str = "sqlite:///cguide.db"
    max_chars:    int = Field(default=2000, ge=100, le=10000, description="Default packet text budget")
    default_task: str = Field(default="writing", description="Packet task used when none is given")
    max_history:  int = Field(default=20, ge=0, description="Max stored history entries; 0 disables pruning")
    block_namespaces: list[str] = Field(
        default_factory=lambda: ["core", "woocommerce", "jetpack"],
        description="Known block namespaces used to repair legacy block keys",
    )
    author_id:    int = Field(default=0, ge=0, description="Author recorded on history entries")
    site_url:     str = Field(default="", description="Site URL written into exports")
    log_level:    str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @field_validator("block_namespaces", mode="before")
    @classmethod
    def _split_namespaces(cls, value):
        # env vars arrive as "core,woocommerce"
        if isinstance(value, str):
            return [ns.strip() for ns in value.split(",") if ns.strip()]
        return value


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then CGUIDE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"CGUIDE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
