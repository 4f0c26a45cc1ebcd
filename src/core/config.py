"""Application settings. Defaults can be overridden with CHESS_* environment variables."""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, field_validator

ENV_PREFIX = "CHESS_"
LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    database_url: str = "sqlite:///chess_games.db"
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    log_rotation: str = "10 MB"
    log_retention: str = "1 week"
    default_white_name: str = "White"
    default_black_name: str = "Black"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {value!r}. Pick one from {','.join(LOG_LEVELS)}")
        return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Collect CHESS_<FIELD> variables (ex. CHESS_DATABASE_URL) and let pydantic validate them."""
    environ = os.environ if environ is None else environ
    overrides = {
        name: environ[f"{ENV_PREFIX}{name.upper()}"]
        for name in Settings.model_fields
        if f"{ENV_PREFIX}{name.upper()}" in environ
    }
    return Settings(**overrides)
