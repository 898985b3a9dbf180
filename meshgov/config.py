"""
Configuration management for the governance engine.
"""
import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables (prefix ``MESHGOV_``)."""

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_file_enabled: bool = Field(default=False)
    log_file_path: Path = Field(default=Path("./logs/meshgov.log"))

    # Notification audit log
    audit_log_enabled: bool = Field(default=False)
    audit_log_path: Path = Field(default=Path("./logs/meshgov_audit.jsonl"))

    # Persistence
    state_path: Path = Field(default=Path("./meshgov_state.json"))

    # Simulation
    simulation_seed: int = Field(default=1337)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Accept only level names known to :mod:`logging`."""
        level = str(v).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = {
        "env_file": ".env",
        "env_prefix": "MESHGOV_",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Create global settings instance
settings = Settings()


def get_settings(reload: bool = False, **overrides: object) -> Settings:
    """Return the global settings, or a fresh instance when reloading/overriding."""
    global settings
    if reload or overrides:
        fresh = Settings(**overrides)
        if reload:
            settings = fresh
        return fresh
    return settings


def resolve_path(value: Optional[Path], default: Path) -> Path:
    """Return *value* when given, else *default*."""
    return Path(value) if value is not None else default
