"""
Configuration management for twoleg.

Supports:
- Environment / .env file for deployment settings
- YAML config for arbitrage parameters, keeper routes and the simulation
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==============================================
    # Environment
    # ==============================================
    twoleg_env: str = Field(default="local", description="Environment: local/cloud")
    log_level: str = Field(default="INFO")
    timezone: str = Field(default="UTC")
    config_path: Optional[str] = Field(default=None, description="Override for config.yaml")

    # ==============================================
    # Accounts
    # ==============================================
    owner_address: str = Field(default="owner", description="Administrator account")
    engine_address: str = Field(default="arb-engine", description="Account holding engine funds")
    keeper_address: str = Field(default="keeper", description="Account the keeper trades from")

    # ==============================================
    # Database
    # ==============================================
    database_url: str = Field(default="sqlite:///data/twoleg.db")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v

    @property
    def is_local(self) -> bool:
        return self.twoleg_env == "local"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def find_project_root() -> Optional[Path]:
    """Directory holding pyproject.toml, if running from a checkout."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").exists():
            return parent
    return None


def load_yaml_config(config_path: Optional[str] = None) -> dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        config_path: Path to config file. Defaults to the config_path
            setting, then config/config.yaml under the project root.

    Returns:
        Configuration dictionary
    """
    if config_path is None:
        config_path = get_settings().config_path

    if config_path is None:
        root = find_project_root()
        if root is not None:
            config_path = str(root / "config" / "config.yaml")
        else:
            config_path = "config/config.yaml"

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}
