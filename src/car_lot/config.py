"""YAML configuration loader for application settings."""

import os
from pathlib import Path
from typing import Any

import yaml

from car_lot.models.pydantic_models import Settings

# Environment variables that replace a settings key
ENV_OVERRIDES = {
    "CAR_LOT_DB_PATH": "db_path",
    "DATABASE_URL": "database_url",
    "CAR_LOT_PHOTOS_DIR": "photos_dir",
}


def _get_default_config_path() -> Path:
    """Get the default config path relative to project root."""
    return Path(__file__).parent.parent.parent / "config" / "settings.yaml"


def _load_raw_config(path: Path) -> dict[str, Any]:
    """Load raw YAML config from path.

    Args:
        path: Path to YAML config file.

    Returns:
        Raw config dictionary (empty for an empty file).

    Raises:
        yaml.YAMLError: If YAML parsing fails.
    """
    with open(path, "r") as f:
        raw_config: dict[str, Any] | None = yaml.safe_load(f)

    return raw_config if raw_config is not None else {}


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate application settings from YAML.

    Args:
        path: Path to YAML config file. If None, uses CAR_LOT_CONFIG or
            config/settings.yaml, falling back to built-in defaults when
            that file does not exist.

    Returns:
        Validated Settings instance.

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist.
        yaml.YAMLError: If YAML parsing fails.
        ValidationError: If config doesn't match expected schema.
    """
    explicit = path is not None or bool(os.environ.get("CAR_LOT_CONFIG"))
    if path is None:
        env_path = os.environ.get("CAR_LOT_CONFIG")
        path = Path(env_path) if env_path else _get_default_config_path()

    raw_config: dict[str, Any] = {}
    if path.exists():
        raw_config = _load_raw_config(path)
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {path}")

    # Environment takes precedence over the file
    for env_var, key in ENV_OVERRIDES.items():
        if value := os.environ.get(env_var):
            raw_config[key] = value

    return Settings(**raw_config)
