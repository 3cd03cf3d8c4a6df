"""Configuration for the backoffice services.

Loads from YAML config file with environment variable overrides.
Pattern: CONFIG__{SECTION}__{KEY} overrides nested YAML keys.
Example: CONFIG__DATA_SOURCE__BACKEND=fixture
"""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field

DEFAULT_FIXTURE = str(Path(__file__).parent / "storage" / "fixtures" / "demo.yaml")


# --- Data source ---


class DataSourceConfig(BaseModel):
    backend: Literal["live", "fixture", "auto"] = "auto"
    database_url: str = "sqlite+aiosqlite:///data/backoffice.db"
    fixture_path: str = DEFAULT_FIXTURE
    fallback_to_fixture: bool = True  # serve fixture data when live reads fail
    echo: bool = False


# --- Auth ---


class AuthConfig(BaseModel):
    secret_key: str = "change-me"  # from env: BACKOFFICE_SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=480, gt=0)


# --- Dashboard ---


class DashboardConfig(BaseModel):
    top_n: int = Field(default=5, ge=1)
    weeks: int = Field(default=4, ge=1)
    months: int = Field(default=6, ge=1)
    ending_soon_days: int = Field(default=7, ge=0)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# --- Service Config ---


class ServiceConfig(BaseModel):
    data_source: DataSourceConfig = DataSourceConfig()
    auth: AuthConfig = AuthConfig()
    dashboard: DashboardConfig = DashboardConfig()
    logging: LoggingConfig = LoggingConfig()


def _apply_env_overrides(config_dict: dict, prefix: str = "CONFIG") -> dict:
    """Apply environment variable overrides to config dict.

    Pattern: CONFIG__SECTION__KEY=value maps to config[section][key] = value
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}__"):
            continue
        parts = key[len(prefix) + 2 :].lower().split("__")
        target = config_dict
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        # Type coercion for common cases
        if value.lower() in ("true", "false"):
            value = value.lower() == "true"
        elif value.isdigit():
            value = int(value)
        target[parts[-1]] = value
    return config_dict


def load_config(config_path: Optional[str] = None) -> ServiceConfig:
    """Load configuration from YAML file with env overrides.

    Priority: env vars > YAML file > defaults
    """
    config_dict = {}

    # 1. Load YAML if exists
    if config_path is None:
        config_path = os.getenv("CONFIG_PATH", "config/backoffice.yml")
    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            config_dict = yaml.safe_load(f) or {}

    # 2. Apply env overrides
    config_dict = _apply_env_overrides(config_dict)

    # 3. Dedicated env vars (common pattern)
    data_source = config_dict.setdefault("data_source", {})
    if os.getenv("DATABASE_URL") and not data_source.get("database_url"):
        data_source["database_url"] = os.environ["DATABASE_URL"]
    auth = config_dict.setdefault("auth", {})
    if not auth.get("secret_key") and os.getenv("BACKOFFICE_SECRET_KEY"):
        auth["secret_key"] = os.environ["BACKOFFICE_SECRET_KEY"]

    return ServiceConfig(**config_dict)


# Singleton for the service
_config: Optional[ServiceConfig] = None


def get_config() -> ServiceConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Optional[str] = None) -> ServiceConfig:
    global _config
    _config = load_config(config_path)
    return _config
