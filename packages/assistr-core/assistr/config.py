"""
Assistr Configuration

Loads settings from ~/.assistr/config.yaml with environment variable overrides.
Covers the database backing the collection store and the AI completion endpoint.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional
import os
import logging

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".assistr"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_SQLITE_PATH = "~/.assistr/assistr.db"
DEFAULT_AI_ENDPOINT = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_AI_MODEL = "anthropic/claude-sonnet-4"


@dataclass
class DatabaseConfig:
    """Database configuration settings."""

    type: str = "sqlite"  # "sqlite" or "postgres"
    sqlite_path: str = DEFAULT_SQLITE_PATH
    postgres_url: Optional[str] = None


@dataclass
class AIConfig:
    """Chat-completion endpoint settings."""

    endpoint: str = DEFAULT_AI_ENDPOINT
    model: str = DEFAULT_AI_MODEL
    api_key: Optional[str] = None
    max_tokens: int = 4000
    temperature: float = 0.7
    timeout: float = 60.0
    system_prompt: Optional[str] = None
    auto_task_generation: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AssistrConfig:
    """
    Complete Assistr configuration.

    Loaded from ~/.assistr/config.yaml with environment variable overrides.
    """

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary for display (masks secrets)."""
        result = asdict(self)

        # Mask database URL
        if result.get("database", {}).get("postgres_url"):
            url = result["database"]["postgres_url"]
            result["database"]["postgres_url"] = url[:30] + "..." if len(url) > 30 else "***"

        if result.get("ai", {}).get("api_key"):
            key = result["ai"]["api_key"]
            result["ai"]["api_key"] = key[:6] + "..." if len(key) > 12 else "***"

        return result


def _parse_database_config(data: dict) -> DatabaseConfig:
    """Parse database configuration from YAML data."""
    db_data = data.get("database") or {}

    db_type = db_data.get("type", "sqlite")

    sqlite_config = db_data.get("sqlite") or {}
    sqlite_path = sqlite_config.get("path", DEFAULT_SQLITE_PATH)

    postgres_config = db_data.get("postgres") or {}
    postgres_url = postgres_config.get("url")

    # Check for URL from environment variable reference
    url_env = postgres_config.get("url_env")
    if url_env and not postgres_url:
        postgres_url = os.environ.get(url_env)

    return DatabaseConfig(
        type=db_type,
        sqlite_path=sqlite_path,
        postgres_url=postgres_url,
    )


def _parse_ai_config(data: dict) -> AIConfig:
    """Parse AI endpoint configuration from YAML data."""
    ai_data = data.get("ai") or {}
    defaults = AIConfig()

    api_key = ai_data.get("api_key")
    key_env = ai_data.get("api_key_env")
    if key_env and not api_key:
        api_key = os.environ.get(key_env)

    return AIConfig(
        endpoint=ai_data.get("endpoint", defaults.endpoint),
        model=ai_data.get("model", defaults.model),
        api_key=api_key,
        max_tokens=int(ai_data.get("max_tokens", defaults.max_tokens)),
        temperature=float(ai_data.get("temperature", defaults.temperature)),
        timeout=float(ai_data.get("timeout", defaults.timeout)),
        system_prompt=ai_data.get("system_prompt"),
        auto_task_generation=bool(ai_data.get("auto_task_generation", False)),
    )


def _parse_logging_config(data: dict) -> LoggingConfig:
    logging_data = data.get("logging") or {}
    return LoggingConfig(level=str(logging_data.get("level", "INFO")).upper())


def load_config(config_path: Optional[Path] = None) -> AssistrConfig:
    """
    Load configuration from file with environment variable overrides.

    Args:
        config_path: Optional path to config file. Defaults to ~/.assistr/config.yaml

    Returns:
        AssistrConfig instance
    """
    config_file = config_path or CONFIG_FILE
    config = AssistrConfig()

    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f) or {}

            config.database = _parse_database_config(data)
            config.ai = _parse_ai_config(data)
            config.logging = _parse_logging_config(data)

        except yaml.YAMLError as e:
            logger.warning(f"Could not parse config file at {config_file}: {e}")
        except (OSError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Unexpected error loading config from {config_file}: {e}")

    # Environment variable overrides
    if os.environ.get("ASSISTR_DATABASE_URL"):
        config.database.type = "postgres"
        config.database.postgres_url = os.environ["ASSISTR_DATABASE_URL"]

    if os.environ.get("ASSISTR_AI_ENDPOINT"):
        config.ai.endpoint = os.environ["ASSISTR_AI_ENDPOINT"]

    if os.environ.get("ASSISTR_AI_MODEL"):
        config.ai.model = os.environ["ASSISTR_AI_MODEL"]

    if os.environ.get("ASSISTR_AI_API_KEY"):
        config.ai.api_key = os.environ["ASSISTR_AI_API_KEY"]
    elif not config.ai.api_key and os.environ.get("OPENROUTER_API_KEY"):
        config.ai.api_key = os.environ["OPENROUTER_API_KEY"]

    if os.environ.get("ASSISTR_LOG_LEVEL"):
        config.logging.level = os.environ["ASSISTR_LOG_LEVEL"].upper()

    return config


def save_config(config: AssistrConfig, config_path: Optional[Path] = None) -> None:
    """
    Save configuration to file.

    The API key is never written; point `ai.api_key_env` at an environment
    variable instead.

    Args:
        config: AssistrConfig instance to save
        config_path: Optional path to config file. Defaults to ~/.assistr/config.yaml
    """
    config_file = config_path or CONFIG_FILE

    config_file.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "database": {
            "type": config.database.type,
        },
        "ai": {
            "endpoint": config.ai.endpoint,
            "model": config.ai.model,
            "max_tokens": config.ai.max_tokens,
            "temperature": config.ai.temperature,
            "timeout": config.ai.timeout,
            "auto_task_generation": config.ai.auto_task_generation,
        },
        "logging": {
            "level": config.logging.level,
        },
    }

    if config.database.type == "sqlite":
        data["database"]["sqlite"] = {"path": config.database.sqlite_path}
    elif config.database.postgres_url:
        data["database"]["postgres"] = {"url": config.database.postgres_url}

    if config.ai.system_prompt:
        data["ai"]["system_prompt"] = config.ai.system_prompt

    with open(config_file, 'w') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    # Secure permissions (readable only by owner)
    config_file.chmod(0o600)

    logger.info(f"Configuration saved to {config_file}")


def ensure_config_dir() -> Path:
    """Ensure config directory exists and return its path."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


# Cached config instance
_config: Optional[AssistrConfig] = None


def get_config() -> AssistrConfig:
    """Get cached config instance, loading if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config

