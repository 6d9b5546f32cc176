"""
Configuration management for the AI product feed service.
"""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from ai_feed.core.feed.models import FeedSettings
from ai_feed.core.security import sanitize_dict_for_logging
from ai_feed.schemas.feed import FeedSettingsPayload


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings (environment / .env)."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    feed_settings_path: str = Field(default="./feed_settings.json")

    # WooCommerce store connection
    store_url: str = Field(default="")
    consumer_key: str = Field(default="")
    consumer_secret: str = Field(default="")

    # Token for admin preview/download/validate/push endpoints
    admin_api_token: str = Field(default="")

    push_interval_seconds: int = Field(default=900)
    push_timeout_seconds: float = Field(default=15.0)

    log_level: str = Field(default="INFO")


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings_file(config_path: Optional[str] = None) -> Dict:
    """
    Load raw feed settings from JSON file.

    Args:
        config_path: Optional path to settings file. If None, uses FEED_SETTINGS_PATH.

    Returns:
        Dict of settings values ({} when the file does not exist).

    Raises:
        ValueError: If the file is not a JSON object.
    """
    path = Path(config_path or get_settings().feed_settings_path)

    if not path.exists():
        logger.debug(f"Feed settings file not found: {path}, using defaults")
        return {}

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Feed settings file is not valid JSON: {e}")

    if not isinstance(data, dict):
        raise ValueError("Feed settings must be a JSON object")

    return data


def load_feed_settings(config_path: Optional[str] = None) -> FeedSettings:
    """
    Load and sanitize feed settings into an immutable snapshot.

    Called at the start of every build so edits to the file apply to the
    next request.
    """
    data = load_settings_file(config_path)
    snapshot = FeedSettingsPayload(**data).to_snapshot()
    logger.debug(f"Loaded feed settings: {sanitize_dict_for_logging(asdict(snapshot))}")
    return snapshot
