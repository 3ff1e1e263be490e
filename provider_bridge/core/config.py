"""
Configuration management using Pydantic Settings.

All configuration values are loaded from environment variables
with sensible defaults where appropriate.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root (where the .env file is located)
ROOT_DIR = Path(__file__).resolve().parent.parent.parent
ENV_FILE = ROOT_DIR / ".env"

# Load .env into environment so provider secrets are visible to os.environ
load_dotenv(ENV_FILE)

PROVIDER_API_KEY_PREFIX = "PROVIDER_API_KEY_"


class AppSettings(BaseSettings):
    """Application-level configuration."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_name: str = "provider-bridge"
    app_version: str = "0.1.0"
    app_debug: bool = False

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 2

    # CORS
    cors_origins: str = "http://localhost:3000"
    cors_credentials: bool = True

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


class LogSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_prefix="LOG_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    level: str = "INFO"
    format: Literal["json", "text"] = "json"
    requests: bool = True


class GatewaySettings(BaseSettings):
    """Gateway data plane configuration."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_prefix="GATEWAY_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # YAML or JSON catalog snapshot (providers, models, endpoints, schemas, adapters)
    catalog_path: str = ""

    # Caller API keys, format: "user_id:token,other_user:token2"
    api_keys: str = ""

    dispatch_timeout_ms: int = 120000

    @property
    def api_keys_map(self) -> Dict[str, str]:
        """Parse caller keys into a token -> user_id map."""
        keys: Dict[str, str] = {}
        for pair in self.api_keys.split(","):
            pair = pair.strip()
            if not pair or ":" not in pair:
                continue
            user_id, token = pair.split(":", 1)
            keys[token.strip()] = user_id.strip()
        return keys


class RepairSettings(BaseSettings):
    """Structural repair (external model) configuration."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_prefix="REPAIR_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = True
    model: str = "gpt-4"
    base_url: str = "https://api.openai.com/v1"
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    timeout_ms: int = 60000

    # Read from the conventional OPENAI_API_KEY, not REPAIR_OPENAI_API_KEY
    openai_api_key: Optional[str] = Field(default=None, validation_alias="OPENAI_API_KEY")


class Settings(BaseSettings):
    """Main settings class that aggregates all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    log: LogSettings = Field(default_factory=LogSettings)
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)
    repair: RepairSettings = Field(default_factory=RepairSettings)

    docs_enabled: bool = True
    dev_auto_reload: bool = True


def provider_secret_env_name(provider_slug: str) -> str:
    """Environment variable holding the upstream secret for a provider slug."""
    return PROVIDER_API_KEY_PREFIX + provider_slug.upper().replace("-", "_")


def get_provider_secret(provider_slug: str) -> Optional[str]:
    """
    Look up the upstream credential for a provider.

    One fixed secret per provider, read from the process environment
    at call time so rotated keys are picked up without a restart.
    """
    value = os.environ.get(provider_secret_env_name(provider_slug))
    return value or None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
