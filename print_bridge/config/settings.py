"""Bridge settings: config file, environment variables and defaults.

The persisted config file is a JSON document in the working directory.
Environment variables prefixed with PRINT_BRIDGE_ override file values, so a
headless deployment can run without ever touching the file.
"""

import logging
import secrets
import string
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from print_bridge.errors import ConfigError

CONFIG_PATH = Path("print-bridge.json")

DEFAULT_FILE_TYPES = ["pdf", "html", "text", "image"]

logger = logging.getLogger("print_bridge.audit")


class Settings(BaseSettings):
    # HTTP listener (loopback only by default)
    host: str = "127.0.0.1"
    port: int = 8765

    # Request gatekeeping
    max_file_size_mb: int = Field(default=50, gt=0)
    rate_limit_per_minute: int = Field(default=60, gt=0)
    api_token: str | None = None  # None = no authentication
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])
    allowed_file_types: list[str] = Field(default_factory=lambda: list(DEFAULT_FILE_TYPES), min_length=1)

    # Printing
    default_printer: str | None = None  # None = let CUPS pick its own default
    process_timeout_seconds: float = Field(default=60.0, gt=0)
    lp_command: str = "lp"
    lpstat_command: str = "lpstat"
    lpoptions_command: str = "lpoptions"
    html_converter_command: str = "wkhtmltopdf"
    html_browser_fallback: bool = True

    # Logging
    log_level: str = "INFO"
    audit_log_file: str = ""  # Empty = stdout only

    model_config = SettingsConfigDict(
        env_prefix="PRINT_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        json_file=CONFIG_PATH,
        json_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @field_validator("allowed_file_types")
    @classmethod
    def _normalize_file_types(cls, value: list[str]) -> list[str]:
        normalized = [v.strip().lower() for v in value if v.strip()]
        if not normalized:
            raise ValueError("allowed_file_types must name at least one content type")
        return normalized

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls),
        )

    @property
    def allows_any_origin(self) -> bool:
        return "*" in self.allowed_origins

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()
    except ValueError as e:
        # ValidationError and JSONDecodeError are both ValueErrors
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_config() -> Settings:
    """Load settings, creating the config file with defaults on first run."""
    created = not CONFIG_PATH.exists()
    get_settings.cache_clear()
    settings = get_settings()
    if created:
        # Defaults only: values from the environment or .env stay out of the file
        save_config(Settings.model_construct())
        logger.info("Default configuration created", extra={"audit_data": {"config_path": str(CONFIG_PATH)}})
    else:
        logger.info("Configuration loaded", extra={"audit_data": {"config_path": str(CONFIG_PATH)}})
    return settings


def save_config(settings: Settings) -> None:
    try:
        CONFIG_PATH.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot write configuration: {e.strerror}") from e


def update_config(settings: Settings) -> Settings:
    """Persist a replacement settings object and drop the cached one.

    Servers already running keep the instance they were created with.
    """
    save_config(settings)
    get_settings.cache_clear()
    return settings


def generate_secure_token(length: int = 32) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
