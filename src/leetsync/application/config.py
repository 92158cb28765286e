from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from leetsync.domain.constants import (
    DEFAULT_API_URL,
    DEFAULT_COMPLETION_WINDOW_HOURS,
    DEFAULT_MAX_CHALLENGE_ATTEMPTS,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
    REQUEST_TIMEOUT,
)


class AppConfig(BaseSettings):
    """
    Configuration model for leetsync.
    Supports loading from:
    1. Environment variables (LEETSYNC_*)
    2. Config file (~/.config/leetsync/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="LEETSYNC_",
        extra="ignore",
    )

    # Remote service
    api_url: str = DEFAULT_API_URL
    request_timeout: float = REQUEST_TIMEOUT
    max_challenge_attempts: int = Field(default=DEFAULT_MAX_CHALLENGE_ATTEMPTS, ge=1)

    # Host page
    username: str | None = None
    host_url: str | None = None

    # Session
    busy_policy: Literal["queue", "reject"] = "queue"
    completion_window_hours: float = Field(default=DEFAULT_COMPLETION_WINDOW_HOURS, gt=0)

    # Agent server
    server_host: str = DEFAULT_SERVER_HOST
    server_port: int = DEFAULT_SERVER_PORT

    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins; sources earlier in the tuple take priority.
        toml_file = next((f for f in _config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("api_url", "host_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.rstrip("/")
        return v


def _config_files() -> list[Path]:
    # Resolved at call time so a patched HOME is honored.
    return [
        Path.home() / ".config/leetsync/config.toml",
        Path.home() / ".leetsync.toml",
    ]


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/leetsync/config.toml (if exists)
    3. Environment variables (LEETSYNC_*)
    4. cli_overrides (passed from Typer), None values ignored
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
