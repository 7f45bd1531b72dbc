"""
Application configuration management.

Settings come from environment variables (prefix ``FXABOT_``, nested
blocks separated by ``__``), an optional ``.env`` file, and optionally a
TOML file passed on the command line.
"""

import tomllib
from pathlib import Path
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, IPvAnyAddress, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GITHUB_API = "https://api.github.com"

# should configs ever be bigger than 50mb?
MAX_CONFIG_FILE_SIZE = 1024 * 1024 * 50


class ConfigError(Exception):
    """Raised when the configuration file cannot be loaded."""
    pass


class ServerSettings(BaseModel):
    """Address the HTTP listener binds to."""

    host: IPvAnyAddress = "127.0.0.1"
    port: int = 0  # 0 lets the OS pick a free port


class GithubSettings(BaseModel):
    """Bot identity and GitHub API access."""

    username: str
    authorized: List[str] = []
    api: Optional[str] = None
    token: Optional[str] = None
    webhook_secret: Optional[str] = None


class Settings(BaseSettings):
    """Application settings loaded from environment variables or a TOML file."""

    server: ServerSettings = ServerSettings()
    github: Optional[GithubSettings] = None

    # Application
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    webhook_path: str = "/github"
    request_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(
        env_prefix="FXABOT_",
        env_nested_delimiter="__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Settings":
        """
        Load settings from a TOML file.

        Values from the file take precedence over environment variables.

        Raises:
            ConfigError: If the file is unreadable, too large, not TOML,
                or does not describe valid settings
        """
        path = Path(path)
        try:
            size = path.stat().st_size
            if size > MAX_CONFIG_FILE_SIZE:
                raise ConfigError(f"config file {path} is {size} bytes, limit is {MAX_CONFIG_FILE_SIZE}")
            with path.open("rb") as fh:
                data = tomllib.load(fh)
        except OSError as e:
            raise ConfigError(f"cannot read config file {path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"invalid TOML in {path}: {e}") from e

        return cls.from_mapping(data)

    @classmethod
    def from_toml(cls, text: str) -> "Settings":
        """Load settings from a TOML document held in memory."""
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"invalid TOML: {e}") from e
        return cls.from_mapping(data)

    @classmethod
    def from_mapping(cls, data: dict) -> "Settings":
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"invalid configuration: {e}") from e

    @property
    def server_addr(self) -> Tuple[str, int]:
        return str(self.server.host), self.server.port

    @property
    def bot_name(self) -> str:
        """The bot's GitHub login, or an empty string when unconfigured."""
        return self.github.username if self.github else ""

    @property
    def authorized(self) -> List[str]:
        return self.github.authorized if self.github else []

    @property
    def github_api(self) -> str:
        if self.github and self.github.api:
            return self.github.api
        return DEFAULT_GITHUB_API

    @property
    def github_token(self) -> Optional[str]:
        return self.github.token if self.github else None

    @property
    def webhook_secret(self) -> Optional[str]:
        return self.github.webhook_secret if self.github else None
