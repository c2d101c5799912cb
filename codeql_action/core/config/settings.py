"""Application settings using Pydantic Settings."""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from codeql_action.core.config.loader import ConfigLoader

# Environment variable naming a YAML settings file
SETTINGS_FILE_ENV = "CODEQL_ACTION_SETTINGS_FILE"


class WorkspaceSettings(BaseSettings):
    """Runner workspace settings.

    Reads the variables the CI runner provides (RUNNER_WORKSPACE, RUNNER_TEMP).
    """

    model_config = SettingsConfigDict(
        env_prefix="RUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    workspace: Path = Field(
        default=Path("/tmp/codeql-action"),
        description="Folder shared by all pipeline stages",
    )
    temp: Path | None = Field(
        default=None,
        description="Scratch folder for temporary files",
    )

    @field_validator("workspace", mode="before")
    @classmethod
    def validate_workspace(cls, v: str | Path | None) -> Path:
        """Fall back to the default folder when the variable is empty."""
        if v is None or v == "":
            return Path("/tmp/codeql-action")
        return Path(v)

    @field_validator("temp", mode="before")
    @classmethod
    def validate_temp(cls, v: str | None) -> Path | None:
        """Validate and convert temp to Path."""
        if v is None or v == "":
            return None
        return Path(v)

    @property
    def scratch_dir(self) -> Path:
        """Return the folder used for temporary files."""
        return self.temp or self.workspace


class CodeQLSettings(BaseSettings):
    """CodeQL CLI location settings."""

    model_config = SettingsConfigDict(
        env_prefix="CODEQL_ACTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    cmd: str = Field(
        default="codeql",
        description="Path to the codeql executable",
    )
    tools: Path | None = Field(
        default=None,
        description="Folder holding the native tracer runtimes",
    )

    @field_validator("tools", mode="before")
    @classmethod
    def validate_tools(cls, v: str | None) -> Path | None:
        """Validate and convert tools to Path."""
        if v is None or v == "":
            return None
        return Path(v)

    @property
    def tools_dir(self) -> Path:
        """Return the tracer runtime folder, defaulting to the CLI's own folder."""
        if self.tools:
            return self.tools
        return Path(self.cmd).resolve().parent / "tools"


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="CODEQL_ACTION_LOGGING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = Field(
        default="INFO",
        description="Log level",
    )
    format: str = Field(
        default="[%(name)s] %(message)s",
        description="Log format string",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    use_rich: bool = Field(
        default=True,
        description="Use Rich console for output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: str | None) -> Path | None:
        """Validate and convert file to Path."""
        if v is None or v == "":
            return None
        return Path(v)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CODEQL_ACTION_SETTINGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    workspace: WorkspaceSettings = Field(default_factory=WorkspaceSettings)
    codeql: CodeQLSettings = Field(default_factory=CodeQLSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Settings instance with values from YAML.
        """
        loader = ConfigLoader(path)
        loader.load()

        return cls(
            workspace=WorkspaceSettings(**loader.get_section("workspace")),
            codeql=CodeQLSettings(**loader.get_section("codeql")),
            logging=LoggingSettings(**loader.get_section("logging")),
        )

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from default locations.

        Priority: Environment variables > .env > settings file > defaults

        Returns:
            Settings instance.
        """
        settings_file = os.environ.get(SETTINGS_FILE_ENV)
        if settings_file:
            return cls.from_yaml(Path(settings_file))

        return cls()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings singleton.
    """
    return Settings.load()
