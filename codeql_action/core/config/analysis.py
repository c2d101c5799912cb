"""Analysis configuration shared between pipeline stages.

The init stage parses the user's YAML config file and saves it as JSON in the
runner workspace; later stages load the saved copy.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from codeql_action.core.config.loader import ConfigLoader
from codeql_action.core.exceptions.errors import ConfigurationError

# Lazy logger to avoid circular import
_logger = None


def _get_logger():
    global _logger
    if _logger is None:
        from codeql_action.core.logger.logger import get_logger
        _logger = get_logger(__name__)
    return _logger


CONFIG_FILE_NAME = "config"


class AnalysisConfig(BaseModel):
    """User analysis configuration."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", description="Configuration name")
    queries: list[str] = Field(
        default_factory=list,
        description="Additional query or suite references",
    )
    paths: list[str] = Field(
        default_factory=list,
        description="Paths to include in the analysis",
    )
    paths_ignore: list[str] = Field(
        default_factory=list,
        alias="paths-ignore",
        description="Paths to exclude from the analysis",
    )


def _query_references(raw: Any, config_path: Path) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigurationError(
            f"'queries' must be a list in {config_path}",
            config_key="queries",
        )

    references = []
    for entry in raw:
        if isinstance(entry, dict) and "uses" in entry:
            references.append(str(entry["uses"]))
        elif isinstance(entry, str):
            references.append(entry)
        else:
            raise ConfigurationError(
                f"Each entry in 'queries' must have a 'uses' key in {config_path}",
                config_key="queries",
                details={"entry": entry},
            )
    return references


def parse_config_file(config_path: Path) -> AnalysisConfig:
    """Parse a YAML analysis configuration file.

    Args:
        config_path: Path to the YAML file.

    Returns:
        Parsed AnalysisConfig.

    Raises:
        ConfigurationError: If the file is missing or malformed.
    """
    loader = ConfigLoader(config_path)
    loader.load()

    try:
        config = AnalysisConfig(
            name=loader.get("name", "") or "",
            queries=_query_references(loader.get("queries"), config_path),
            paths=loader.get("paths", []) or [],
            paths_ignore=loader.get("paths-ignore", []) or [],
        )
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid analysis configuration in {config_path}",
            config_key=str(config_path),
            details={"error": str(e)},
        ) from e

    _get_logger().debug(f"Parsed analysis config from {config_path}: {config.model_dump()}")
    return config


def save_config(config: AnalysisConfig, folder: Path) -> Path:
    """Save the analysis configuration for later stages.

    Args:
        config: Configuration to save.
        folder: Runner workspace folder.

    Returns:
        Path of the saved file.
    """
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / CONFIG_FILE_NAME
    content = config.model_dump_json(by_alias=True)
    path.write_text(content, encoding="utf-8")
    _get_logger().debug(f"Saved config: {content}")
    return path


def load_config(folder: Path) -> AnalysisConfig:
    """Load the analysis configuration saved by the init stage.

    Args:
        folder: Runner workspace folder.

    Returns:
        Saved AnalysisConfig.

    Raises:
        ConfigurationError: If no saved configuration exists or it is invalid.
    """
    path = folder / CONFIG_FILE_NAME
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"No saved analysis configuration at {path}. Did the init stage run?",
            config_key=str(path),
        ) from e

    try:
        config = AnalysisConfig.model_validate_json(content)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid saved analysis configuration at {path}",
            config_key=str(path),
            details={"error": str(e)},
        ) from e

    _get_logger().debug(f"Loaded config: {content}")
    return config
