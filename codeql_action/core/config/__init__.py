"""Configuration management for codeql-action."""

import os
from collections.abc import Mapping

from codeql_action.core.config.analysis import (
    AnalysisConfig,
    load_config,
    parse_config_file,
    save_config,
)
from codeql_action.core.config.settings import (
    CodeQLSettings,
    LoggingSettings,
    Settings,
    WorkspaceSettings,
    get_settings,
)
from codeql_action.core.exceptions.errors import ConfigurationError


def get_required_env_param(name: str, environ: Mapping[str, str] | None = None) -> str:
    """Get an environment variable that an earlier stage must have exported.

    Args:
        name: Variable name.
        environ: Environment to read. Defaults to os.environ.

    Returns:
        Variable value.

    Raises:
        ConfigurationError: If the variable is unset or empty.
    """
    value = (os.environ if environ is None else environ).get(name)
    if not value:
        raise ConfigurationError(f"{name} environment variable must be set", config_key=name)
    return value


__all__ = [
    "AnalysisConfig",
    "CodeQLSettings",
    "LoggingSettings",
    "Settings",
    "WorkspaceSettings",
    "get_required_env_param",
    "get_settings",
    "load_config",
    "parse_config_file",
    "save_config",
]
