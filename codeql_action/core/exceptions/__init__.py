"""Exception definitions module."""

from codeql_action.core.exceptions.errors import (
    CodeQLActionError,
    CodeQLCommandError,
    ConfigurationError,
    ConflictingEnvironmentVariable,
    EnvironmentBlobError,
    InjectionError,
    IOFailure,
    MissingTracerConfig,
    ProbeFailure,
    TracerSpecFormatError,
    UploadError,
)

__all__ = [
    "CodeQLActionError",
    "ProbeFailure",
    "MissingTracerConfig",
    "ConflictingEnvironmentVariable",
    "IOFailure",
    "TracerSpecFormatError",
    "EnvironmentBlobError",
    "ConfigurationError",
    "CodeQLCommandError",
    "InjectionError",
    "UploadError",
]
