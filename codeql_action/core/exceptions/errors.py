"""Custom exception definitions for codeql-action."""

from typing import Any


class CodeQLActionError(Exception):
    """Base exception for all codeql-action errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ProbeFailure(CodeQLActionError):
    """Exception raised when the trace-command probe fails or its dump is unreadable."""

    def __init__(
        self,
        message: str,
        database: str | None = None,
        return_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize probe failure.

        Args:
            message: Error message.
            database: Database directory the probe ran against.
            return_code: Exit code of the probe process, if it ran.
            details: Additional error details.
        """
        details = details or {}
        if database:
            details["database"] = database
        if return_code is not None:
            details["return_code"] = return_code
        super().__init__(message, details)
        self.database = database
        self.return_code = return_code


class MissingTracerConfig(CodeQLActionError):
    """Exception raised when a captured environment has no tracer configuration."""

    def __init__(self, variable: str, database: str | None = None) -> None:
        """Initialize missing tracer config error.

        Args:
            variable: Name of the expected configuration variable.
            database: Database directory the probe ran against.
        """
        details: dict[str, Any] = {"variable": variable}
        if database:
            details["database"] = database
        super().__init__(
            f"Captured tracer environment does not define {variable}",
            details,
        )
        self.variable = variable
        self.database = database


class ConflictingEnvironmentVariable(CodeQLActionError):
    """Exception raised when two traced languages disagree on a variable value."""

    def __init__(self, name: str, value1: str, value2: str) -> None:
        """Initialize the conflict error.

        Args:
            name: Name of the environment variable.
            value1: Value accumulated first.
            value2: Conflicting value supplied later.
        """
        super().__init__(
            f"Incompatible values in environment parameter {name}: {value1} and {value2}"
        )
        self.name = name
        self.value1 = value1
        self.value2 = value2


class IOFailure(CodeQLActionError):
    """Exception raised when a tracer spec or environment file cannot be read or written."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize I/O failure.

        Args:
            message: Error message.
            path: File that could not be accessed.
            details: Additional error details.
        """
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(message, details)
        self.path = path


class TracerSpecFormatError(IOFailure):
    """Exception raised for a tracer spec file that does not follow the spec format."""


class EnvironmentBlobError(CodeQLActionError):
    """Exception raised when a compound environment blob cannot be decoded."""


class ConfigurationError(CodeQLActionError):
    """Exception raised for configuration errors."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Error message.
            config_key: Configuration key that caused the error.
            details: Additional error details.
        """
        details = details or {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details)


class CodeQLCommandError(CodeQLActionError):
    """Exception raised when a CodeQL CLI invocation exits with a non-zero code."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        return_code: int | None = None,
        stderr: str | None = None,
    ) -> None:
        """Initialize CodeQL command error.

        Args:
            message: Error message.
            command: Command line that failed.
            return_code: Exit code of the process.
            stderr: Tail of the process standard error.
        """
        details: dict[str, Any] = {}
        if command:
            details["command"] = " ".join(command)
        if return_code is not None:
            details["return_code"] = return_code
        super().__init__(message, details)
        self.command = command or []
        self.return_code = return_code
        self.stderr = stderr or ""


class InjectionError(CodeQLActionError):
    """Exception raised when the platform tracer injector fails."""


class UploadError(CodeQLActionError):
    """Exception raised when a SARIF upload is rejected."""

    def __init__(
        self,
        message: str,
        sarif_file: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize upload error.

        Args:
            message: Error message.
            sarif_file: SARIF file being uploaded.
            status_code: HTTP status returned by the server.
        """
        details: dict[str, Any] = {}
        if sarif_file:
            details["sarif_file"] = sarif_file
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.status_code = status_code
