"""Publishing variables to later pipeline steps.

Exported variables are set in the current process and, when the runner
provides a $GITHUB_ENV file, appended to it so every later step inherits them.
This is the only place that mutates the ambient environment.
"""

import os
import uuid
from collections.abc import Mapping, MutableMapping
from pathlib import Path

from codeql_action.core.exceptions.errors import IOFailure
from codeql_action.core.logger.logger import get_logger
from codeql_action.models.tracer import CompoundTracerConfig
from codeql_action.shared_env import GITHUB_ENV, ODASA_TRACER_CONFIGURATION

logger = get_logger(__name__)


class EnvironmentPublisher:
    """Exports variables to the current process and to later steps."""

    def __init__(
        self,
        environ: MutableMapping[str, str] | None = None,
        env_file: Path | None = None,
    ) -> None:
        """Initialize the publisher.

        Args:
            environ: Process environment to update. Defaults to os.environ.
            env_file: Runner file collecting exported variables. Defaults to
                the file named by $GITHUB_ENV, if any.
        """
        self.environ = os.environ if environ is None else environ
        if env_file is None:
            runner_file = self.environ.get(GITHUB_ENV)
            env_file = Path(runner_file) if runner_file else None
        self.env_file = env_file
        self._exported: dict[str, str] = {}

    @property
    def exported(self) -> dict[str, str]:
        """Return every variable exported through this publisher."""
        return self._exported.copy()

    def export_variable(self, name: str, value: str) -> None:
        """Export a variable for this process and every later step."""
        self.environ[name] = value
        self._exported[name] = value
        if self.env_file is not None:
            self._append(name, value)
        logger.debug(f"Exported {name}")

    def clear_variable(self, name: str) -> None:
        """Unset a variable for this process and every later step."""
        self.environ.pop(name, None)
        self._exported.pop(name, None)
        if self.env_file is not None:
            self._append(name, "")
        logger.debug(f"Cleared {name}")

    def _append(self, name: str, value: str) -> None:
        # Heredoc form, so values may span several lines
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        try:
            with open(self.env_file, "a", encoding="utf-8") as f:
                f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        except OSError as e:
            raise IOFailure(
                f"Cannot export {name} to the runner environment file: {e}",
                path=str(self.env_file),
            ) from e


def publish_compound_config(
    compound: CompoundTracerConfig,
    publisher: EnvironmentPublisher,
) -> dict[str, str | None]:
    """Export the merged tracer environment and the compound spec path.

    Returns:
        The value each exported variable had before, None where it was unset.
        Pass it to restore_variables to withdraw the configuration.
    """
    names = [*compound.env, ODASA_TRACER_CONFIGURATION]
    previous = {name: publisher.environ.get(name) for name in names}

    for name, value in compound.env.items():
        publisher.export_variable(name, value)
    publisher.export_variable(ODASA_TRACER_CONFIGURATION, str(compound.spec_path))
    return previous


def restore_variables(
    previous: Mapping[str, str | None],
    publisher: EnvironmentPublisher,
) -> None:
    """Put variables back to earlier values, clearing those that were unset."""
    for name, value in previous.items():
        if value is None:
            publisher.clear_variable(name)
        else:
            publisher.export_variable(name, value)
