"""Extractor probe: capture the environment the build tracer sets up.

The probe runs a harmless marker command (codeql_action.tracer_env) under
`codeql database trace-command`. Whatever the tracer injects into that
command's environment is what a real traced build needs.
"""

import json
import sys
from pathlib import Path

from codeql_action.codeql.runner import CodeQLRunner
from codeql_action.core.exceptions.errors import (
    CodeQLCommandError,
    MissingTracerConfig,
    ProbeFailure,
)
from codeql_action.core.logger.logger import get_logger
from codeql_action.models.tracer import ProbeResult
from codeql_action.shared_env import ODASA_TRACER_CONFIGURATION

logger = get_logger(__name__)

MARKER_MODULE = "codeql_action.tracer_env"


class ExtractorProbe:
    """Captures the traced environment of one language database at a time."""

    def __init__(
        self,
        runner: CodeQLRunner,
        dump_path: Path,
        python_executable: str | None = None,
    ) -> None:
        """Initialize the probe.

        Args:
            runner: CodeQL CLI runner.
            dump_path: File the marker command writes the environment to.
                The same file is reused for every language.
            python_executable: Interpreter running the marker command.
        """
        self.runner = runner
        self.dump_path = dump_path
        self.python_executable = python_executable or sys.executable

    def marker_command(self) -> list[str]:
        """Return the command traced by the probe."""
        return [self.python_executable, "-m", MARKER_MODULE, str(self.dump_path)]

    async def probe(self, database: Path, compiler_spec: str | None = None) -> ProbeResult:
        """Run the marker command under the tracer of a database.

        Args:
            database: Language database directory.
            compiler_spec: Optional compiler spec override.

        Returns:
            Captured environment and tracer spec path.

        Raises:
            ProbeFailure: If trace-command fails or the dump cannot be read.
            MissingTracerConfig: If the dump lacks ODASA_TRACER_CONFIGURATION.
        """
        self.dump_path.parent.mkdir(parents=True, exist_ok=True)
        # A dump left over from the previous language must not be mistaken for ours
        self.dump_path.unlink(missing_ok=True)

        try:
            await self.runner.trace_command(database, self.marker_command(), compiler_spec)
        except CodeQLCommandError as e:
            raise ProbeFailure(
                f"Tracer probe failed for {database}: {e.message}",
                database=str(database),
                return_code=e.return_code,
                details={"stderr": e.stderr} if e.stderr else None,
            ) from e

        environment = self._read_dump(database)

        spec_path = environment.get(ODASA_TRACER_CONFIGURATION)
        if not spec_path:
            raise MissingTracerConfig(ODASA_TRACER_CONFIGURATION, database=str(database))

        logger.debug(
            f"Probe of {database.name} captured {len(environment)} variables, spec {spec_path}"
        )
        return ProbeResult(spec_path=Path(spec_path), environment=environment)

    def _read_dump(self, database: Path) -> dict[str, str | None]:
        try:
            content = self.dump_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ProbeFailure(
                f"Tracer probe produced no readable environment dump: {e}",
                database=str(database),
                details={"dump_path": str(self.dump_path)},
            ) from e

        try:
            environment = json.loads(content)
        except json.JSONDecodeError as e:
            raise ProbeFailure(
                f"Tracer probe environment dump is not valid JSON: {e}",
                database=str(database),
                details={"dump_path": str(self.dump_path)},
            ) from e

        if not isinstance(environment, dict):
            raise ProbeFailure(
                "Tracer probe environment dump is not a JSON object",
                database=str(database),
                details={"dump_path": str(self.dump_path)},
            )

        invalid = sorted(
            key
            for key, value in environment.items()
            if value is not None and not isinstance(value, str)
        )
        if invalid:
            raise ProbeFailure(
                "Tracer probe environment dump has non-string values",
                database=str(database),
                details={"dump_path": str(self.dump_path), "variables": invalid},
            )
        return environment
