"""
CodeQL CLI runner.

Thin async wrapper around the codeql executable. Each call is awaited to
completion before the next one starts; nothing here retries.
"""

import asyncio
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from codeql_action.core.exceptions.errors import CodeQLCommandError
from codeql_action.core.logger.logger import get_logger

logger = get_logger(__name__)


class CodeQLRunner:
    """Runs CodeQL CLI commands."""

    def __init__(
        self,
        codeql_path: str = "codeql",
        timeout: float | None = None,
    ):
        """
        Initialize the runner.

        Args:
            codeql_path: Path to codeql binary (default: looks in PATH).
            timeout: Maximum duration of a single command in seconds, or None
                to wait indefinitely.
        """
        self.codeql_path = codeql_path
        self.timeout = timeout

    async def run_command(
        self,
        cmd: list[str],
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> tuple[int, str, str]:
        """
        Run a command asynchronously.

        Args:
            cmd: Command and arguments.
            cwd: Working directory.
            env: Complete environment for the child, or None to inherit.

        Returns:
            Tuple of (return_code, stdout, stderr).

        Raises:
            CodeQLCommandError: If the executable cannot be started or the
                command exceeds the configured timeout.
        """
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=dict(env) if env is not None else None,
            )
        except OSError as e:
            raise CodeQLCommandError(
                f"Unable to start {cmd[0]}: {e}",
                command=cmd,
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise CodeQLCommandError(
                f"Command timed out after {self.timeout} seconds",
                command=cmd,
            ) from e

        return (
            process.returncode or 0,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    async def run_checked(
        self,
        cmd: list[str],
        description: str,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> str:
        """
        Run a command and fail on a non-zero exit code.

        Args:
            cmd: Command and arguments.
            description: What the command does, for messages.
            cwd: Working directory.
            env: Complete environment for the child, or None to inherit.

        Returns:
            Standard output of the command.

        Raises:
            CodeQLCommandError: If the command exits non-zero.
        """
        logger.info(f"{description}: {' '.join(cmd)}")
        return_code, stdout, stderr = await self.run_command(cmd, cwd=cwd, env=env)

        if stdout.strip():
            logger.debug(stdout.rstrip())
        if return_code != 0:
            tail = stderr.strip()[-1000:]
            logger.error(f"{description} failed with exit code {return_code}: {tail}")
            raise CodeQLCommandError(
                f"{description} failed with exit code {return_code}",
                command=cmd,
                return_code=return_code,
                stderr=tail,
            )
        return stdout

    async def version(self) -> dict[str, Any]:
        """
        Get the CodeQL version information.

        Returns:
            Parsed output of `codeql version --format=json`.
        """
        stdout = await self.run_checked(
            [self.codeql_path, "version", "--format=json"],
            "Checking CodeQL version",
        )
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            raise CodeQLCommandError(
                f"Unexpected output from codeql version: {e}",
                command=[self.codeql_path, "version", "--format=json"],
            ) from e

    async def database_init(self, database: Path, language: str, source_root: Path) -> None:
        """Create an empty database for one language."""
        await self.run_checked(
            [
                self.codeql_path,
                "database",
                "init",
                str(database),
                f"--language={language}",
                f"--source-root={source_root}",
            ],
            f"Initializing {language} database",
        )

    def trace_command_args(
        self,
        database: Path,
        command: list[str],
        compiler_spec: str | None = None,
    ) -> list[str]:
        """Build the argument list of `codeql database trace-command`."""
        args = [self.codeql_path, "database", "trace-command", str(database)]
        if compiler_spec:
            args.append(f"--compiler-spec={compiler_spec}")
        args.append("--")
        args.extend(command)
        return args

    async def trace_command(
        self,
        database: Path,
        command: list[str],
        compiler_spec: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> str:
        """Run a command under the database's build tracer."""
        return await self.run_checked(
            self.trace_command_args(database, command, compiler_spec),
            f"Tracing {command[0]}",
            env=env,
        )

    async def resolve_extractor(self, language: str) -> Path:
        """
        Locate the extractor pack of a language.

        Returns:
            Root folder of the extractor.
        """
        cmd = [self.codeql_path, "resolve", "extractor", "--format=json", f"--language={language}"]
        stdout = await self.run_checked(cmd, f"Resolving {language} extractor")
        try:
            extractor_path = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise CodeQLCommandError(
                f"Unexpected output from codeql resolve extractor: {e}",
                command=cmd,
            ) from e
        if not isinstance(extractor_path, str):
            raise CodeQLCommandError(
                "codeql resolve extractor did not return a path",
                command=cmd,
            )
        return Path(extractor_path)

    async def database_finalize(self, database: Path) -> None:
        """Finalize a database after extraction."""
        await self.run_checked(
            [self.codeql_path, "database", "finalize", str(database)],
            f"Finalizing {database.name}",
        )

    async def database_analyze(
        self,
        database: Path,
        sarif_file: Path,
        queries: list[str],
    ) -> Path:
        """
        Run queries against a database and write SARIF results.

        Returns:
            Path of the SARIF file.
        """
        await self.run_checked(
            [
                self.codeql_path,
                "database",
                "analyze",
                str(database),
                "--format=sarif-latest",
                f"--output={sarif_file}",
                "--no-sarif-add-snippets",
                *queries,
            ],
            f"Analyzing {database.name}",
        )
        return sarif_file

