"""Autobuild stage: build the dominant traced language with its extractor's autobuilder."""

import os
import sys
from collections.abc import MutableMapping
from pathlib import Path

from codeql_action import shared_env
from codeql_action.codeql.runner import CodeQLRunner
from codeql_action.core.config import get_required_env_param
from codeql_action.core.exceptions.errors import CodeQLCommandError
from codeql_action.core.logger.logger import get_logger, log_group

logger = get_logger(__name__)

# Work around connection resets when Maven reuses pooled HTTP connections
JAVA_TOOL_OPTIONS_EXTRA = ["-Dhttp.keepAlive=false", "-Dmaven.wagon.http.pool=false"]


def autobuild_script(extractor_path: Path, platform: str | None = None) -> Path:
    """Return the autobuild script of an extractor for a platform."""
    platform = platform or sys.platform
    name = "autobuild.cmd" if platform == "win32" else "autobuild.sh"
    return extractor_path / "tools" / name


def extend_java_tool_options(environ: MutableMapping[str, str]) -> str:
    """Append the Maven connection options to JAVA_TOOL_OPTIONS."""
    existing = environ.get("JAVA_TOOL_OPTIONS", "").split()
    environ["JAVA_TOOL_OPTIONS"] = " ".join([*existing, *JAVA_TOOL_OPTIONS_EXTRA])
    return environ["JAVA_TOOL_OPTIONS"]


async def run_autobuild(
    runner: CodeQLRunner | None = None,
    environ: MutableMapping[str, str] | None = None,
) -> str | None:
    """Run the autobuild stage.

    Builds only the first autobuild language; the init stage lists them in
    input order.

    Args:
        runner: CodeQL runner. Uses the CLI exported by init if not provided.
        environ: Environment of the build. Defaults to os.environ.

    Returns:
        The language that was built, or None if nothing needed building.
    """
    environ = os.environ if environ is None else environ

    languages = environ.get(shared_env.CODEQL_ACTION_AUTOBUILD_LANGUAGES, "")
    language = languages.split(",")[0] if languages else ""
    if not language:
        logger.info("None of the languages in this project require extra build steps")
        return None

    logger.debug(f"Detected dominant traced language: {language}")
    runner = runner or CodeQLRunner(
        codeql_path=get_required_env_param(shared_env.CODEQL_ACTION_CMD, environ)
    )

    with log_group(f"Attempting to automatically build {language} code"):
        extractor_path = await runner.resolve_extractor(language)
        script = autobuild_script(extractor_path)

        if language == "java":
            extend_java_tool_options(environ)

        return_code, stdout, stderr = await runner.run_command([str(script)], env=environ)
        if stdout.strip():
            logger.info(stdout.rstrip())
        if return_code != 0:
            raise CodeQLCommandError(
                f"Autobuild for {language} failed with exit code {return_code}",
                command=[str(script)],
                return_code=return_code,
                stderr=stderr.strip()[-1000:],
            )

    return language
