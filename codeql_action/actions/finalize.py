"""Finish stage: finalize the databases, run queries, optionally upload."""

import os
import sys
from collections.abc import Mapping
from pathlib import Path

from codeql_action import shared_env
from codeql_action.actions.autobuild import autobuild_script
from codeql_action.actions.publish import EnvironmentPublisher
from codeql_action.actions.upload import upload_sarif_folder
from codeql_action.codeql.runner import CodeQLRunner
from codeql_action.core.config import get_required_env_param
from codeql_action.core.config.analysis import AnalysisConfig, load_config
from codeql_action.core.config.settings import Settings, get_settings
from codeql_action.core.logger.logger import get_logger, log_group

logger = get_logger(__name__)


def _split_languages(value: str | None) -> list[str]:
    return [lang for lang in (value or "").split(",") if lang]


async def finalize_database_creation(
    runner: CodeQLRunner,
    database_dir: Path,
    environ: Mapping[str, str],
) -> None:
    """Extract the scanned languages, then finalize every database."""
    for language in _split_languages(environ.get(shared_env.CODEQL_ACTION_SCANNED_LANGUAGES)):
        with log_group(f"Extracting {language}"):
            extractor_path = await runner.resolve_extractor(language)
            script = autobuild_script(extractor_path, sys.platform)
            await runner.trace_command(database_dir / language, [str(script)])

    for language in _split_languages(environ.get(shared_env.CODEQL_ACTION_LANGUAGES)):
        with log_group(f"Finalizing {language}"):
            await runner.database_finalize(database_dir / language)


async def run_queries(
    runner: CodeQLRunner,
    database_dir: Path,
    sarif_folder: Path,
    config: AnalysisConfig,
) -> list[Path]:
    """Analyze every database and write one SARIF file per language.

    Returns:
        SARIF files written, in database name order.
    """
    sarif_files = []
    for database in sorted(p for p in database_dir.iterdir() if p.is_dir()):
        with log_group(f"Analyzing {database.name}"):
            sarif_file = sarif_folder / f"{database.name}.sarif"
            await runner.database_analyze(
                database,
                sarif_file,
                [f"{database.name}-code-scanning.qls", *config.queries],
            )
            logger.debug(f'SARIF results for database {database.name} created at "{sarif_file}"')
            sarif_files.append(sarif_file)
    return sarif_files


async def run_finish(
    sarif_folder: Path,
    upload: bool = False,
    settings: Settings | None = None,
    runner: CodeQLRunner | None = None,
    publisher: EnvironmentPublisher | None = None,
) -> list[Path]:
    """Run the finish stage.

    Args:
        sarif_folder: Folder receiving the SARIF files.
        upload: Whether to upload the results afterwards.
        settings: Settings. Uses global settings if not provided.
        runner: CodeQL runner. Uses the CLI exported by init if not provided.
        publisher: Environment publisher. Exports to os.environ if not provided.

    Returns:
        SARIF files written.
    """
    settings = settings or get_settings()
    publisher = publisher or EnvironmentPublisher()
    environ = publisher.environ

    config = load_config(settings.workspace.workspace)

    # The build is over; nothing started from now on may be traced
    publisher.clear_variable(shared_env.ODASA_TRACER_CONFIGURATION)

    runner = runner or CodeQLRunner(
        codeql_path=get_required_env_param(shared_env.CODEQL_ACTION_CMD, environ)
    )
    database_dir = Path(get_required_env_param(shared_env.CODEQL_ACTION_DATABASE_DIR, environ))

    sarif_folder.mkdir(parents=True, exist_ok=True)

    logger.info("Finalizing database creation")
    await finalize_database_creation(runner, database_dir, environ)

    logger.info("Analyzing database")
    sarif_files = await run_queries(runner, database_dir, sarif_folder, config)

    if upload:
        await upload_sarif_folder(sarif_folder, environ)

    return sarif_files


def default_output_folder() -> Path:
    """Return the SARIF folder used when none is given."""
    results = os.environ.get(shared_env.CODEQL_ACTION_RESULTS)
    if results:
        return Path(results) / "sarif"
    return get_settings().workspace.workspace / "codeql_results" / "sarif"
