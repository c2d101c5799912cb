"""Main CLI entry point for codeql-action.

Each subcommand is one pipeline stage. Options can also be supplied as
workflow inputs (INPUT_* variables).
"""

import asyncio
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

import click

from codeql_action.actions.autobuild import run_autobuild
from codeql_action.actions.finalize import default_output_folder, run_finish
from codeql_action.actions.init import run_init
from codeql_action.actions.upload import upload_sarif_folder
from codeql_action.cli.display import (
    show_error,
    show_info,
    show_init_result,
    show_sarif_files,
    show_success,
)
from codeql_action.codeql.languages import normalize_language, parse_languages
from codeql_action.codeql.runner import CodeQLRunner
from codeql_action.core.config.settings import get_settings
from codeql_action.core.exceptions.errors import CodeQLActionError
from codeql_action.core.logger.logger import running_in_github_actions

T = TypeVar("T")


def run_stage(stage: str, coro: Coroutine[Any, Any, T]) -> T:
    """Run a stage to completion, turning its failure into exit status 1.

    Args:
        stage: Stage name for the failure message.
        coro: Stage coroutine.

    Returns:
        The stage result.
    """
    try:
        return asyncio.run(coro)
    except CodeQLActionError as e:
        if running_in_github_actions():
            click.echo(f"::error::{stage} failed: {e.message}")
        show_error(f"{stage} failed", str(e))
        raise SystemExit(1) from e


def _parse_compiler_specs(values: tuple[str, ...]) -> dict[str, str]:
    specs = {}
    for value in values:
        language, sep, path = value.partition("=")
        if not sep or not language or not path:
            raise click.BadParameter(
                f"expected LANGUAGE=PATH, got {value!r}",
                param_hint="--compiler-spec",
            )
        specs[normalize_language(language)] = path
    return specs


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def main(ctx: click.Context, version: bool) -> None:
    """codeql-action - CodeQL database creation for CI pipelines.

    Run the stages in order: init, your build (or autobuild), finish.
    """
    if version:
        from codeql_action import __version__

        click.echo(f"codeql-action version {__version__}")
        return

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command()
@click.option(
    "--languages",
    "-l",
    envvar="INPUT_LANGUAGES",
    default="",
    help="Comma separated languages to analyze",
)
@click.option(
    "--config-file",
    "-c",
    envvar="INPUT_CONFIG-FILE",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML analysis configuration file",
)
@click.option("--codeql", "codeql_path", help="Path to the codeql executable")
@click.option(
    "--tools",
    type=click.Path(file_okay=False),
    help="Folder holding the tracer runtimes (default: next to codeql)",
)
@click.option(
    "--source-root",
    "-s",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Root of the source tree",
)
@click.option(
    "--compiler-spec",
    "compiler_specs",
    multiple=True,
    help="Compiler spec override as LANGUAGE=PATH (repeatable)",
)
def init(
    languages: str,
    config_file: str | None,
    codeql_path: str | None,
    tools: str | None,
    source_root: str,
    compiler_specs: tuple[str, ...],
) -> None:
    """Create language databases and set up build tracing.

    Example:
        codeql-action init --languages cpp,java,python
    """
    specs = _parse_compiler_specs(compiler_specs)
    settings = get_settings().model_copy(deep=True)
    if codeql_path:
        settings.codeql.cmd = codeql_path
    if tools:
        settings.codeql.tools = Path(tools)

    result = run_stage(
        "init",
        run_init(
            languages=parse_languages(languages),
            source_root=Path(source_root).resolve(),
            config_file=Path(config_file) if config_file else None,
            settings=settings,
            runner=CodeQLRunner(codeql_path=settings.codeql.cmd),
            compiler_specs=specs,
        ),
    )
    show_init_result(result)


@main.command()
def autobuild() -> None:
    """Build the dominant traced language with the extractor's autobuilder."""
    language = run_stage("autobuild", run_autobuild())
    if language:
        show_success("Autobuild", f"Built {language} code")
    else:
        show_info("Autobuild", "None of the languages in this project require extra build steps")


@main.command()
@click.option(
    "--output",
    "-o",
    envvar="INPUT_OUTPUT",
    type=click.Path(file_okay=False),
    help="Folder receiving the SARIF files",
)
@click.option(
    "--upload/--no-upload",
    envvar="INPUT_UPLOAD",
    default=False,
    help="Upload the results after analysis",
)
def finish(output: str | None, upload: bool) -> None:
    """Finalize the databases, run the queries and optionally upload results."""
    sarif_folder = Path(output) if output else default_output_folder()
    sarif_files = run_stage("finish", run_finish(sarif_folder, upload=upload))
    show_sarif_files(sarif_files)


@main.command("upload-sarif")
@click.option(
    "--sarif-folder",
    "-f",
    envvar="INPUT_SARIF_FOLDER",
    required=True,
    type=click.Path(exists=True, file_okay=False),
    help="Folder containing SARIF files",
)
def upload_sarif(sarif_folder: str) -> None:
    """Upload SARIF files to code scanning."""
    ids = run_stage("upload-sarif", upload_sarif_folder(Path(sarif_folder)))
    show_success("Upload Complete", f"Uploaded {len(ids)} SARIF file(s)")


if __name__ == "__main__":
    main()
