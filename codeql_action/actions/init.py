"""Init stage: create language databases and set up build tracing."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from codeql_action import shared_env
from codeql_action.actions.publish import (
    EnvironmentPublisher,
    publish_compound_config,
    restore_variables,
)
from codeql_action.codeql.languages import INTERPRETED_LANGUAGES, is_traced_language
from codeql_action.codeql.runner import CodeQLRunner
from codeql_action.core.config.analysis import AnalysisConfig, parse_config_file, save_config
from codeql_action.core.config.settings import Settings, get_settings
from codeql_action.core.exceptions.errors import CodeQLActionError, ConfigurationError
from codeql_action.core.logger.logger import get_logger, log_group
from codeql_action.models.tracer import CompoundTracerConfig, TracerConfig
from codeql_action.tracer.aggregator import aggregate_tracer_configs
from codeql_action.tracer.env_filter import build_tracer_config
from codeql_action.tracer.injector import Injector, default_injector
from codeql_action.tracer.probe import ExtractorProbe

logger = get_logger(__name__)

RESULTS_FOLDER_NAME = "codeql_results"
DATABASE_FOLDER_NAME = "db"
PROBE_DUMP_NAME = "codeql-tracer-env.json"


@dataclass
class InitResult:
    """Outcome of the init stage.

    Attributes:
        traced_languages: Languages set up for build tracing, in input order.
        scanned_languages: Languages extracted without observing a build.
        compound: Compound tracer configuration, None without traced languages.
        results_dir: Folder holding databases and results.
        database_dir: Folder holding one database per language.
    """

    traced_languages: list[str] = field(default_factory=list)
    scanned_languages: list[str] = field(default_factory=list)
    compound: CompoundTracerConfig | None = None
    results_dir: Path | None = None
    database_dir: Path | None = None


def export_analysis_paths(
    config: AnalysisConfig,
    languages: list[str],
    publisher: EnvironmentPublisher,
) -> None:
    """Export the include/exclude path filters for the extractors."""
    publisher.export_variable(shared_env.LGTM_INDEX_INCLUDE, "\n".join(config.paths))
    publisher.export_variable(shared_env.LGTM_INDEX_EXCLUDE, "\n".join(config.paths_ignore))

    has_filters = bool(config.paths or config.paths_ignore)
    if has_filters and not all(lang in INTERPRETED_LANGUAGES for lang in languages):
        logger.warning(
            'The "paths"/"paths-ignore" fields of the config only have effect for JavaScript and Python'
        )


async def collect_tracer_configs(
    runner: CodeQLRunner,
    probe: ExtractorProbe,
    languages: list[str],
    database_dir: Path,
    source_root: Path,
    ambient: Mapping[str, str],
    compiler_specs: Mapping[str, str] | None = None,
) -> tuple[dict[str, TracerConfig], list[str]]:
    """Initialize every language database and probe the traced ones.

    Any failure aborts the whole collection.

    Returns:
        Tracer configuration per traced language, and the scanned languages.
    """
    compiler_specs = compiler_specs or {}
    traced: dict[str, TracerConfig] = {}
    scanned: list[str] = []

    for language in languages:
        language_database = database_dir / language
        await runner.database_init(language_database, language, source_root)

        if is_traced_language(language):
            result = await probe.probe(language_database, compiler_specs.get(language))
            traced[language] = build_tracer_config(result, ambient)
            logger.info(
                f"{language}: tracer spec {result.spec_path}, "
                f"{len(traced[language].env)} variables to export"
            )
        else:
            scanned.append(language)

    return traced, scanned


async def run_init(
    languages: list[str],
    source_root: Path,
    config_file: Path | None = None,
    settings: Settings | None = None,
    runner: CodeQLRunner | None = None,
    publisher: EnvironmentPublisher | None = None,
    injector: Injector | None = None,
    compiler_specs: Mapping[str, str] | None = None,
) -> InitResult:
    """Run the init stage.

    Args:
        languages: Normalized languages to analyze.
        source_root: Root of the checked out sources.
        config_file: Optional YAML analysis configuration file.
        settings: Settings. Uses global settings if not provided.
        runner: CodeQL runner. Built from settings if not provided.
        publisher: Environment publisher. Exports to os.environ if not provided.
        injector: Tracer injector. Chosen for the running platform if not provided.
        compiler_specs: Optional compiler spec override per traced language.

    Returns:
        InitResult describing what was set up.

    Raises:
        ConfigurationError: If no language was given or the config is invalid.
        CodeQLActionError: If any CodeQL, probe, or aggregation step fails.
    """
    settings = settings or get_settings()
    runner = runner or CodeQLRunner(codeql_path=settings.codeql.cmd)
    publisher = publisher or EnvironmentPublisher()
    workspace = settings.workspace.workspace

    # Parsed even when unused so a broken config fails the job early
    config = parse_config_file(config_file) if config_file else AnalysisConfig()
    save_config(config, workspace)

    if not languages:
        raise ConfigurationError(
            "Did not detect any languages to analyze. Please update input in workflow.",
            config_key="languages",
        )
    logger.info(f"Languages to analyze: {', '.join(languages)}")

    export_analysis_paths(config, languages, publisher)

    with log_group("Setup CodeQL tools"):
        version = await runner.version()
        logger.info(f"CodeQL version {version.get('version', 'unknown')}")

    go_flags = publisher.environ.get("GOFLAGS")
    if go_flags:
        publisher.export_variable("GOFLAGS", go_flags)
        logger.warning(
            "Passing the GOFLAGS env parameter to the init step is deprecated. "
            "Please move this to the finish step."
        )

    results_dir = workspace / RESULTS_FOLDER_NAME
    database_dir = results_dir / DATABASE_FOLDER_NAME
    database_dir.mkdir(parents=True, exist_ok=True)

    ambient = dict(publisher.environ)
    probe = ExtractorProbe(runner, settings.workspace.scratch_dir / PROBE_DUMP_NAME)

    with log_group("Initialize language databases"):
        traced, scanned = await collect_tracer_configs(
            runner,
            probe,
            languages,
            database_dir,
            source_root,
            ambient,
            compiler_specs,
        )

    compound = aggregate_tracer_configs(traced, workspace)

    traced_languages = list(traced)
    publisher.export_variable(shared_env.CODEQL_ACTION_LANGUAGES, ",".join(languages))
    publisher.export_variable(shared_env.CODEQL_ACTION_SCANNED_LANGUAGES, ",".join(scanned))
    publisher.export_variable(shared_env.CODEQL_ACTION_TRACED_LANGUAGES, ",".join(traced_languages))
    publisher.export_variable(
        shared_env.CODEQL_ACTION_AUTOBUILD_LANGUAGES, ",".join(traced_languages)
    )

    if compound is not None:
        with log_group("Activate build tracing"):
            if injector is None:
                injector = default_injector(settings.codeql.tools_dir, publisher, runner)
            previous = publish_compound_config(compound, publisher)
            try:
                await injector.apply(compound)
            except CodeQLActionError:
                logger.error("Tracer injection failed, withdrawing the tracer configuration")
                restore_variables(previous, publisher)
                raise

    publisher.export_variable(shared_env.CODEQL_ACTION_RESULTS, str(results_dir))
    publisher.export_variable(shared_env.CODEQL_ACTION_DATABASE_DIR, str(database_dir))
    publisher.export_variable(shared_env.CODEQL_ACTION_CMD, runner.codeql_path)

    return InitResult(
        traced_languages=traced_languages,
        scanned_languages=scanned,
        compound=compound,
        results_dir=results_dir,
        database_dir=database_dir,
    )
