"""Tracer configuration aggregation.

Combines the per-language tracer configurations into one compound
configuration, so that a single build invocation is traced for every
compiled language at once.
"""

import os
import tempfile
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

from codeql_action.core.exceptions.errors import ConflictingEnvironmentVariable, IOFailure
from codeql_action.core.logger.logger import get_logger
from codeql_action.models.tracer import CompoundTracerConfig, TracerConfig
from codeql_action.tracer.env_blob import ENVIRONMENT_SUFFIX, encode_environment
from codeql_action.tracer.spec_file import concatenate_specs, read_tracer_spec

logger = get_logger(__name__)

# Its tracer wraps the toolchains of every other language, so its blocks go last
PRIORITY_LANGUAGE = "cpp"

COMPOUND_SPEC_NAME = "compound-spec"
COMPOUND_LOG_NAME = "compound-build-tracer.log"


def merge_environments(envs: Iterable[Mapping[str, str]]) -> dict[str, str]:
    """Union several environments, refusing conflicting values.

    Raises:
        ConflictingEnvironmentVariable: If a name is given two different values.
    """
    merged: dict[str, str] = {}
    for env in envs:
        for name, value in env.items():
            if name in merged:
                if merged[name] != value:
                    raise ConflictingEnvironmentVariable(name, merged[name], value)
            else:
                merged[name] = value
    return merged


def is_priority_language(language: str) -> bool:
    """Return True for the language whose blocks must be concatenated last."""
    return language == PRIORITY_LANGUAGE


def stable_partition(
    items: Iterable[str],
    predicate: Callable[[str], bool],
) -> list[str]:
    """Move items matching predicate to the end, preserving order within each group."""
    items = list(items)
    return [i for i in items if not predicate(i)] + [i for i in items if predicate(i)]


def concatenation_order(languages: Iterable[str]) -> list[str]:
    """Order languages for spec concatenation: priority language last."""
    return stable_partition(languages, is_priority_language)


def _default_file_mode() -> int:
    """Return the mode a plainly created file gets under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _write_atomically(files: list[tuple[Path, bytes]], directory: Path) -> None:
    """Write every file or none of them.

    Content goes to temporaries in the target directory first, then each is
    renamed into place. If a rename fails, files already renamed are removed.
    """
    mode = _default_file_mode()
    staged: list[tuple[Path, Path]] = []
    installed: list[Path] = []
    try:
        for target, content in files:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=directory)
            tmp_path = Path(tmp_name)
            staged.append((tmp_path, target))
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            # mkstemp files are 0600; give them the usual umask mode
            os.chmod(tmp_path, mode)
        for tmp_path, target in staged:
            os.replace(tmp_path, target)
            installed.append(target)
    except OSError as e:
        for tmp_path, _ in staged:
            tmp_path.unlink(missing_ok=True)
        for target in installed:
            target.unlink(missing_ok=True)
        raise IOFailure(
            f"Cannot write compound tracer configuration: {e}",
            path=str(getattr(e, "filename", None) or directory),
        ) from e


def aggregate_tracer_configs(
    configs: Mapping[str, TracerConfig],
    output_dir: Path,
) -> CompoundTracerConfig | None:
    """Build the compound tracer configuration for all traced languages.

    Args:
        configs: Tracer configuration per traced language.
        output_dir: Folder receiving the compound spec and environment files.

    Returns:
        The compound configuration, or None when there is no traced language.
        In the latter case nothing is written.

    Raises:
        ConflictingEnvironmentVariable: If two languages disagree on a variable.
        IOFailure: If a spec file cannot be read or the output cannot be written.
    """
    if not configs:
        logger.debug("No traced languages, skipping compound tracer configuration")
        return None

    env = merge_environments(config.env for config in configs.values())

    languages = concatenation_order(configs)
    specs = [read_tracer_spec(configs[language].spec_path) for language in languages]

    spec_path = output_dir / COMPOUND_SPEC_NAME
    environment_path = output_dir.joinpath(COMPOUND_SPEC_NAME + ENVIRONMENT_SUFFIX)
    compound_spec = concatenate_specs(specs, str(output_dir / COMPOUND_LOG_NAME))

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IOFailure(
            f"Cannot create tracer output folder: {e}",
            path=str(output_dir),
        ) from e

    _write_atomically(
        [
            (spec_path, compound_spec.render().encode("utf-8")),
            (environment_path, encode_environment(env)),
        ],
        output_dir,
    )

    logger.info(
        f"Compound tracer configuration for {', '.join(languages)}: "
        f"{compound_spec.count} blocks, {len(env)} variables"
    )
    return CompoundTracerConfig(
        spec_path=spec_path,
        environment_path=environment_path,
        env=env,
    )
