"""Reduce a captured tracer environment to the variables worth exporting."""

from collections.abc import Mapping

from codeql_action.models.tracer import ProbeResult, TracerConfig
from codeql_action.shared_env import ODASA_TRACER_CONFIGURATION

# Always exported, even when the ambient environment already defines them
CRITICAL_TRACER_VARS: frozenset[str] = frozenset(
    {
        "SEMMLE_PRELOAD_libtrace",
        "SEMMLE_RUNNER",
        "SEMMLE_COPY_EXECUTABLES_ROOT",
        "SEMMLE_DEPTRACE_SOCKET",
        "SEMMLE_JAVA_TOOL_OPTIONS",
    }
)

TRACER_VAR_PREFIX = "CODEQL_"


def filter_tracer_environment(
    captured: Mapping[str, str | None],
    ambient: Mapping[str, str],
) -> dict[str, str]:
    """Keep the captured variables that real tracing needs.

    A variable is kept when it is new relative to the ambient environment, is
    one of CRITICAL_TRACER_VARS, or starts with TRACER_VAR_PREFIX. The tracer
    spec variable is never kept; it travels as the config's spec path.

    Args:
        captured: Environment seen by the probe's marker command.
        ambient: Environment of the current process.

    Returns:
        Filtered variables.
    """
    env: dict[str, str] = {}
    for key, value in captured.items():
        if key == ODASA_TRACER_CONFIGURATION or value is None:
            continue
        if (
            key not in ambient
            or key in CRITICAL_TRACER_VARS
            or key.startswith(TRACER_VAR_PREFIX)
        ):
            env[key] = value
    return env


def build_tracer_config(probe: ProbeResult, ambient: Mapping[str, str]) -> TracerConfig:
    """Turn a probe result into the language's TracerConfig."""
    return TracerConfig(
        spec_path=probe.spec_path,
        env=filter_tracer_environment(probe.environment, ambient),
    )
