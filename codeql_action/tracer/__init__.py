"""Build tracer configuration: probing, filtering, aggregation and injection."""

from codeql_action.tracer.aggregator import (
    aggregate_tracer_configs,
    concatenation_order,
    merge_environments,
    stable_partition,
)
from codeql_action.tracer.env_blob import decode_environment, encode_environment
from codeql_action.tracer.env_filter import build_tracer_config, filter_tracer_environment
from codeql_action.tracer.injector import (
    Injector,
    PreloadInjector,
    ProcessInjector,
    injector_for_platform,
)
from codeql_action.tracer.probe import ExtractorProbe
from codeql_action.tracer.spec_file import TracerSpec, parse_tracer_spec, read_tracer_spec

__all__ = [
    "ExtractorProbe",
    "Injector",
    "PreloadInjector",
    "ProcessInjector",
    "TracerSpec",
    "aggregate_tracer_configs",
    "build_tracer_config",
    "concatenation_order",
    "decode_environment",
    "encode_environment",
    "filter_tracer_environment",
    "injector_for_platform",
    "merge_environments",
    "parse_tracer_spec",
    "read_tracer_spec",
    "stable_partition",
]
