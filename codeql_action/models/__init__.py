"""Data models module."""

from codeql_action.models.tracer import CompoundTracerConfig, ProbeResult, TracerConfig

__all__ = [
    "CompoundTracerConfig",
    "ProbeResult",
    "TracerConfig",
]
