"""Tracer configuration data models."""

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer


def _read_only(env: Mapping[str, str | None]) -> Mapping[str, str | None]:
    return MappingProxyType(dict(env))


def _as_dict(env: Mapping[str, str | None]) -> dict[str, str | None]:
    return dict(env)


# Copied on validation and exposed read-only; dumps as a plain dict
Environment = Annotated[
    Mapping[str, str],
    AfterValidator(_read_only),
    PlainSerializer(_as_dict),
]
CapturedEnvironment = Annotated[
    Mapping[str, str | None],
    AfterValidator(_read_only),
    PlainSerializer(_as_dict),
]


class TracerConfig(BaseModel):
    """Build instrumentation configuration for one traced language."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    spec_path: Path = Field(description="Path to the language's tracer spec file")
    env: Environment = Field(
        default_factory=dict,
        description="Variables that must be exported for tracing",
    )


class CompoundTracerConfig(BaseModel):
    """Single configuration tracing every traced language in one build."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    spec_path: Path = Field(description="Path to the aggregated tracer spec file")
    environment_path: Path = Field(description="Path to the binary environment blob")
    env: Environment = Field(
        default_factory=dict,
        description="Merged variables of all traced languages",
    )


class ProbeResult(BaseModel):
    """Environment captured by running a marker command under trace-command."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    spec_path: Path = Field(description="Tracer spec path reported by the probe")
    environment: CapturedEnvironment = Field(
        default_factory=dict,
        description="Full environment seen by the marker command",
    )
