"""Tests for tracer configuration models."""

from pathlib import Path

import pytest

from codeql_action.models.tracer import CompoundTracerConfig, ProbeResult, TracerConfig


class TestTracerModels:
    """Tests for model immutability."""

    def test_env_cannot_be_changed_in_place(self) -> None:
        """Test a config's environment rejects item assignment."""
        config = TracerConfig(spec_path=Path("/spec"), env={"X": "1"})

        with pytest.raises(TypeError):
            config.env["X"] = "2"  # type: ignore[index]

        assert config.env == {"X": "1"}

    def test_env_detached_from_source(self) -> None:
        """Test later changes to the input dict do not reach the config."""
        source = {"X": "1"}
        config = TracerConfig(spec_path=Path("/spec"), env=source)

        source["X"] = "2"
        source["Y"] = "3"

        assert config.env == {"X": "1"}

    def test_compound_env_read_only(self) -> None:
        """Test the compound environment rejects item assignment."""
        compound = CompoundTracerConfig(
            spec_path=Path("/spec"),
            environment_path=Path("/spec.environment"),
            env={"X": "1"},
        )

        with pytest.raises(TypeError):
            compound.env["Y"] = "2"  # type: ignore[index]

    def test_captured_environment_read_only(self) -> None:
        """Test the captured environment rejects item deletion."""
        result = ProbeResult(spec_path=Path("/spec"), environment={"X": "1", "Y": None})

        with pytest.raises(TypeError):
            del result.environment["X"]  # type: ignore[attr-defined]

    def test_dump_gives_plain_dict(self) -> None:
        """Test serialization produces an ordinary dict."""
        config = TracerConfig(spec_path=Path("/spec"), env={"X": "1"})

        assert config.model_dump()["env"] == {"X": "1"}
        assert type(config.model_dump()["env"]) is dict

    def test_default_env_read_only(self) -> None:
        """Test the default empty environment is read-only too."""
        config = TracerConfig(spec_path=Path("/spec"))

        with pytest.raises(TypeError):
            config.env["X"] = "1"  # type: ignore[index]
