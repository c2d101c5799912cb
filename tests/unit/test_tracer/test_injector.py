"""Tests for platform tracer injectors."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from codeql_action.actions.publish import EnvironmentPublisher
from codeql_action.core.exceptions.errors import InjectionError
from codeql_action.models.tracer import CompoundTracerConfig
from codeql_action.tracer.injector import (
    INJECT_SCRIPT,
    PreloadInjector,
    ProcessInjector,
    injector_for_platform,
)


@pytest.fixture
def compound(temp_dir: Path) -> CompoundTracerConfig:
    """Create a compound configuration."""
    return CompoundTracerConfig(
        spec_path=temp_dir / "compound-spec",
        environment_path=temp_dir / "compound-spec.environment",
        env={"SEMMLE_RUNNER": "/r"},
    )


class TestInjectorForPlatform:
    """Tests for injector selection."""

    def test_linux(self, publisher: EnvironmentPublisher) -> None:
        """Test Linux preloads the shared library through LD_PRELOAD."""
        injector = injector_for_platform("linux", Path("/tools"), publisher, MagicMock())

        assert isinstance(injector, PreloadInjector)
        assert injector.variable == "LD_PRELOAD"
        assert injector.library == Path("/tools/linux64/${LIB}trace.so")

    def test_macos(self, publisher: EnvironmentPublisher) -> None:
        """Test macOS preloads the dylib through DYLD_INSERT_LIBRARIES."""
        injector = injector_for_platform("darwin", Path("/tools"), publisher, MagicMock())

        assert isinstance(injector, PreloadInjector)
        assert injector.variable == "DYLD_INSERT_LIBRARIES"
        assert injector.library == Path("/tools/osx64/libtrace.dylib")

    def test_windows(self, publisher: EnvironmentPublisher) -> None:
        """Test Windows runs the native injector."""
        injector = injector_for_platform("win32", Path("/tools"), publisher, MagicMock())

        assert isinstance(injector, ProcessInjector)
        assert injector.tracer == Path("/tools/win64/tracer.exe")
        assert injector.script == INJECT_SCRIPT

    def test_inject_script_ships_with_package(self) -> None:
        """Test the PowerShell injection script is present."""
        assert INJECT_SCRIPT.is_file()


class TestPreloadInjector:
    """Tests for PreloadInjector."""

    @pytest.mark.asyncio
    async def test_apply_exports_variable(
        self, publisher: EnvironmentPublisher, compound: CompoundTracerConfig
    ) -> None:
        """Test the preload variable is exported."""
        injector = PreloadInjector("LD_PRELOAD", Path("/tools/linux64/${LIB}trace.so"), publisher)

        await injector.apply(compound)

        assert publisher.environ["LD_PRELOAD"] == "/tools/linux64/${LIB}trace.so"
        assert publisher.exported == {"LD_PRELOAD": "/tools/linux64/${LIB}trace.so"}


class TestProcessInjector:
    """Tests for ProcessInjector."""

    @pytest.mark.asyncio
    async def test_apply_runs_script(
        self, publisher: EnvironmentPublisher, compound: CompoundTracerConfig
    ) -> None:
        """Test the injector runs with the compound spec in its environment."""
        runner = MagicMock()
        runner.run_command = AsyncMock(return_value=(0, "", ""))
        injector = ProcessInjector(Path("C:/tools/win64/tracer.exe"), runner, publisher)

        await injector.apply(compound)

        args, kwargs = runner.run_command.await_args
        assert args[0] == ["powershell", str(INJECT_SCRIPT), str(Path("C:/tools/win64/tracer.exe"))]
        assert kwargs["env"]["ODASA_TRACER_CONFIGURATION"] == str(compound.spec_path)

    @pytest.mark.asyncio
    async def test_apply_failure(
        self, publisher: EnvironmentPublisher, compound: CompoundTracerConfig
    ) -> None:
        """Test a failing injector raises InjectionError."""
        runner = MagicMock()
        runner.run_command = AsyncMock(return_value=(1, "", "process not found"))
        injector = ProcessInjector(Path("tracer.exe"), runner, publisher)

        with pytest.raises(InjectionError) as exc_info:
            await injector.apply(compound)

        assert exc_info.value.details["stderr"] == "process not found"
