"""Platform-specific activation of the build tracer.

Each injector takes an already published compound configuration and makes the
tracer runtime intercept the processes started by the build.
"""

import sys
from abc import ABC, abstractmethod
from pathlib import Path

from codeql_action.actions.publish import EnvironmentPublisher
from codeql_action.codeql.runner import CodeQLRunner
from codeql_action.core.exceptions.errors import InjectionError
from codeql_action.core.logger.logger import get_logger
from codeql_action.models.tracer import CompoundTracerConfig
from codeql_action.shared_env import ODASA_TRACER_CONFIGURATION

logger = get_logger(__name__)

INJECT_SCRIPT = Path(__file__).parent / "inject-tracer.ps1"


class Injector(ABC):
    """Activates build tracing for a compound configuration."""

    @abstractmethod
    async def apply(self, compound: CompoundTracerConfig) -> None:
        """Make later build steps run under the tracer."""


class PreloadInjector(Injector):
    """Activates the tracer through a dynamic loader preload variable.

    The runtime finds its spec through the exported ODASA_TRACER_CONFIGURATION.
    """

    def __init__(self, variable: str, library: Path, publisher: EnvironmentPublisher) -> None:
        self.variable = variable
        self.library = library
        self.publisher = publisher

    async def apply(self, compound: CompoundTracerConfig) -> None:
        logger.info(f"Preloading tracer runtime {self.library} via {self.variable}")
        self.publisher.export_variable(self.variable, str(self.library))


class ProcessInjector(Injector):
    """Activates the tracer by running a native injector program.

    The injector attaches the runtime to the runner process so that later steps
    are traced; it reads the spec path from its own environment.
    """

    def __init__(
        self,
        tracer: Path,
        runner: CodeQLRunner,
        publisher: EnvironmentPublisher,
        script: Path = INJECT_SCRIPT,
    ) -> None:
        self.tracer = tracer
        self.runner = runner
        self.publisher = publisher
        self.script = script

    async def apply(self, compound: CompoundTracerConfig) -> None:
        env = dict(self.publisher.environ)
        env[ODASA_TRACER_CONFIGURATION] = str(compound.spec_path)
        cmd = ["powershell", str(self.script), str(self.tracer)]

        logger.info(f"Injecting tracer {self.tracer}")
        return_code, _, stderr = await self.runner.run_command(cmd, env=env)
        if return_code != 0:
            raise InjectionError(
                f"Tracer injection failed with exit code {return_code}",
                details={"tracer": str(self.tracer), "stderr": stderr.strip()[-1000:]},
            )


def injector_for_platform(
    platform: str,
    tools_dir: Path,
    publisher: EnvironmentPublisher,
    runner: CodeQLRunner,
) -> Injector:
    """Select the injector for an operating system.

    Args:
        platform: Value in the style of sys.platform.
        tools_dir: Folder holding the linux64, osx64 and win64 runtimes.
        publisher: Publisher used to export the preload variable.
        runner: Process runner used by the native injector.
    """
    if platform == "darwin":
        return PreloadInjector(
            "DYLD_INSERT_LIBRARIES",
            tools_dir / "osx64" / "libtrace.dylib",
            publisher,
        )
    if platform == "win32":
        return ProcessInjector(tools_dir / "win64" / "tracer.exe", runner, publisher)
    # ${LIB} is expanded by the dynamic loader to pick the 32 or 64 bit runtime
    return PreloadInjector(
        "LD_PRELOAD",
        tools_dir / "linux64" / "${LIB}trace.so",
        publisher,
    )


def default_injector(
    tools_dir: Path,
    publisher: EnvironmentPublisher,
    runner: CodeQLRunner,
) -> Injector:
    """Select the injector for the running operating system."""
    return injector_for_platform(sys.platform, tools_dir, publisher, runner)
