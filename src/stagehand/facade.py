"""
stagehand.facade - Stagehand Top-Level Facade
===============================================

DeploymentExecutor wires every layer together for one deployment of one
extracted package and reports the outcome as a process exit code.

Architecture Context:

    ┌──────────────────────── DeploymentExecutor ─────────────────────────┐
    │                                                                     │
    │  StagehandConfig ──→ configure_logging()                            │
    │                                                                     │
    │  ┌───────────────────────────────────────────────────────────────┐  │
    │  │ Orchestration: ConventionProcessor                             │  │
    │  │   CopyPackageToCustomInstallationDirectory                     │  │
    │  │   PackagedScript(PreDeploy) → (Deploy) → (PostDeploy)          │  │
    │  └───────────────────────────┬───────────────────────────────────┘  │
    │  ┌───────────────────────────▼───────────────────────────────────┐  │
    │  │ Integrations: ScriptEngine, CommandLineRunner                  │  │
    │  └───────────────────────────┬───────────────────────────────────┘  │
    │  ┌───────────────────────────▼───────────────────────────────────┐  │
    │  │ Infrastructure: PhysicalFileSystem, RetryTracker, AES          │  │
    │  └───────────────────────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────────────────────┘

Usage:
    >>> executor = DeploymentExecutor(load_config())
    >>> exit_code = await executor.run("/opt/packages/web-1.0.0", {"Environment": "Production"})
"""

from __future__ import annotations

from typing import Optional

import structlog

from stagehand.core.config import StagehandConfig
from stagehand.core.deployment import RunningDeployment
from stagehand.core.exceptions import StagehandError
from stagehand.core.logging import configure_logging
from stagehand.core.variables import VariableDictionary
from stagehand.infrastructure.file_system import (
    CancellationSignal,
    PhysicalFileSystem,
    get_physical_file_system,
)
from stagehand.integrations.processes.base import CommandLineRunner
from stagehand.integrations.processes.command_output import CommandOutput
from stagehand.integrations.processes.factory import create_command_line_runner
from stagehand.integrations.scripting.base import ScriptEngine
from stagehand.integrations.scripting.factory import create_script_engine
from stagehand.orchestration.convention_processor import Convention, ConventionProcessor
from stagehand.orchestration.conventions import (
    CopyPackageToCustomInstallationDirectoryConvention,
    PackagedScriptConvention,
)


logger = structlog.get_logger()


class DeploymentExecutor:
    """Runs the default convention pipeline for one package.

    Attributes:
        config: Settings for this run.
        file_system: Gateway shared by every convention and engine.
        script_engine: Engine used by the packaged script conventions.

    Example:
        >>> executor = DeploymentExecutor(StagehandConfig(log_level="DEBUG"))
        >>> deployment = executor.create_deployment("/opt/packages/web-1.0.0")
        >>> exit_code = await executor.execute(deployment)
    """

    def __init__(
        self,
        config: Optional[StagehandConfig] = None,
        file_system: Optional[PhysicalFileSystem] = None,
        script_engine: Optional[ScriptEngine] = None,
        output: Optional[CommandOutput] = None,
        cancel: Optional[CancellationSignal] = None,
        configure_logs: bool = True,
    ) -> None:
        self.config = config or StagehandConfig()
        if configure_logs:
            configure_logging(self.config.log_level, json_output=self.config.log_format == "json")

        self.file_system = file_system or get_physical_file_system(
            retry_config=self.config.file_retry,
            temp_directory=self.config.temp_directory,
        )
        self.script_engine = script_engine or create_script_engine(self.file_system)
        self._output = output
        self._cancel = cancel
        self._logger = logger.bind(component="deployment_executor")

    def create_deployment(
        self,
        package_directory: str,
        variables: Optional[dict[str, Optional[str]]] = None,
        sensitive_variables: Optional[dict[str, Optional[str]]] = None,
    ) -> RunningDeployment:
        store = VariableDictionary(variables)
        for name, value in (sensitive_variables or {}).items():
            store.set_sensitive(name, value)
        return RunningDeployment(package_directory, store)

    def build_conventions(
        self,
        deployment: RunningDeployment,
        runner: Optional[CommandLineRunner] = None,
    ) -> list[Convention]:
        """Default pipeline: custom installation directory, then packaged scripts."""
        runner = runner or create_command_line_runner(deployment, self._output)

        conventions: list[Convention] = [
            CopyPackageToCustomInstallationDirectoryConvention(
                self.file_system,
                required_free_space_bytes=self.config.required_free_space_bytes,
                cancel=self._cancel,
            ),
        ]
        conventions.extend(
            PackagedScriptConvention(prefix, self.file_system, self.script_engine, runner)
            for prefix in self.config.script_prefixes
        )
        return conventions

    async def execute(
        self,
        deployment: RunningDeployment,
        conventions: Optional[list[Convention]] = None,
    ) -> int:
        """Run the pipeline. Returns 0 on success, 1 on failure."""
        processor = ConventionProcessor(
            deployment,
            conventions if conventions is not None else self.build_conventions(deployment),
        )

        try:
            await processor.run_conventions()
        except StagehandError as e:
            self._logger.error("deployment_failed", **e.to_dict())
            return 1

        self._logger.info(
            "deployment_succeeded",
            current_directory=deployment.current_directory,
            artifacts=[artifact.path for artifact in deployment.artifacts],
        )
        return 0

    async def run(
        self,
        package_directory: str,
        variables: Optional[dict[str, Optional[str]]] = None,
        sensitive_variables: Optional[dict[str, Optional[str]]] = None,
    ) -> int:
        """Create a deployment for ``package_directory`` and execute it."""
        deployment = self.create_deployment(package_directory, variables, sensitive_variables)
        return await self.execute(deployment)
