"""
stagehand.orchestration.conventions.packaged_script - Packaged Scripts
========================================================================

Runs scripts shipped inside the package whose base name equals a prefix,
e.g. ``PreDeploy.sh``, ``Deploy.ps1``, ``postdeploy.sh``:

    1. Find files in the current directory whose name without extension
       equals the prefix, grouped by the engine's supported extensions in
       order (both compared case-insensitively)
    2. Run each in discovery order; a non-zero exit code stops the
       deployment with ScriptExecutionError
    3. Delete the matched scripts (best-effort) so they are not left in
       the installation directory
"""

from __future__ import annotations

import os

import structlog

from stagehand.core.deployment import RunningDeployment
from stagehand.core.enums import FailureOptions
from stagehand.core.exceptions import ScriptExecutionError
from stagehand.infrastructure.file_system import PhysicalFileSystem
from stagehand.integrations.processes.base import CommandLineRunner
from stagehand.integrations.scripting.base import ScriptEngine
from stagehand.orchestration.convention_processor import Convention


logger = structlog.get_logger()


class PackagedScriptConvention(Convention):
    def __init__(
        self,
        script_file_prefix: str,
        file_system: PhysicalFileSystem,
        script_engine: ScriptEngine,
        command_line_runner: CommandLineRunner,
    ) -> None:
        self.script_file_prefix = script_file_prefix
        self.file_system = file_system
        self.script_engine = script_engine
        self.command_line_runner = command_line_runner
        self._logger = logger.bind(component="packaged_script", prefix=script_file_prefix)

    @property
    def name(self) -> str:
        return f"PackagedScript({self.script_file_prefix})"

    async def install(self, deployment: RunningDeployment) -> None:
        await self._run_scripts(deployment)
        self._delete_scripts(deployment)

    async def _run_scripts(self, deployment: RunningDeployment) -> None:
        scripts = self.find_scripts(deployment)
        if not scripts:
            self._logger.debug("no_packaged_scripts", directory=deployment.current_directory)
            return

        for script in scripts:
            result = await self.script_engine.execute(
                script,
                deployment.variables,
                self.command_line_runner,
            )
            if result.exit_code != 0:
                raise ScriptExecutionError(script_path=script, exit_code=result.exit_code)

    def _delete_scripts(self, deployment: RunningDeployment) -> None:
        for script in self.find_scripts(deployment):
            self.file_system.delete_file(script, FailureOptions.IGNORE_FAILURE)

    def find_scripts(self, deployment: RunningDeployment) -> list[str]:
        prefix = self.script_file_prefix.casefold()
        candidates: dict[str, list[str]] = {}
        for path in self.file_system.enumerate_files(deployment.current_directory):
            stem, extension = os.path.splitext(os.path.basename(path))
            if stem.casefold() == prefix:
                candidates.setdefault(extension[1:].casefold(), []).append(path)
        return [
            path
            for extension in self.script_engine.supported_extensions()
            for path in candidates.get(extension.casefold(), [])
        ]
