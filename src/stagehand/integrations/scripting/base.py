"""
stagehand.integrations.scripting.base - Script Engine Interface
=================================================================

A ScriptEngine knows which script extensions it can run and how to run one
script against a deployment's variables.

Engine Composition:

    ClientCertificateScriptEngine        (decorator: credential context)
        └── CombinedScriptEngine         (dispatch by extension)
              ├── BashScriptEngine       (.sh)
              └── PowerShellScriptEngine (.ps1)

The bootstrapped engines share one execution routine:

    1. Render the wrapper with a fresh AES key
    2. Write it to a new temporary file
    3. Launch the interpreter via the CommandLineRunner (key as argument)
    4. Delete the wrapper, whatever happened in 3
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from stagehand.core.enums import FailureOptions, ScriptSyntax
from stagehand.core.models import CommandLineInvocation, CommandResult
from stagehand.core.variables import VariableDictionary
from stagehand.infrastructure.encryption import AesEncryption
from stagehand.infrastructure.file_system import PhysicalFileSystem, get_physical_file_system
from stagehand.integrations.processes.base import CommandLineRunner
from stagehand.integrations.scripting.bootstrap import BootstrapRenderer


logger = structlog.get_logger()


class ScriptEngine(ABC):
    """Runs scripts of the extensions it supports."""

    @abstractmethod
    def supported_extensions(self) -> tuple[str, ...]:
        """Extensions without the leading dot, in preference order."""
        ...

    @abstractmethod
    async def execute(
        self,
        script_path: str,
        variables: VariableDictionary,
        runner: CommandLineRunner,
    ) -> CommandResult:
        """Run ``script_path`` and return its result.

        A non-zero exit code is returned, not raised; deciding what it means
        is up to the caller.

        Raises:
            ScriptLaunchError: The interpreter could not be started.
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(extensions={self.supported_extensions()!r})"


class BootstrappedScriptEngine(ScriptEngine):
    """Engine that runs scripts through a rendered bootstrap wrapper."""

    syntax: ScriptSyntax

    def __init__(
        self,
        renderer: BootstrapRenderer,
        file_system: Optional[PhysicalFileSystem] = None,
    ) -> None:
        self.renderer = renderer
        self.file_system = file_system or get_physical_file_system()
        self._logger = logger.bind(component="script_engine", syntax=self.syntax.value)

    def supported_extensions(self) -> tuple[str, ...]:
        return (self.syntax.file_extension,)

    @abstractmethod
    def build_invocation(self, wrapper_path: str, key_hex: str) -> CommandLineInvocation:
        """How to launch the interpreter on ``wrapper_path``."""
        ...

    async def execute(
        self,
        script_path: str,
        variables: VariableDictionary,
        runner: CommandLineRunner,
    ) -> CommandResult:
        encryption = AesEncryption.random_key()
        text = self.renderer.render(script_path, variables, encryption)

        wrapper_path = self.file_system.create_temporary_file(self.syntax.file_extension)
        try:
            self.file_system.overwrite_file(wrapper_path, text)

            self._logger.info("script_executing", script=script_path)
            result = await runner.execute(self.build_invocation(wrapper_path, encryption.key_hex))
            self._logger.info(
                "script_completed",
                script=script_path,
                exit_code=result.exit_code,
                duration_seconds=result.duration_seconds,
            )
            return result
        finally:
            self.file_system.delete_file(wrapper_path, FailureOptions.IGNORE_FAILURE)
