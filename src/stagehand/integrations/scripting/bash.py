"""Bash script engine (``.sh``)."""

from __future__ import annotations

from typing import Optional

from stagehand.core.enums import ScriptSyntax
from stagehand.core.models import CommandLineInvocation
from stagehand.infrastructure.file_system import PhysicalFileSystem
from stagehand.integrations.scripting.base import BootstrappedScriptEngine
from stagehand.integrations.scripting.bootstrap import BashBootstrapRenderer


class BashScriptEngine(BootstrappedScriptEngine):
    """Runs ``bash <wrapper> <key>``; the wrapper sources the user script."""

    syntax = ScriptSyntax.BASH

    def __init__(
        self,
        file_system: Optional[PhysicalFileSystem] = None,
        executable: str = "bash",
    ) -> None:
        super().__init__(BashBootstrapRenderer(), file_system)
        self.executable = executable

    def build_invocation(self, wrapper_path: str, key_hex: str) -> CommandLineInvocation:
        return CommandLineInvocation(
            executable=self.executable,
            arguments=[wrapper_path, key_hex],
        )
