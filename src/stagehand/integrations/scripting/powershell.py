"""PowerShell script engine (``.ps1``)."""

from __future__ import annotations

import shutil
import sys
from typing import Optional

from stagehand.core.enums import ScriptSyntax
from stagehand.core.models import CommandLineInvocation
from stagehand.infrastructure.file_system import PhysicalFileSystem
from stagehand.integrations.scripting.base import BootstrappedScriptEngine
from stagehand.integrations.scripting.bootstrap import PowerShellBootstrapRenderer


def find_powershell() -> str:
    """Prefer PowerShell 7 (``pwsh``); fall back to Windows PowerShell."""
    if shutil.which("pwsh"):
        return "pwsh"
    return "powershell.exe" if sys.platform == "win32" else "pwsh"


class PowerShellScriptEngine(BootstrappedScriptEngine):
    syntax = ScriptSyntax.POWERSHELL

    def __init__(
        self,
        file_system: Optional[PhysicalFileSystem] = None,
        executable: Optional[str] = None,
    ) -> None:
        super().__init__(PowerShellBootstrapRenderer(), file_system)
        self.executable = executable or find_powershell()

    def build_invocation(self, wrapper_path: str, key_hex: str) -> CommandLineInvocation:
        return CommandLineInvocation(
            executable=self.executable,
            arguments=[
                "-NoLogo",
                "-NonInteractive",
                "-ExecutionPolicy", "Unrestricted",
                "-File", wrapper_path,
                "-OctopusKey", key_hex,
            ],
        )
