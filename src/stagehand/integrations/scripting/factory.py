"""
stagehand.integrations.scripting.factory - Script Engine Factory
==================================================================

Usage:
    >>> engine = create_script_engine()
    >>> engine.supported_extensions()   # on Linux with pwsh installed
    ('sh', 'ps1')
"""

from __future__ import annotations

import shutil
import sys
from typing import Optional

from stagehand.infrastructure.file_system import PhysicalFileSystem, get_physical_file_system
from stagehand.integrations.scripting.base import ScriptEngine
from stagehand.integrations.scripting.bash import BashScriptEngine
from stagehand.integrations.scripting.certificate_context import ClientCertificateScriptEngine
from stagehand.integrations.scripting.combined import CombinedScriptEngine
from stagehand.integrations.scripting.powershell import PowerShellScriptEngine


def create_script_engine(
    file_system: Optional[PhysicalFileSystem] = None,
    platform: Optional[str] = None,
) -> ScriptEngine:
    """Create the script engine for the host platform.

    Args:
        file_system: Gateway the engines use for wrapper and certificate files.
        platform: ``sys.platform`` value to build for (defaults to the host).

    Returns:
        The platform engines behind a CombinedScriptEngine, wrapped in the
        client certificate context.

    Platform mapping:
        - win32  → PowerShell
        - others → bash, plus PowerShell when ``pwsh`` is on PATH
    """
    file_system = file_system or get_physical_file_system()
    platform = platform or sys.platform

    engines: list[ScriptEngine] = []
    if platform == "win32":
        engines.append(PowerShellScriptEngine(file_system))
    else:
        engines.append(BashScriptEngine(file_system))
        if shutil.which("pwsh"):
            engines.append(PowerShellScriptEngine(file_system, executable="pwsh"))

    return ClientCertificateScriptEngine(CombinedScriptEngine(engines), file_system)
