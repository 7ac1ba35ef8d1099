"""
stagehand.integrations.scripting - Script Engines
===================================================

    - base:                 ScriptEngine / BootstrappedScriptEngine
    - bootstrap:            wrapper rendering from templates/
    - bash, powershell:     per-family engines
    - combined:             dispatch by extension
    - certificate_context:  client certificate decorator
    - factory:              create_script_engine()
"""

from stagehand.integrations.scripting.base import BootstrappedScriptEngine, ScriptEngine
from stagehand.integrations.scripting.bash import BashScriptEngine
from stagehand.integrations.scripting.bootstrap import (
    BashBootstrapRenderer,
    BootstrapRenderer,
    PowerShellBootstrapRenderer,
)
from stagehand.integrations.scripting.certificate_context import ClientCertificateScriptEngine
from stagehand.integrations.scripting.combined import CombinedScriptEngine
from stagehand.integrations.scripting.factory import create_script_engine
from stagehand.integrations.scripting.powershell import PowerShellScriptEngine

__all__ = [
    "ScriptEngine",
    "BootstrappedScriptEngine",
    "BashScriptEngine",
    "PowerShellScriptEngine",
    "CombinedScriptEngine",
    "ClientCertificateScriptEngine",
    "BootstrapRenderer",
    "BashBootstrapRenderer",
    "PowerShellBootstrapRenderer",
    "create_script_engine",
]
