"""
stagehand.integrations.scripting.bootstrap - Bootstrap Script Rendering
=========================================================================

A user script never runs on its own. Each execution renders a wrapper from
a per-family template (shipped as package data under ``templates/``):

    ┌──────────────────────────── bootstrap.sh ────────────────────────────┐
    │  helper functions (decrypt_variable, set_octopusvariable, ...)       │
    │  #### VariableDeclarations ####   ← one declaration per variable     │
    │  ...                                                                 │
    │  #### TargetScript ####           ← sources the user's script        │
    └──────────────────────────────────────────────────────────────────────┘

Declarations:
    plain      → the value verbatim, quoted for the shell family
    sensitive  → decrypt_variable '<base64 ciphertext>' '<hex iv>'

The decryption key is not part of the text; the engine passes it to the
interpreter as a launch argument.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from importlib import resources
from typing import Optional

from stagehand.core.enums import ScriptSyntax
from stagehand.core.variables import VariableDictionary
from stagehand.infrastructure.encryption import AesEncryption


VARIABLE_DECLARATIONS_PLACEHOLDER = "#### VariableDeclarations ####"
TARGET_SCRIPT_PLACEHOLDER = "#### TargetScript ####"


def load_template(name: str) -> str:
    """Read a bundled template and check it has each placeholder exactly once."""
    template = (
        resources.files("stagehand.integrations.scripting")
        .joinpath("templates")
        .joinpath(name)
        .read_text(encoding="utf-8")
    )
    for placeholder in (VARIABLE_DECLARATIONS_PLACEHOLDER, TARGET_SCRIPT_PLACEHOLDER):
        count = template.count(placeholder)
        if count != 1:
            raise ValueError(f"Template '{name}' must contain '{placeholder}' once, found {count}")
    return template


class BootstrapRenderer(ABC):
    """Builds the wrapper script text for one execution."""

    syntax: ScriptSyntax
    template_name: str

    def __init__(self, template: Optional[str] = None) -> None:
        self.template = template if template is not None else load_template(self.template_name)

    def render(
        self,
        script_path: str,
        variables: VariableDictionary,
        encryption: AesEncryption,
    ) -> str:
        declarations = []
        for variable in variables.all_raw():
            value = variable.value or ""
            if variable.sensitive:
                ciphertext, iv = encryption.encrypt(value)
                declarations.append(self.declare_sensitive(variable.name, ciphertext, iv))
            else:
                declarations.append(self.declare_plain(variable.name, value))

        # Values are substituted last so their text is never rescanned.
        return (
            self.template
            .replace(TARGET_SCRIPT_PLACEHOLDER, self.invoke_target(os.path.abspath(script_path)))
            .replace(VARIABLE_DECLARATIONS_PLACEHOLDER, "\n".join(declarations))
        )

    @staticmethod
    @abstractmethod
    def quote(value: str) -> str:
        ...

    @abstractmethod
    def declare_plain(self, name: str, value: str) -> str:
        ...

    @abstractmethod
    def declare_sensitive(self, name: str, ciphertext: str, iv: str) -> str:
        ...

    @abstractmethod
    def invoke_target(self, script_path: str) -> str:
        ...


class BashBootstrapRenderer(BootstrapRenderer):
    """Declarations are branches of the ``get_octopusvariable`` case statement."""

    syntax = ScriptSyntax.BASH
    template_name = "bootstrap.sh"

    @staticmethod
    def quote(value: str) -> str:
        return "'" + value.replace("'", "'\"'\"'") + "'"

    def declare_plain(self, name: str, value: str) -> str:
        return f"\t\t{self.quote(name)})\n\t\t\tprintf '%s' {self.quote(value)}\n\t\t;;"

    def declare_sensitive(self, name: str, ciphertext: str, iv: str) -> str:
        return f"\t\t{self.quote(name)})\n\t\t\tdecrypt_variable '{ciphertext}' '{iv}'\n\t\t;;"

    def invoke_target(self, script_path: str) -> str:
        return f". {self.quote(script_path)}"


class PowerShellBootstrapRenderer(BootstrapRenderer):
    """Declarations are entries of the ``$OctopusParameters`` hashtable."""

    syntax = ScriptSyntax.POWERSHELL
    template_name = "bootstrap.ps1"

    @staticmethod
    def quote(value: str) -> str:
        return "'" + value.replace("'", "''") + "'"

    def declare_plain(self, name: str, value: str) -> str:
        return f"$OctopusParameters[{self.quote(name)}] = {self.quote(value)}"

    def declare_sensitive(self, name: str, ciphertext: str, iv: str) -> str:
        return f"$OctopusParameters[{self.quote(name)}] = Decrypt-Variable '{ciphertext}' '{iv}'"

    def invoke_target(self, script_path: str) -> str:
        return f". {self.quote(script_path)}"
