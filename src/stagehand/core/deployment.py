"""
stagehand.core.deployment - The Running Deployment
=====================================================

A RunningDeployment is the mutable context threaded through every convention
of one deployment invocation:

    ┌──────────────────────────── RunningDeployment ───────────────────────────┐
    │  package_directory   → where the package was unpacked (never changes)     │
    │  current_directory   → where conventions operate (may be advanced)        │
    │  variables           → the VariableDictionary                             │
    │  artifacts           → append-only list of registered Artifacts           │
    └───────────────────────────────────────────────────────────────────────────┘

It is created once per invocation and passed by reference; nothing in it is
persisted once the process exits.
"""

from __future__ import annotations

import os
from typing import Optional

import structlog

from stagehand.core import special_variables
from stagehand.core.models import Artifact
from stagehand.core.variables import VariableDictionary


logger = structlog.get_logger()


class RunningDeployment:
    """Working directory, variables and artifacts for one deployment.

    Attributes:
        package_directory: Directory the package was extracted to.
        variables: The deployment's VariableDictionary.
        artifacts: Artifacts registered so far, in registration order.
    """

    def __init__(
        self,
        package_directory: str,
        variables: Optional[VariableDictionary] = None,
    ) -> None:
        self.package_directory = os.path.abspath(package_directory)
        self.variables = variables if variables is not None else VariableDictionary()
        self.artifacts: list[Artifact] = []
        self._current_directory = self.package_directory
        self._logger = logger.bind(component="running_deployment")

        self.variables.set(special_variables.ORIGINAL_PACKAGE_DIRECTORY, self.package_directory)
        self.variables.set(special_variables.INSTALLATION_DIRECTORY, self.package_directory)

    @property
    def current_directory(self) -> str:
        """Directory the conventions and scripts currently operate in."""
        return self._current_directory

    def advance_current_directory(self, path: str) -> None:
        """Move the deployment to a new directory (e.g. after a copy)."""
        self._current_directory = os.path.abspath(path)
        self.variables.set(special_variables.INSTALLATION_DIRECTORY, self._current_directory)
        self._logger.info("current_directory_advanced", current_directory=self._current_directory)

    def add_artifact(self, artifact: Artifact) -> None:
        """Append an artifact. Duplicates are kept."""
        self.artifacts.append(artifact)
        self._logger.info(
            "artifact_registered",
            path=artifact.path,
            name=artifact.name,
            length=artifact.length,
        )
