"""
stagehand.orchestration.conventions.custom_installation_directory
====================================================================

Copies the extracted package to a user-chosen installation directory and
moves the deployment there, so later conventions and scripts run in it.

Variables:
    Stagehand.Action.Package.CustomInstallationDirectory
        Absolute target path. Unset or empty: the convention does nothing.
    Stagehand.Action.Package.CustomInstallationDirectoryShouldBePurgedBeforeDeployment
        "True" to empty the target before copying.
    Stagehand.Action.Package.CustomInstallationDirectoryPurgeExclusions
        Newline-separated glob patterns of files to keep during the purge,
        matched against the path relative to the target and the file name.
"""

from __future__ import annotations

import fnmatch
import os
from typing import Optional

import structlog

from stagehand.core import special_variables
from stagehand.core.config import MINIMUM_FREE_DISK_SPACE_BYTES
from stagehand.core.deployment import RunningDeployment
from stagehand.core.enums import FailureOptions
from stagehand.core.exceptions import ConfigurationError
from stagehand.infrastructure.file_system import (
    CancellationSignal,
    FileInfo,
    PhysicalFileSystem,
)
from stagehand.orchestration.convention_processor import Convention


logger = structlog.get_logger()


class CopyPackageToCustomInstallationDirectoryConvention(Convention):
    def __init__(
        self,
        file_system: PhysicalFileSystem,
        required_free_space_bytes: int = MINIMUM_FREE_DISK_SPACE_BYTES,
        cancel: Optional[CancellationSignal] = None,
    ) -> None:
        self.file_system = file_system
        self.required_free_space_bytes = required_free_space_bytes
        self.cancel = cancel
        self._logger = logger.bind(component="custom_installation_directory")

    async def install(self, deployment: RunningDeployment) -> None:
        variables = deployment.variables
        custom_directory = variables.get(special_variables.CUSTOM_INSTALLATION_DIRECTORY)
        if not custom_directory or not custom_directory.strip():
            self._logger.debug("custom_installation_directory_not_set")
            return

        custom_directory = custom_directory.strip()
        if not os.path.isabs(custom_directory):
            raise ConfigurationError(
                message=(
                    f"The custom install directory '{custom_directory}' is a relative path, "
                    f"please specify the path as an absolute path"
                ),
                error_code="RELATIVE_INSTALLATION_DIRECTORY",
                details={"path": custom_directory},
            )

        if os.path.normcase(os.path.abspath(custom_directory)) == os.path.normcase(deployment.current_directory):
            self._logger.info("custom_installation_directory_is_current", path=custom_directory)
            return

        self.file_system.ensure_directory_exists(custom_directory)

        if variables.get_flag(special_variables.PURGE_CUSTOM_INSTALLATION_DIRECTORY):
            exclusions = parse_exclusions(variables.get(special_variables.PURGE_EXCLUSIONS))
            self._logger.info(
                "custom_installation_directory_purging",
                path=custom_directory,
                exclusions=exclusions,
            )
            self.file_system.purge_directory(
                custom_directory,
                include=build_purge_predicate(custom_directory, exclusions),
                options=FailureOptions.THROW_ON_FAILURE,
                cancel=self.cancel,
            )

        self.file_system.ensure_disk_has_enough_free_space(
            custom_directory,
            self.required_free_space_bytes,
        )

        copied = self.file_system.copy_directory(
            deployment.current_directory,
            custom_directory,
            self.cancel,
        )
        self._logger.info(
            "package_copied",
            source=deployment.current_directory,
            target=custom_directory,
            files=copied,
        )

        deployment.advance_current_directory(custom_directory)


def parse_exclusions(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [line.strip() for line in value.splitlines() if line.strip()]


def build_purge_predicate(root: str, exclusions: list[str]):
    """Predicate that deletes every file except those matching an exclusion."""
    if not exclusions:
        return None

    def include(file: FileInfo) -> bool:
        relative = os.path.relpath(file.path, root).replace(os.sep, "/")
        return not any(
            fnmatch.fnmatch(relative, pattern) or fnmatch.fnmatch(file.name, pattern)
            for pattern in exclusions
        )

    return include
