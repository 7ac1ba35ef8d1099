"""
Tests for stagehand.orchestration.conventions.custom_installation_directory
=============================================================================

What's Being Tested:
    - Unset directory: nothing happens
    - Relative directory: ConfigurationError
    - Copy, then the deployment moves to the new directory
    - Purge before copy, honoring exclusions
    - Disk space floor checked before copying
    - Exclusion parsing and the purge predicate
"""

from pathlib import Path
from typing import Optional

import pytest

from stagehand.core import special_variables
from stagehand.core.deployment import RunningDeployment
from stagehand.core.exceptions import ConfigurationError, PermanentIOError
from stagehand.infrastructure.file_system import FileInfo, NixPhysicalFileSystem
from stagehand.orchestration.conventions.custom_installation_directory import (
    CopyPackageToCustomInstallationDirectoryConvention,
    build_purge_predicate,
    parse_exclusions,
)


MB = 1024 * 1024


class LowDiskFileSystem(NixPhysicalFileSystem):
    def get_disk_free_space(self, directory_path: str) -> Optional[int]:
        return 400 * MB


class RoomyFileSystem(NixPhysicalFileSystem):
    def get_disk_free_space(self, directory_path: str) -> Optional[int]:
        return None


@pytest.fixture
def file_system(tmp_path: Path, fast_retry_config) -> RoomyFileSystem:
    """Gateway that never reports low disk space, whatever the test host has."""
    return RoomyFileSystem(fast_retry_config, str(tmp_path / "temp"), sleep=lambda _s: None)


def _package(package_directory: Path) -> None:
    (package_directory / "app.dll").write_text("binary")
    (package_directory / "Deploy.sh").write_text("echo\n")
    (package_directory / "config").mkdir()
    (package_directory / "config" / "settings.json").write_text("{}")


class TestCustomInstallationDirectory:
    async def test_unset_does_nothing(self, file_system, deployment: RunningDeployment) -> None:
        before = deployment.current_directory

        await CopyPackageToCustomInstallationDirectoryConvention(file_system).install(deployment)

        assert deployment.current_directory == before

    async def test_relative_path_rejected(self, file_system, deployment: RunningDeployment) -> None:
        deployment.variables.set(special_variables.CUSTOM_INSTALLATION_DIRECTORY, "relative/app")

        with pytest.raises(ConfigurationError) as exc_info:
            await CopyPackageToCustomInstallationDirectoryConvention(file_system).install(deployment)

        assert exc_info.value.error_code == "RELATIVE_INSTALLATION_DIRECTORY"

    async def test_copies_and_advances(
        self, file_system, deployment: RunningDeployment, package_directory: Path, tmp_path: Path
    ) -> None:
        _package(package_directory)
        target = tmp_path / "install" / "app"
        deployment.variables.set(special_variables.CUSTOM_INSTALLATION_DIRECTORY, str(target))

        await CopyPackageToCustomInstallationDirectoryConvention(file_system, 0).install(deployment)

        assert (target / "config" / "settings.json").read_text() == "{}"
        assert (package_directory / "app.dll").exists()
        assert deployment.current_directory == str(target)
        assert deployment.variables.get(special_variables.INSTALLATION_DIRECTORY) == str(target)
        assert deployment.package_directory == str(package_directory)

    async def test_same_as_current_directory_is_noop(
        self, file_system, deployment: RunningDeployment, package_directory: Path
    ) -> None:
        _package(package_directory)
        deployment.variables.set(special_variables.CUSTOM_INSTALLATION_DIRECTORY, str(package_directory))

        await CopyPackageToCustomInstallationDirectoryConvention(file_system, 0).install(deployment)

        assert deployment.current_directory == str(package_directory)

    async def test_existing_files_kept_without_purge(
        self, file_system, deployment: RunningDeployment, package_directory: Path, tmp_path: Path
    ) -> None:
        _package(package_directory)
        target = tmp_path / "install"
        target.mkdir()
        (target / "old.txt").write_text("old")
        deployment.variables.set(special_variables.CUSTOM_INSTALLATION_DIRECTORY, str(target))

        await CopyPackageToCustomInstallationDirectoryConvention(file_system, 0).install(deployment)

        assert (target / "old.txt").exists()

    async def test_purge_honors_exclusions(
        self, file_system, deployment: RunningDeployment, package_directory: Path, tmp_path: Path
    ) -> None:
        _package(package_directory)
        target = tmp_path / "install"
        (target / "logs").mkdir(parents=True)
        (target / "logs" / "today.log").write_text("keep")
        (target / "old.txt").write_text("old")
        (target / "web.config").write_text("keep")

        variables = deployment.variables
        variables.set(special_variables.CUSTOM_INSTALLATION_DIRECTORY, str(target))
        variables.set(special_variables.PURGE_CUSTOM_INSTALLATION_DIRECTORY, "True")
        variables.set(special_variables.PURGE_EXCLUSIONS, "logs/*\n\n  web.config  \n")

        await CopyPackageToCustomInstallationDirectoryConvention(file_system, 0).install(deployment)

        assert not (target / "old.txt").exists()
        assert (target / "logs" / "today.log").exists()
        assert (target / "web.config").exists()
        assert (target / "app.dll").exists()

    async def test_insufficient_disk_space_stops_before_copy(
        self, deployment: RunningDeployment, package_directory: Path, tmp_path: Path, fast_retry_config
    ) -> None:
        _package(package_directory)
        file_system = LowDiskFileSystem(fast_retry_config, str(tmp_path / "temp"), sleep=lambda _s: None)
        target = tmp_path / "install"
        deployment.variables.set(special_variables.CUSTOM_INSTALLATION_DIRECTORY, str(target))

        with pytest.raises(PermanentIOError) as exc_info:
            await CopyPackageToCustomInstallationDirectoryConvention(file_system, 100 * MB).install(deployment)

        assert exc_info.value.error_code == "INSUFFICIENT_DISK_SPACE"
        assert not (target / "app.dll").exists()
        assert deployment.current_directory == str(package_directory)


class TestExclusions:
    def test_parse_exclusions(self) -> None:
        assert parse_exclusions(None) == []
        assert parse_exclusions("") == []
        assert parse_exclusions("a\r\n  b/*.log \n\n") == ["a", "b/*.log"]

    def test_no_exclusions_means_delete_everything(self) -> None:
        assert build_purge_predicate("/opt/app", []) is None

    def test_predicate_matches_relative_path_or_name(self, tmp_path: Path) -> None:
        (tmp_path / "logs").mkdir()
        log = tmp_path / "logs" / "today.log"
        log.write_text("x")
        other = tmp_path / "app.dll"
        other.write_text("x")

        by_path = build_purge_predicate(str(tmp_path), ["logs/*"])
        by_name = build_purge_predicate(str(tmp_path), ["*.log"])

        assert by_path(FileInfo(str(log))) is False
        assert by_path(FileInfo(str(other))) is True
        assert by_name(FileInfo(str(log))) is False
