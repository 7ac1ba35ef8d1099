"""
Shared Test Fixtures for Stagehand
====================================

Reusable pytest fixtures used across the test suite, organized by layer:

    1. Configuration fixtures
    2. Infrastructure fixtures (file system with instant retries)
    3. Deployment fixtures (package directory, RunningDeployment)
    4. Integration fixtures (recording command line runner)
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import pytest

from stagehand.core.config import FileRetryConfig, StagehandConfig
from stagehand.core.deployment import RunningDeployment
from stagehand.core.models import CommandLineInvocation, CommandResult
from stagehand.infrastructure.file_system import (
    NixPhysicalFileSystem,
    PhysicalFileSystem,
    WindowsPhysicalFileSystem,
)
from stagehand.integrations.processes.base import CommandLineRunner


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def config(tmp_path: Path) -> StagehandConfig:
    """StagehandConfig with temp files kept inside the test's tmp_path."""
    return StagehandConfig(temp_directory=str(tmp_path / "temp"))


@pytest.fixture
def fast_retry_config() -> FileRetryConfig:
    """A small retry budget with zero backoff."""
    return FileRetryConfig(
        max_retries=3,
        time_limit_seconds=30,
        initial_interval_ms=0,
        steady_interval_ms=0,
    )


# =============================================================================
# Infrastructure
# =============================================================================

def make_file_system(
    tmp_path: Path,
    retry_config: Optional[FileRetryConfig] = None,
    **kwargs,
) -> PhysicalFileSystem:
    file_system_class = WindowsPhysicalFileSystem if sys.platform == "win32" else NixPhysicalFileSystem
    return file_system_class(
        retry_config=retry_config,
        temp_directory=str(tmp_path / "temp"),
        sleep=kwargs.pop("sleep", lambda _seconds: None),
        **kwargs,
    )


@pytest.fixture
def file_system(tmp_path: Path, fast_retry_config: FileRetryConfig) -> PhysicalFileSystem:
    """Host-platform gateway that never actually sleeps between retries."""
    return make_file_system(tmp_path, fast_retry_config)


# =============================================================================
# Deployment
# =============================================================================

@pytest.fixture
def package_directory(tmp_path: Path) -> Path:
    """An empty 'extracted package' directory."""
    directory = tmp_path / "package"
    directory.mkdir()
    return directory


@pytest.fixture
def deployment(package_directory: Path) -> RunningDeployment:
    """RunningDeployment rooted at package_directory."""
    return RunningDeployment(str(package_directory))


# =============================================================================
# Integrations
# =============================================================================

class RecordingCommandLineRunner(CommandLineRunner):
    """Records invocations instead of launching processes.

    The wrapper script is read while the "process" runs, since engines
    delete it as soon as execute() returns.
    """

    def __init__(self, exit_codes: Optional[list[int]] = None) -> None:
        self.exit_codes = list(exit_codes or [])
        self.invocations: list[CommandLineInvocation] = []
        self.wrapper_texts: list[str] = []
        self.wrapper_paths: list[str] = []

    async def execute(self, invocation: CommandLineInvocation) -> CommandResult:
        self.invocations.append(invocation)

        wrapper = self._wrapper_path(invocation)
        self.wrapper_paths.append(wrapper)
        with open(wrapper, encoding="utf-8") as f:
            self.wrapper_texts.append(f.read())

        exit_code = self.exit_codes.pop(0) if self.exit_codes else 0
        return CommandResult(exit_code=exit_code, executable=invocation.executable)

    @staticmethod
    def _wrapper_path(invocation: CommandLineInvocation) -> str:
        if "-File" in invocation.arguments:
            return invocation.arguments[invocation.arguments.index("-File") + 1]
        return invocation.arguments[0]


@pytest.fixture
def recording_runner() -> RecordingCommandLineRunner:
    """Runner that records invocations and always exits 0."""
    return RecordingCommandLineRunner()
