"""
End-to-End Integration Tests for Stagehand
============================================

These tests run the full pipeline from DeploymentExecutor down to a real
bash process. Unlike the unit tests (which stand in for the interpreter),
they verify that the rendered bootstrap, the runner and the service message
handler work together.

Test Scenarios:
    1. Output variables set by one script are visible to the next
    2. Sensitive variables decrypt inside the script
    3. A non-zero exit aborts the pipeline naming the script and exit code
    4. Artifacts registered from a script
    5. Custom installation directory: scripts run in the new location

Requires bash and openssl on PATH; skipped otherwise.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from stagehand.core import special_variables
from stagehand.core.config import StagehandConfig
from stagehand.core.deployment import RunningDeployment
from stagehand.core.exceptions import ConventionError
from stagehand.facade import DeploymentExecutor
from stagehand.infrastructure.file_system import NixPhysicalFileSystem
from stagehand.integrations.processes.command_output import CapturedCommandOutput
from stagehand.integrations.processes.factory import create_command_line_runner
from stagehand.integrations.scripting.bash import BashScriptEngine
from stagehand.integrations.scripting.certificate_context import ClientCertificateScriptEngine
from stagehand.integrations.scripting.combined import CombinedScriptEngine
from stagehand.orchestration.convention_processor import ConventionProcessor


pytestmark = pytest.mark.skipif(
    shutil.which("bash") is None or shutil.which("openssl") is None,
    reason="bash and openssl are required",
)


# =============================================================================
# Fixtures
# =============================================================================
class RoomyFileSystem(NixPhysicalFileSystem):
    def get_disk_free_space(self, directory_path: str):
        return None


@pytest.fixture
def output() -> CapturedCommandOutput:
    return CapturedCommandOutput()


@pytest.fixture
def executor(tmp_path: Path, fast_retry_config, output: CapturedCommandOutput) -> DeploymentExecutor:
    config = StagehandConfig(temp_directory=str(tmp_path / "temp"), file_retry=fast_retry_config)
    file_system = RoomyFileSystem(fast_retry_config, config.temp_directory, sleep=lambda _s: None)
    engine = ClientCertificateScriptEngine(CombinedScriptEngine([BashScriptEngine(file_system)]), file_system)
    return DeploymentExecutor(
        config,
        file_system=file_system,
        script_engine=engine,
        output=output,
        configure_logs=False,
    )


def _script(directory: Path, name: str, body: str) -> None:
    (directory / name).write_text(body)


async def _run(executor: DeploymentExecutor, deployment: RunningDeployment, output: CapturedCommandOutput) -> None:
    """Run the default pipeline, raising instead of returning an exit code."""
    runner = create_command_line_runner(deployment, output)
    await ConventionProcessor(deployment, executor.build_conventions(deployment, runner)).run_conventions()


# =============================================================================
# Scenario 1: Output variables
# =============================================================================
class TestOutputVariables:
    async def test_raw_service_message_sets_variable(
        self, executor: DeploymentExecutor, package_directory: Path
    ) -> None:
        _script(package_directory, "Deploy.sh", "echo \"##octopus[setVariable name='Rm9v' value='QmFy']\"\n")
        deployment = executor.create_deployment(str(package_directory))

        assert await executor.execute(deployment) == 0

        assert deployment.variables.get("Foo") == "Bar"

    async def test_variables_flow_between_stages(
        self, executor: DeploymentExecutor, package_directory: Path, output: CapturedCommandOutput
    ) -> None:
        _script(package_directory, "PreDeploy.sh", 'set_octopusvariable "Build" "42"\n')
        _script(package_directory, "Deploy.sh", 'echo "build=$(get_octopusvariable "build")"\n')
        _script(
            package_directory,
            "PostDeploy.sh",
            'echo "env=$(get_octopusvariable "ENVIRONMENT") quote=$(get_octopusvariable "Quote")"\n',
        )
        deployment = executor.create_deployment(
            str(package_directory),
            variables={"Environment": "Production", "Quote": "it's fine"},
        )

        assert await executor.execute(deployment) == 0

        assert "build=42" in output.lines
        assert "env=Production quote=it's fine" in output.lines
        assert deployment.variables.get("Build") == "42"


# =============================================================================
# Scenario 2: Sensitive variables
# =============================================================================
class TestSensitiveVariables:
    async def test_sensitive_value_readable_in_script(
        self, executor: DeploymentExecutor, package_directory: Path, output: CapturedCommandOutput
    ) -> None:
        _script(package_directory, "Deploy.sh", 'echo "secret=$(get_octopusvariable "Password")"\n')
        deployment = executor.create_deployment(
            str(package_directory),
            sensitive_variables={"Password": "p@ss w0rd'!"},
        )

        assert await executor.execute(deployment) == 0

        assert "secret=p@ss w0rd'!" in output.lines


# =============================================================================
# Scenario 3: Failure
# =============================================================================
class TestScriptFailure:
    async def test_non_zero_exit_aborts_pipeline(
        self, executor: DeploymentExecutor, package_directory: Path, output: CapturedCommandOutput
    ) -> None:
        _script(package_directory, "PreDeploy.sh", "echo failing >&2\nexit 3\n")
        _script(package_directory, "Deploy.sh", "echo should-not-run\n")
        deployment = executor.create_deployment(str(package_directory))

        with pytest.raises(ConventionError) as exc_info:
            await _run(executor, deployment, output)

        error = exc_info.value
        assert error.error_code == "SCRIPT_FAILED"
        assert error.details["exit_code"] == 3
        assert error.details["script_path"] == str(package_directory / "PreDeploy.sh")
        assert error.details["convention"] == "PackagedScript(PreDeploy)"
        assert "should-not-run" not in output.lines
        assert output.errors == ["failing"]

    async def test_failure_exit_code_from_executor(
        self, executor: DeploymentExecutor, package_directory: Path
    ) -> None:
        _script(package_directory, "Deploy.sh", "false\n")
        assert await executor.run(str(package_directory)) == 1


# =============================================================================
# Scenario 4: Artifacts
# =============================================================================
class TestArtifacts:
    async def test_new_octopusartifact(
        self, executor: DeploymentExecutor, package_directory: Path
    ) -> None:
        _script(
            package_directory,
            "Deploy.sh",
            'printf "hello world" > report.txt\nnew_octopusartifact "$(pwd)/report.txt"\n',
        )
        deployment = executor.create_deployment(str(package_directory))

        assert await executor.execute(deployment) == 0

        [artifact] = deployment.artifacts
        assert artifact.name == "report.txt"
        assert artifact.length == len("hello world")
        assert Path(artifact.path).resolve() == (package_directory / "report.txt").resolve()


# =============================================================================
# Scenario 5: Custom installation directory
# =============================================================================
class TestCustomInstallationDirectory:
    async def test_scripts_run_in_installation_directory(
        self, executor: DeploymentExecutor, package_directory: Path, tmp_path: Path,
        output: CapturedCommandOutput,
    ) -> None:
        target = tmp_path / "install"
        _script(package_directory, "Deploy.sh", "echo \"cwd=$(pwd)\"\n")
        (package_directory / "app.txt").write_text("app")
        deployment = executor.create_deployment(
            str(package_directory),
            variables={special_variables.CUSTOM_INSTALLATION_DIRECTORY: str(target)},
        )

        assert await executor.execute(deployment) == 0

        assert (target / "app.txt").exists()
        assert not (target / "Deploy.sh").exists()
        assert (package_directory / "Deploy.sh").exists()
        assert f"cwd={target.resolve()}" in [
            f"cwd={Path(line[4:]).resolve()}" for line in output.lines if line.startswith("cwd=")
        ]
