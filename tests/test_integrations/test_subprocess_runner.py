"""
Tests for stagehand.integrations.processes.subprocess_runner
==============================================================

What's Being Tested:
    - Exit codes, stdout routing and stderr routing
    - Service messages applied while the process runs
    - Working directory resolution (explicit vs. resolver callable)
    - Environment overlay
    - Output mode set by a script does not carry over to the next one
    - Launch failures surface as ScriptLaunchError

These tests spawn real processes and need bash on PATH.
"""

import shutil
from pathlib import Path

import pytest

from stagehand.core.deployment import RunningDeployment
from stagehand.core.enums import OutputMode
from stagehand.core.exceptions import ScriptLaunchError
from stagehand.core.models import CommandLineInvocation, ServiceMessage
from stagehand.integrations.processes.command_output import CapturedCommandOutput
from stagehand.integrations.processes.factory import create_command_line_runner
from stagehand.integrations.processes.subprocess_runner import SubprocessCommandLineRunner


pytestmark = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not installed")


def _bash(command: str, **kwargs) -> CommandLineInvocation:
    return CommandLineInvocation(executable="bash", arguments=["-c", command], **kwargs)


class TestSubprocessCommandLineRunner:
    async def test_exit_code_and_output(self) -> None:
        output = CapturedCommandOutput()
        runner = SubprocessCommandLineRunner(output=output)

        result = await runner.execute(_bash("echo out; echo err >&2; exit 4"))

        assert result.exit_code == 4
        assert result.executable == "bash"
        assert result.completed_at >= result.started_at
        assert output.lines == ["out"]
        assert output.errors == ["err"]

    async def test_trailing_line_without_newline_is_kept(self) -> None:
        output = CapturedCommandOutput()
        runner = SubprocessCommandLineRunner(output=output)

        await runner.execute(_bash("printf 'first\\nlast'"))

        assert output.lines == ["first", "last"]

    async def test_service_messages_routed_to_callback(self) -> None:
        output = CapturedCommandOutput()
        messages: list[ServiceMessage] = []
        runner = SubprocessCommandLineRunner(output=output, on_service_message=messages.append)

        await runner.execute(_bash(
            "echo before; echo \"##octopus[setVariable name='Rm9v' value='QmFy']\"; echo after"
        ))

        assert [m.properties for m in messages] == [{"name": "Foo", "value": "Bar"}]
        assert output.lines == ["before", "after"]

    async def test_large_output_does_not_deadlock(self) -> None:
        output = CapturedCommandOutput()
        runner = SubprocessCommandLineRunner(output=output)

        result = await runner.execute(_bash(
            "for i in $(seq 1 5000); do echo line-$i; echo err-$i >&2; done"
        ))

        assert result.exit_code == 0
        assert len(output.lines) == 5000
        assert len(output.errors) == 5000
        assert output.lines[-1] == "line-5000"

    async def test_working_directory_resolver(self, tmp_path: Path) -> None:
        output = CapturedCommandOutput()
        current = {"directory": str(tmp_path)}
        runner = SubprocessCommandLineRunner(output=output, working_directory=lambda: current["directory"])

        await runner.execute(_bash("pwd"))
        other = tmp_path / "other"
        other.mkdir()
        current["directory"] = str(other)
        result = await runner.execute(_bash("pwd"))

        assert [Path(line).resolve() for line in output.lines] == [tmp_path.resolve(), other.resolve()]
        assert result.working_directory == str(other)

    async def test_explicit_working_directory_wins(self, tmp_path: Path) -> None:
        output = CapturedCommandOutput()
        runner = SubprocessCommandLineRunner(output=output, working_directory=lambda: "/")

        await runner.execute(_bash("pwd", working_directory=str(tmp_path)))

        assert Path(output.lines[0]).resolve() == tmp_path.resolve()

    async def test_environment_overlay(self) -> None:
        output = CapturedCommandOutput()
        runner = SubprocessCommandLineRunner(output=output)

        await runner.execute(_bash(
            "echo \"$STAGEHAND_TEST_VALUE\"; test -n \"$PATH\" && echo has-path",
            environment={"STAGEHAND_TEST_VALUE": "overlay"},
        ))

        assert output.lines == ["overlay", "has-path"]

    async def test_missing_executable_raises_launch_error(self) -> None:
        runner = SubprocessCommandLineRunner(output=CapturedCommandOutput())

        with pytest.raises(ScriptLaunchError) as exc_info:
            await runner.execute(CommandLineInvocation(executable="stagehand-no-such-interpreter"))

        assert exc_info.value.error_code == "SCRIPT_LAUNCH_FAILED"
        assert exc_info.value.details["executable"] == "stagehand-no-such-interpreter"

    async def test_missing_working_directory_raises_launch_error(self, tmp_path: Path) -> None:
        runner = SubprocessCommandLineRunner(output=CapturedCommandOutput())

        with pytest.raises(ScriptLaunchError):
            await runner.execute(_bash("true", working_directory=str(tmp_path / "missing")))


class TestCreateCommandLineRunner:
    async def test_runner_updates_deployment(self, package_directory: Path) -> None:
        deployment = RunningDeployment(str(package_directory))
        output = CapturedCommandOutput()
        runner = create_command_line_runner(deployment, output)

        await runner.execute(_bash(
            "pwd; echo \"##octopus[setVariable name='Rm9v' value='QmFy']\"; echo '##octopus[stdout-warning]'; echo loud"
        ))

        assert deployment.variables.get("Foo") == "Bar"
        assert Path(output.lines[0]).resolve() == package_directory.resolve()
        assert output.infos[-1] == ("warning", "loud")

    async def test_output_mode_ends_with_the_script(self, package_directory: Path) -> None:
        deployment = RunningDeployment(str(package_directory))
        output = CapturedCommandOutput()
        runner = create_command_line_runner(deployment, output)

        await runner.execute(_bash("echo '##octopus[stdout-verbose]'; echo first"))
        await runner.execute(_bash("echo second"))

        assert output.infos == [(OutputMode.VERBOSE, "first"), (OutputMode.DEFAULT, "second")]
        assert output.mode == OutputMode.DEFAULT

    async def test_output_mode_reset_after_failed_script(self, package_directory: Path) -> None:
        deployment = RunningDeployment(str(package_directory))
        output = CapturedCommandOutput()
        runner = create_command_line_runner(deployment, output)

        result = await runner.execute(_bash("echo '##octopus[stdout-warning]'; exit 2"))

        assert result.exit_code == 2
        assert output.mode == OutputMode.DEFAULT
