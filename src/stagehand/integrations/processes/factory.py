"""
stagehand.integrations.processes.factory - Runner Factory
===========================================================

Usage:
    >>> deployment = RunningDeployment("/opt/packages/web-1.0.0")
    >>> runner = create_command_line_runner(deployment)
    >>> result = await runner.execute(CommandLineInvocation(executable="bash", arguments=["-c", "true"]))
"""

from __future__ import annotations

from typing import Optional

from stagehand.core.deployment import RunningDeployment
from stagehand.integrations.processes.base import CommandLineRunner
from stagehand.integrations.processes.command_output import CommandOutput, LoggingCommandOutput
from stagehand.integrations.processes.service_messages import ServiceMessageHandler
from stagehand.integrations.processes.subprocess_runner import SubprocessCommandLineRunner


def create_command_line_runner(
    deployment: RunningDeployment,
    output: Optional[CommandOutput] = None,
) -> CommandLineRunner:
    """Create a runner wired to one deployment.

    Service messages update ``deployment``'s variables and artifacts, and
    processes launched without an explicit working directory run in the
    deployment's current directory at launch time.
    """
    output = output or LoggingCommandOutput()
    handler = ServiceMessageHandler(deployment, output)

    return SubprocessCommandLineRunner(
        output=output,
        on_service_message=handler.handle,
        working_directory=lambda: deployment.current_directory,
    )
