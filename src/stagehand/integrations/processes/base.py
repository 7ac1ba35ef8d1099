"""
stagehand.integrations.processes.base - Command Line Runner Interface
=======================================================================

Script engines never spawn processes themselves; they describe what to run
as a CommandLineInvocation and hand it to a CommandLineRunner.

    ScriptEngine ──(CommandLineInvocation)──> CommandLineRunner ──> CommandResult

Keeping process launch behind this interface lets engines be exercised with
a recording runner, and lets the production runner own output parsing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stagehand.core.models import CommandLineInvocation, CommandResult


class CommandLineRunner(ABC):
    """Launches one process at a time and reports its exit code."""

    @abstractmethod
    async def execute(self, invocation: CommandLineInvocation) -> CommandResult:
        """Run the process to completion.

        Both output streams are fully drained before this returns.

        Raises:
            ScriptLaunchError: The executable could not be started.
        """
        ...
