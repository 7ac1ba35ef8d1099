"""
stagehand.integrations.processes.subprocess_runner - asyncio Process Runner
=============================================================================

Spawns the script interpreter with ``asyncio.create_subprocess_exec`` and
drains stdout and stderr concurrently while it runs:

    ┌──────────────┐ stdout chunks ┌──────────────────────┐
    │   process    │ ────────────> │ ServiceMessageParser │──> handler / output
    │              │ stderr chunks ┌──────────────────────┐
    │              │ ────────────> │      LineBuffer      │──> output.write_error
    └──────────────┘               └──────────────────────┘
           │
           └── exit code (read only after both streams hit EOF)

Service messages are applied while the script is still running, so a
variable set early in a script is already in the store when the script
exits.
"""

from __future__ import annotations

import asyncio
import codecs
import os
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from stagehand.core.enums import OutputMode
from stagehand.core.exceptions import ScriptLaunchError
from stagehand.core.models import CommandLineInvocation, CommandResult, ServiceMessage
from stagehand.integrations.processes.base import CommandLineRunner
from stagehand.integrations.processes.command_output import CommandOutput, LoggingCommandOutput
from stagehand.integrations.processes.service_messages import LineBuffer, ServiceMessageParser


logger = structlog.get_logger()


# Bytes requested per read from each pipe.
READ_CHUNK_SIZE = 4096


class SubprocessCommandLineRunner(CommandLineRunner):
    """Runs processes with asyncio and routes their output.

    Attributes:
        output: Sink for plain stdout and all stderr lines.
        on_service_message: Called for every service message on stdout.
    """

    def __init__(
        self,
        output: Optional[CommandOutput] = None,
        on_service_message: Optional[Callable[[ServiceMessage], None]] = None,
        working_directory: Callable[[], str] = os.getcwd,
    ) -> None:
        self.output = output or LoggingCommandOutput()
        self.on_service_message = on_service_message or (lambda _message: None)
        self._working_directory = working_directory
        self._logger = logger.bind(component="command_line_runner")

    async def execute(self, invocation: CommandLineInvocation) -> CommandResult:
        working_directory = invocation.working_directory or self._working_directory()
        environment = None
        if invocation.environment:
            environment = {**os.environ, **invocation.environment}

        # Arguments may carry the decryption key, so only the executable is logged.
        self._logger.debug(
            "process_starting",
            executable=invocation.executable,
            working_directory=working_directory,
        )

        started_at = datetime.now(timezone.utc)
        try:
            process = await asyncio.create_subprocess_exec(
                invocation.executable,
                *invocation.arguments,
                cwd=working_directory,
                env=environment,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError, NotADirectoryError) as e:
            raise ScriptLaunchError(
                message=f"Could not start '{invocation.executable}': {e}",
                executable=invocation.executable,
                details={"working_directory": working_directory},
            ) from e

        parser = ServiceMessageParser(
            on_message=self.on_service_message,
            on_output=self.output.write_info,
        )
        errors = LineBuffer(self.output.write_error)

        try:
            await asyncio.gather(
                self._drain(process.stdout, parser),
                self._drain(process.stderr, errors),
            )
            exit_code = await process.wait()
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise
        finally:
            # A stdout-* marker only lasts until the end of the stream.
            self.output.set_mode(OutputMode.DEFAULT)

        result = CommandResult(
            exit_code=exit_code,
            executable=invocation.executable,
            working_directory=working_directory,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
        )
        self._logger.debug(
            "process_exited",
            executable=invocation.executable,
            exit_code=exit_code,
            duration_seconds=result.duration_seconds,
        )
        return result

    @staticmethod
    async def _drain(stream: asyncio.StreamReader, buffer: LineBuffer) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            buffer.append(decoder.decode(chunk))
        buffer.append(decoder.decode(b"", final=True))
        buffer.finish()
