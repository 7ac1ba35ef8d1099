"""
stagehand.integrations.processes.command_output - Script Output Sinks
=======================================================================

Plain script output (anything that is not a service message) ends up in a
CommandOutput. The active OutputMode, switched by the ``stdout-verbose``,
``stdout-warning`` and ``stdout-default`` service messages, decides the
severity each stdout line is recorded with. stderr is always an error.

Implementations:
    - LoggingCommandOutput:  structlog, one event per line (production)
    - CapturedCommandOutput: keeps lines in memory for later inspection
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

from stagehand.core.enums import OutputMode


logger = structlog.get_logger()


class CommandOutput(ABC):
    """Receives plain script output, one line at a time."""

    def __init__(self) -> None:
        self.mode = OutputMode.DEFAULT

    def set_mode(self, mode: OutputMode) -> None:
        self.mode = mode

    @abstractmethod
    def write_info(self, line: str) -> None:
        """A stdout line, recorded at the severity of the current mode."""
        ...

    @abstractmethod
    def write_error(self, line: str) -> None:
        """A stderr line."""
        ...


class LoggingCommandOutput(CommandOutput):
    """Forwards script output to structlog."""

    def __init__(self) -> None:
        super().__init__()
        self._logger = logger.bind(component="script_output")

    def write_info(self, line: str) -> None:
        if self.mode == OutputMode.VERBOSE:
            self._logger.debug("script_output", line=line)
        elif self.mode == OutputMode.WARNING:
            self._logger.warning("script_output", line=line)
        else:
            self._logger.info("script_output", line=line)

    def write_error(self, line: str) -> None:
        self._logger.error("script_error_output", line=line)


class CapturedCommandOutput(CommandOutput):
    """Keeps every line, tagged with the mode it was written under."""

    def __init__(self) -> None:
        super().__init__()
        self.infos: list[tuple[OutputMode, str]] = []
        self.errors: list[str] = []

    def write_info(self, line: str) -> None:
        self.infos.append((self.mode, line))

    def write_error(self, line: str) -> None:
        self.errors.append(line)

    @property
    def lines(self) -> list[str]:
        return [line for _mode, line in self.infos]
