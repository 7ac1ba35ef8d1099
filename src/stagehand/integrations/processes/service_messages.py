"""
stagehand.integrations.processes.service_messages - Service Message Protocol
==============================================================================

Scripts talk back to Stagehand by printing control lines on stdout:

    ##octopus[setVariable name='Rm9v' value='QmFy']
    ##octopus[createArtifact path='L3RtcC9yZXBvcnQudHh0' name='cmVwb3J0LnR4dA==' length='MTI=']
    ##octopus[stdout-verbose]

Every attribute value is the base64 encoding of UTF-8 text. A control line
is either fully understood or treated as ordinary output; it never raises.

Parsing Pipeline:

    process stdout chunks
          │
          ▼
    ┌──────────────┐  complete lines   ┌──────────────────────┐
    │  LineBuffer  │ ────────────────> │ ServiceMessageParser │
    └──────────────┘                   └──────────┬───────────┘
                                   ServiceMessage │      │ plain line
                                                  ▼      ▼
                              ServiceMessageHandler    CommandOutput
                              (variables, artifacts,   (logged at the
                               output mode)             active severity)

Chunks may split a line anywhere; nothing is emitted until the line
terminator arrives (or ``finish()`` flushes the trailing partial line).
"""

from __future__ import annotations

import base64
import binascii
import os
import re
from typing import Callable, Optional

import structlog

from stagehand.core.deployment import RunningDeployment
from stagehand.core.enums import OutputMode
from stagehand.core.models import Artifact, ServiceMessage
from stagehand.integrations.processes.command_output import CommandOutput


logger = structlog.get_logger()


SERVICE_MESSAGE_PREFIX = "##octopus["

_MESSAGE = re.compile(
    r"^##octopus\[(?P<name>[A-Za-z][\w\-]*)(?P<attributes>(?:\s+[\w\-]+='[^']*')*)\s*\]$"
)
_ATTRIBUTE = re.compile(r"([\w\-]+)='([^']*)'")


# =============================================================================
# Tag names
# =============================================================================
SET_VARIABLE = "setVariable"
CREATE_ARTIFACT = "createArtifact"
STDOUT_VERBOSE = "stdout-verbose"
STDOUT_WARNING = "stdout-warning"
STDOUT_DEFAULT = "stdout-default"

_OUTPUT_MODES = {
    STDOUT_VERBOSE: OutputMode.VERBOSE,
    STDOUT_WARNING: OutputMode.WARNING,
    STDOUT_DEFAULT: OutputMode.DEFAULT,
}


def encode_service_message_value(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def format_service_message(tag: str, /, **properties: str) -> str:
    """Build a control line, e.g. ``format_service_message("setVariable", name="Foo", value="Bar")``."""
    attributes = "".join(
        f" {key}='{encode_service_message_value(value)}'" for key, value in properties.items()
    )
    return f"{SERVICE_MESSAGE_PREFIX}{tag}{attributes}]"


def parse_service_message(line: str) -> Optional[ServiceMessage]:
    """Parse one control line. Returns None when the line is malformed."""
    match = _MESSAGE.match(line.strip())
    if match is None:
        return None

    properties: dict[str, str] = {}
    for key, encoded in _ATTRIBUTE.findall(match.group("attributes")):
        try:
            properties[key] = base64.b64decode(encoded, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None

    return ServiceMessage(name=match.group("name"), properties=properties)


# =============================================================================
# Line Buffer
# =============================================================================
class LineBuffer:
    """Accumulates text chunks and emits complete lines.

    Lines end at ``\\n``; a ``\\r`` right before it is dropped.
    """

    def __init__(self, on_line: Callable[[str], None]) -> None:
        self._on_line = on_line
        self._pending = ""

    def append(self, text: str) -> None:
        self._pending += text
        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            self._emit(line)

    def finish(self) -> None:
        """Flush whatever is left after the last line terminator."""
        if self._pending:
            pending, self._pending = self._pending, ""
            self._emit(pending)

    def _emit(self, line: str) -> None:
        self._on_line(line[:-1] if line.endswith("\r") else line)


# =============================================================================
# Service Message Parser
# =============================================================================
class ServiceMessageParser(LineBuffer):
    """Splits script stdout into service messages and plain output.

    Each complete line goes to exactly one of the two callbacks.

    Attributes:
        on_message: Receives every well-formed ServiceMessage.
        on_output: Receives every other line, including malformed control lines.
    """

    def __init__(
        self,
        on_message: Callable[[ServiceMessage], None],
        on_output: Callable[[str], None],
    ) -> None:
        super().__init__(self._handle_line)
        self.on_message = on_message
        self.on_output = on_output

    def _handle_line(self, line: str) -> None:
        if SERVICE_MESSAGE_PREFIX not in line:
            self.on_output(line)
            return

        message = parse_service_message(line)
        if message is None:
            logger.debug("service_message_malformed", line=line)
            self.on_output(line)
            return

        self.on_message(message)


# =============================================================================
# Service Message Handler
# =============================================================================
class ServiceMessageHandler:
    """Applies parsed service messages to a running deployment.

    ``setVariable`` upserts into the deployment's variables (visible to every
    later script), ``createArtifact`` appends to its artifacts, and the
    ``stdout-*`` tags switch the severity of subsequent plain output.
    """

    def __init__(self, deployment: RunningDeployment, output: CommandOutput) -> None:
        self.deployment = deployment
        self.output = output
        self._logger = logger.bind(component="service_message_handler")

    def handle(self, message: ServiceMessage) -> None:
        if message.name == SET_VARIABLE:
            self._set_variable(message)
        elif message.name == CREATE_ARTIFACT:
            self._create_artifact(message)
        elif message.name in _OUTPUT_MODES:
            self.output.set_mode(_OUTPUT_MODES[message.name])
        else:
            self._logger.debug("service_message_ignored", name=message.name)

    def _set_variable(self, message: ServiceMessage) -> None:
        name = message.get("name")
        if not name:
            self._logger.debug("service_message_ignored", name=message.name, reason="missing name")
            return
        self.deployment.variables.set(name, message.get("value"))
        self._logger.info("output_variable_set", variable=name)

    def _create_artifact(self, message: ServiceMessage) -> None:
        path = message.get("path")
        if not path:
            self._logger.debug("service_message_ignored", name=message.name, reason="missing path")
            return

        length = message.get("length", "0") or "0"
        try:
            size = max(int(length.strip()), 0)
        except ValueError:
            size = 0

        self.deployment.add_artifact(Artifact(
            path=path,
            name=message.get("name") or os.path.basename(path),
            length=size,
        ))
