"""
stagehand.integrations.processes - Process Launch and Service Messages
========================================================================

    - base:               CommandLineRunner interface
    - subprocess_runner:  asyncio implementation
    - service_messages:   ##octopus[...] parser and deployment handler
    - command_output:     where plain script output goes
    - factory:            create_command_line_runner(deployment)
"""

from stagehand.integrations.processes.base import CommandLineRunner
from stagehand.integrations.processes.command_output import (
    CapturedCommandOutput,
    CommandOutput,
    LoggingCommandOutput,
)
from stagehand.integrations.processes.factory import create_command_line_runner
from stagehand.integrations.processes.service_messages import (
    LineBuffer,
    ServiceMessageHandler,
    ServiceMessageParser,
    format_service_message,
    parse_service_message,
)
from stagehand.integrations.processes.subprocess_runner import SubprocessCommandLineRunner

__all__ = [
    "CommandLineRunner",
    "SubprocessCommandLineRunner",
    "CommandOutput",
    "LoggingCommandOutput",
    "CapturedCommandOutput",
    "LineBuffer",
    "ServiceMessageParser",
    "ServiceMessageHandler",
    "format_service_message",
    "parse_service_message",
    "create_command_line_runner",
]
