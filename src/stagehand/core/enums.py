"""
stagehand.core.enums - Type-Safe Enumerations
===============================================

This module defines the enumeration types shared across Stagehand.

All enums inherit from both `str` and `Enum`, which means:
    - They serialize to strings in JSON/YAML (Pydantic-friendly)
    - They can be compared with plain strings: FailureOptions.IGNORE_FAILURE == "ignore"
    - They have human-readable representations

Architecture Mapping:
    ┌─────────────────────────────────────────────────────────────────┐
    │  FILE-SYSTEM GATEWAY                                            │
    │    FailureOptions: abort vs. swallow after retries run out      │
    ├─────────────────────────────────────────────────────────────────┤
    │  SCRIPT ENGINES                                                 │
    │    ScriptSyntax: Script families and their file extensions      │
    ├─────────────────────────────────────────────────────────────────┤
    │  SERVICE MESSAGES                                               │
    │    OutputMode: Severity of plain script output lines            │
    └─────────────────────────────────────────────────────────────────┘
"""

from enum import Enum


# =============================================================================
# Failure Options
# =============================================================================
# Selected per call site for retrying file operations:
#
#   THROW_ON_FAILURE → raise PermanentIOError once the RetryTracker gives up
#   IGNORE_FAILURE   → log the failure and carry on (best-effort cleanup)
# =============================================================================
class FailureOptions(str, Enum):
    """What a retrying file operation does once retries are exhausted.

    Usage:
        >>> file_system.delete_file(path, FailureOptions.IGNORE_FAILURE)
    """

    THROW_ON_FAILURE = "throw"    # Surface the error to the caller
    IGNORE_FAILURE = "ignore"     # Log and swallow the error


# =============================================================================
# Script Syntax
# =============================================================================
# One member per script family the engines understand. The value is the
# file extension (without the leading dot) used to discover scripts.
# =============================================================================
class ScriptSyntax(str, Enum):
    """Script families supported by the bundled script engines."""

    BASH = "sh"
    POWERSHELL = "ps1"

    @property
    def file_extension(self) -> str:
        """Extension without the leading dot, e.g. ``"sh"``."""
        return self.value


# =============================================================================
# Output Mode
# =============================================================================
# The stdout-verbose / stdout-warning / stdout-default service messages switch
# how subsequent plain output lines are classified, until the next marker or
# the end of the stream.
# =============================================================================
class OutputMode(str, Enum):
    """Severity applied to plain (non service-message) script output."""

    DEFAULT = "default"
    VERBOSE = "verbose"
    WARNING = "warning"
