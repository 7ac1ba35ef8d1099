"""
stagehand.core.models - Core Data Models
==========================================

The Pydantic models that flow between the script engines, the command line
runner and the convention pipeline.

Model Hierarchy:
    Variable              → One named value in the VariableDictionary
    Artifact              → A file registered as deployment output
    ServiceMessage        → One parsed ##octopus[...] control line
    CommandLineInvocation → What to launch (interpreter + arguments)
    CommandResult         → What happened when it ran

Data Flow:
    ┌──────────────┐  CommandLineInvocation  ┌───────────────────┐
    │ Script       │ ──────────────────────→ │ CommandLineRunner │
    │ Engine       │ ←────────────────────── │  (spawns process) │
    └──────────────┘      CommandResult      └─────────┬─────────┘
                                                       │ stdout lines
                                                       ↓
                                             ┌───────────────────┐
                                             │ ServiceMessage    │──→ Variable / Artifact
                                             │ Parser            │
                                             └───────────────────┘
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime:
    """Current UTC timestamp. Every timestamp in Stagehand is UTC."""
    return datetime.now(timezone.utc)


# =============================================================================
# Variable
# =============================================================================
class Variable(BaseModel):
    """A single deployment variable.

    Attributes:
        name: Variable name as first registered. Lookups are case-insensitive.
        value: The raw (un-evaluated) value, or None.
        sensitive: Sensitive values are never logged and never rendered into
            script text in plaintext.
    """

    name: str = Field(description="Variable name (case-insensitive identity)")
    value: Optional[str] = Field(default=None, description="Raw variable value")
    sensitive: bool = Field(
        default=False,
        description="True when the value must be masked and encrypted",
    )


# =============================================================================
# Artifact
# =============================================================================
class Artifact(BaseModel):
    """A file registered as deployment output by a createArtifact message.

    Artifacts are append-only on the running deployment; registering the same
    path twice produces two entries.

    Example:
        >>> Artifact(path="/tmp/report.txt", name="report.txt", length=1024)
    """

    path: str = Field(description="Path of the file on the target machine")
    name: str = Field(description="Display name of the artifact")
    length: int = Field(default=0, ge=0, description="File length in bytes")
    created_at: datetime = Field(
        default_factory=_now,
        description="When the artifact was registered (UTC)",
    )


# =============================================================================
# Service Message
# =============================================================================
class ServiceMessage(BaseModel):
    """One parsed control line, e.g. ``##octopus[setVariable name='..' value='..']``.

    Attributes:
        name: The tag name (``setVariable``, ``createArtifact``, ...).
        properties: Attribute values, already base64-decoded, in line order.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Service message tag name")
    properties: dict[str, str] = Field(
        default_factory=dict,
        description="Decoded attribute values keyed by attribute name",
    )

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return a decoded attribute value."""
        return self.properties.get(key, default)


# =============================================================================
# Command Line Invocation / Result
# =============================================================================
class CommandLineInvocation(BaseModel):
    """A process to launch.

    ``working_directory=None`` means "the running deployment's current
    directory", which the runner resolves at launch time.
    """

    executable: str = Field(description="Interpreter or program to run")
    arguments: list[str] = Field(default_factory=list, description="Process arguments")
    working_directory: Optional[str] = Field(
        default=None,
        description="Directory to run in (None = deployment current directory)",
    )
    environment: Optional[dict[str, str]] = Field(
        default=None,
        description="Extra environment variables merged over the parent's",
    )

    def describe(self) -> str:
        """Command line for diagnostics.

        Only safe for invocations that carry no secrets as arguments; script
        engines pass the decryption key as an argument and must not log this.
        """
        return " ".join([self.executable, *self.arguments])


class CommandResult(BaseModel):
    """Outcome of one process execution."""

    exit_code: int = Field(description="Process exit code (0 = success)")
    executable: str = Field(description="Program that was run")
    working_directory: Optional[str] = Field(
        default=None,
        description="Directory the process ran in",
    )
    started_at: datetime = Field(default_factory=_now)
    completed_at: datetime = Field(default_factory=_now)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()
