"""
stagehand.core - Foundation Layer
===================================

The building blocks every other Stagehand package depends on:

    - config:      StagehandConfig / FileRetryConfig and load_config()
    - enums:       FailureOptions, ScriptSyntax, OutputMode
    - models:      Variable, Artifact, ServiceMessage, CommandLineInvocation, CommandResult
    - exceptions:  Structured exception hierarchy
    - variables:   VariableDictionary
    - deployment:  RunningDeployment
    - logging:     configure_logging()

Dependency Rule:
    core/ depends on nothing else in the stagehand package.
"""

from stagehand.core.config import FileRetryConfig, StagehandConfig, load_config
from stagehand.core.deployment import RunningDeployment
from stagehand.core.enums import FailureOptions, OutputMode, ScriptSyntax
from stagehand.core.exceptions import (
    ConfigurationError,
    ConventionError,
    EngineSelectionError,
    OperationCancelledError,
    PermanentIOError,
    ScriptExecutionError,
    ScriptLaunchError,
    StagehandError,
    TransientIOError,
)
from stagehand.core.models import (
    Artifact,
    CommandLineInvocation,
    CommandResult,
    ServiceMessage,
    Variable,
)
from stagehand.core.variables import VariableDictionary

__all__ = [
    # Config
    "StagehandConfig",
    "FileRetryConfig",
    "load_config",
    # Enums
    "FailureOptions",
    "OutputMode",
    "ScriptSyntax",
    # Models
    "Artifact",
    "CommandLineInvocation",
    "CommandResult",
    "ServiceMessage",
    "Variable",
    # State
    "RunningDeployment",
    "VariableDictionary",
    # Exceptions
    "StagehandError",
    "ConfigurationError",
    "TransientIOError",
    "PermanentIOError",
    "OperationCancelledError",
    "ScriptLaunchError",
    "ScriptExecutionError",
    "EngineSelectionError",
    "ConventionError",
]
