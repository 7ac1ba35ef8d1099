"""
stagehand.core.config - Configuration Management
==================================================

Configuration can be loaded from multiple sources with the following
priority (highest first):

    1. Explicit constructor arguments
    2. Environment variables (prefixed with STAGEHAND_)
    3. YAML configuration file (stagehand.yaml)
    4. Default values defined in the models below

Architecture Context:
    StagehandConfig is created once per deployment invocation and handed to
    the DeploymentExecutor, which passes the relevant pieces down:

        StagehandConfig
            ├── FileRetryConfig  → RetryTracker for every file operation
            ├── log_level/format → configure_logging()
            └── script_prefixes  → PackagedScriptConvention instances

Usage:
    config = StagehandConfig()                       # env + defaults
    config = load_config("stagehand.yaml")           # YAML + env + defaults
    config = StagehandConfig(log_level="DEBUG")      # explicit override

Environment Variables:
    STAGEHAND_LOG_LEVEL=DEBUG
    STAGEHAND_LOG_FORMAT=json
    STAGEHAND_FILE_RETRY__TIME_LIMIT_SECONDS=30
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from stagehand.core.exceptions import ConfigurationError


# Free space every deployment needs, regardless of what it asks for.
MINIMUM_FREE_DISK_SPACE_BYTES = 500 * 1024 * 1024


# =============================================================================
# File Retry Configuration
# =============================================================================
# Windows services can hang on to files for ~30s after the service has
# stopped, so file operations retry constantly for up to one minute: after
# 100ms for the first couple of retries, then every 200ms.
# =============================================================================
class FileRetryConfig(BaseModel):
    """Retry budget for file operations.

    Attributes:
        max_retries: Retries allowed after the first attempt.
        time_limit_seconds: Wall-clock limit across all attempts.
        initial_interval_ms: Backoff for the first ``initial_attempts`` retries.
        steady_interval_ms: Backoff for every retry after that.
        initial_attempts: How many retries use the short interval.
    """

    max_retries: int = Field(default=10000, ge=0)
    time_limit_seconds: float = Field(default=60.0, gt=0)
    initial_interval_ms: int = Field(default=100, ge=0)
    steady_interval_ms: int = Field(default=200, ge=0)
    initial_attempts: int = Field(default=2, ge=0)


# =============================================================================
# Main Configuration
# =============================================================================
class StagehandConfig(BaseSettings):
    """Top-level configuration for one Stagehand deployment run.

    Attributes:
        log_level: Python logging level used by the structlog filter.
        log_format: "console" for humans, "json" for log aggregation.
        temp_directory: Base directory for wrapper scripts and other
            temporary files. None means a "stagehand" folder under the
            system temp directory.
        script_prefixes: Packaged script base names run by the default
            pipeline, in order.
        required_free_space_bytes: Space the custom installation directory
            convention asks for. The 500MB floor always applies on top.
        file_retry: Retry budget for file operations.
    """

    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Renderer used for structured log output",
    )
    temp_directory: Optional[str] = Field(
        default=None,
        description="Base directory for temporary files (None = system temp)",
    )
    script_prefixes: list[str] = Field(
        default_factory=lambda: ["PreDeploy", "Deploy", "PostDeploy"],
        description="Packaged script names run by the default conventions",
    )
    required_free_space_bytes: int = Field(
        default=MINIMUM_FREE_DISK_SPACE_BYTES,
        ge=0,
        description="Free space requested before copying the package",
    )
    file_retry: FileRetryConfig = Field(
        default_factory=FileRetryConfig,
        description="Retry budget for file operations",
    )

    # -------------------------------------------------------------------------
    #   STAGEHAND_LOG_LEVEL                     → config.log_level
    #   STAGEHAND_FILE_RETRY__MAX_RETRIES       → config.file_retry.max_retries
    # -------------------------------------------------------------------------
    model_config = {
        "env_prefix": "STAGEHAND_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None) -> StagehandConfig:
    """Load configuration from a YAML file and/or environment variables.

    Args:
        path: Path to a YAML file. If None, ``stagehand.yaml`` in the current
            directory is used when it exists; otherwise only defaults and
            environment variables apply.

    Returns:
        A fully validated StagehandConfig.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ConfigurationError: If the file is not valid YAML or not a mapping.
    """
    if path is None:
        default_path = Path("stagehand.yaml")
        if default_path.exists():
            path = str(default_path)

    yaml_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path) as f:
            try:
                raw_data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    message=f"Configuration file is not valid YAML: {path}",
                    error_code="INVALID_YAML",
                    details={"path": path, "error": str(e)},
                ) from e

        if raw_data is None:
            raw_data = {}
        if not isinstance(raw_data, dict):
            raise ConfigurationError(
                message=f"Configuration file must contain a mapping: {path}",
                error_code="INVALID_CONFIG_STRUCTURE",
                details={"path": path, "type": type(raw_data).__name__},
            )
        yaml_data = raw_data

    return StagehandConfig(**yaml_data)


def get_default_config() -> StagehandConfig:
    """Create a StagehandConfig from defaults and environment variables."""
    return StagehandConfig()
