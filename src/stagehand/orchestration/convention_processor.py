"""
stagehand.orchestration.convention_processor - The Convention Pipeline
========================================================================

A deployment is an ordered list of conventions run against one
RunningDeployment:

    ┌──────────────────────────── ConventionProcessor ────────────────────────────┐
    │                                                                             │
    │  CopyPackageToCustomInstallationDirectory ──→ PackagedScript(PreDeploy)     │
    │        ──→ PackagedScript(Deploy) ──→ PackagedScript(PostDeploy)            │
    │                                                                             │
    │  shared: RunningDeployment (variables, artifacts, current directory)        │
    └─────────────────────────────────────────────────────────────────────────────┘

Execution Rules:
    - Strictly sequential: one convention, one script at a time
    - Fail-fast: the first failure stops the run; later conventions never start
    - No rollback: effects of completed conventions stay in place
    - The failure is re-raised as ConventionError naming the convention and
      carrying the underlying error code and details (path, exit code, ...)

Usage:
    >>> processor = ConventionProcessor(deployment, [
    ...     PackagedScriptConvention("Deploy", file_system, engine, runner),
    ... ])
    >>> await processor.run_conventions()
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

from stagehand.core.deployment import RunningDeployment
from stagehand.core.exceptions import ConventionError, StagehandError


logger = structlog.get_logger()


class Convention(ABC):
    """One installation step."""

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    async def install(self, deployment: RunningDeployment) -> None:
        ...


class ConventionProcessor:
    """Runs conventions in order and stops at the first failure.

    Attributes:
        deployment: The deployment every convention operates on.
        conventions: Steps in execution order.
    """

    def __init__(self, deployment: RunningDeployment, conventions: list[Convention]) -> None:
        self.deployment = deployment
        self.conventions = list(conventions)
        self._logger = logger.bind(component="convention_processor")

    async def run_conventions(self) -> None:
        """Run every convention.

        Raises:
            ConventionError: Wrapping the first failure (chained as __cause__).
        """
        self._logger.info(
            "conventions_starting",
            package_directory=self.deployment.package_directory,
            conventions=[c.name for c in self.conventions],
        )

        for index, convention in enumerate(self.conventions):
            self._logger.debug("convention_starting", convention=convention.name, index=index)
            try:
                await convention.install(self.deployment)
            except StagehandError as e:
                self._logger.error("convention_failed", convention=convention.name, **e.to_dict())
                raise ConventionError(
                    message=e.message,
                    convention=convention.name,
                    error_code=e.error_code,
                    details=dict(e.details),
                ) from e
            except Exception as e:
                self._logger.error(
                    "convention_failed",
                    convention=convention.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise ConventionError(
                    message=f"{type(e).__name__}: {e}",
                    convention=convention.name,
                ) from e

        self._logger.info(
            "conventions_completed",
            current_directory=self.deployment.current_directory,
            artifacts=len(self.deployment.artifacts),
        )
