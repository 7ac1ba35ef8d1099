"""
Stagehand - Deployment Execution Engine
=========================================

Stagehand runs on a deployment target and carries out one deployment of an
extracted package: an ordered pipeline of conventions that copy files and
run the package's own scripts with the deployment's variables injected.

Architecture Layers (top to bottom):
    1. Orchestration Layer  - ConventionProcessor and the built-in conventions
    2. Integration Layer    - Script engines, bootstrap rendering, process runner,
                              service message parsing
    3. Infrastructure Layer - Retry-hardened file system, retry tracker, encryption
    4. Core                 - Config, models, variables, exceptions, logging

Quick Start:
    >>> from stagehand import DeploymentExecutor
    >>> exit_code = await DeploymentExecutor().run("/opt/packages/web-1.0.0")
"""

__version__ = "0.1.0"

from stagehand.facade import DeploymentExecutor

__all__ = ["DeploymentExecutor", "__version__"]
