"""
stagehand.orchestration - Convention Pipeline
===============================================

    - convention_processor:  Convention ABC and the fail-fast ConventionProcessor
    - conventions:           built-in steps (custom installation directory,
                             packaged scripts)
"""

from stagehand.orchestration.convention_processor import Convention, ConventionProcessor
from stagehand.orchestration.conventions import (
    CopyPackageToCustomInstallationDirectoryConvention,
    PackagedScriptConvention,
)

__all__ = [
    "Convention",
    "ConventionProcessor",
    "CopyPackageToCustomInstallationDirectoryConvention",
    "PackagedScriptConvention",
]
