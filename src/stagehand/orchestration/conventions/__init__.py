"""Built-in conventions."""

from stagehand.orchestration.conventions.custom_installation_directory import (
    CopyPackageToCustomInstallationDirectoryConvention,
)
from stagehand.orchestration.conventions.packaged_script import PackagedScriptConvention

__all__ = [
    "CopyPackageToCustomInstallationDirectoryConvention",
    "PackagedScriptConvention",
]
