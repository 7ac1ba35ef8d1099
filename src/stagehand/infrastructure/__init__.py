"""
stagehand.infrastructure - File System, Retry and Encryption
==============================================================

The low-level services everything else is built on:

    - retry:        RetryInterval / RetryTracker (bounded backoff)
    - file_system:  PhysicalFileSystem gateway with Nix/Windows variants
    - encryption:   AES-128-CBC for sensitive variables in bootstrap scripts
"""

from stagehand.infrastructure.encryption import AesEncryption
from stagehand.infrastructure.file_system import (
    FileInfo,
    NixPhysicalFileSystem,
    PhysicalFileSystem,
    WindowsPhysicalFileSystem,
    get_physical_file_system,
)
from stagehand.infrastructure.retry import RetryInterval, RetryTracker

__all__ = [
    "AesEncryption",
    "FileInfo",
    "PhysicalFileSystem",
    "NixPhysicalFileSystem",
    "WindowsPhysicalFileSystem",
    "get_physical_file_system",
    "RetryInterval",
    "RetryTracker",
]
