"""
stagehand.infrastructure.file_system - Retry-Hardened File-System Gateway
===========================================================================

Every file operation Stagehand performs on a deployment target goes through
a PhysicalFileSystem. Mutating operations are wrapped in a RetryTracker so a
briefly locked file does not fail a deployment.

Architecture Context:

    ┌─────────────────┐   delete/copy/purge   ┌──────────────────────┐
    │  Conventions    │ ────────────────────> │  PhysicalFileSystem   │
    │  Script engines │                       │                       │
    └─────────────────┘                       │  ┌────────────────┐  │
                                              │  │ RetryTracker   │  │──> os / shutil
                                              │  │ (per operation)│  │
                                              │  └────────────────┘  │
                                              └──────────┬───────────┘
                                                         │
                                        ┌────────────────┴────────────────┐
                                        │                                 │
                              NixPhysicalFileSystem           WindowsPhysicalFileSystem
                              (symlinks are links)            (reparse points are links,
                                                               clears read-only on retry)

Retry Protocol (delete_file, delete_directory, copy_file):
    attempt → OSError?
        → path missing (FileNotFoundError, NotADirectoryError): no retry
        → tracker permits another attempt: log (throttled), sleep, retry
        → tracker exhausted: THROW_ON_FAILURE raises PermanentIOError,
                             IGNORE_FAILURE logs and returns

Purge Semantics:
    - Files are deleted when the include predicate accepts their FileInfo
    - Linked subdirectories are removed as a single entry, never traversed
    - Recursed subdirectories left empty are removed
    - Cancellation is checked before each file and each subdirectory;
      whatever was already deleted stays deleted

Usage:
    >>> file_system = get_physical_file_system()
    >>> file_system.purge_directory("/opt/app", include=lambda fi: fi.extension != ".log")
    >>> file_system.ensure_disk_has_enough_free_space("/opt/app", 100 * 1024 * 1024)
"""

from __future__ import annotations

import fnmatch
import os
import shutil
import socket
import stat
import sys
import tempfile
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Optional, Protocol
from uuid import uuid4

import structlog

from stagehand.core.config import MINIMUM_FREE_DISK_SPACE_BYTES, FileRetryConfig
from stagehand.core.enums import FailureOptions
from stagehand.core.exceptions import (
    OperationCancelledError,
    PermanentIOError,
    TransientIOError,
)
from stagehand.infrastructure.retry import RetryTracker


logger = structlog.get_logger()


# =============================================================================
# Cancellation and File Info
# =============================================================================
class CancellationSignal(Protocol):
    """Anything with ``is_set()``: threading.Event, asyncio.Event, ..."""

    def is_set(self) -> bool: ...


class FileInfo:
    """Read-only view of one file handed to purge predicates.

    Backed by ``os.lstat`` so a dangling link still produces a FileInfo.
    """

    def __init__(self, path: str, stat_result: Optional[os.stat_result] = None) -> None:
        self.path = path
        self._stat = stat_result if stat_result is not None else os.lstat(path)

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.path)[1]

    @property
    def directory(self) -> str:
        return os.path.dirname(self.path)

    @property
    def length(self) -> int:
        return self._stat.st_size

    @property
    def last_write_time(self) -> datetime:
        return datetime.fromtimestamp(self._stat.st_mtime, tz=timezone.utc)

    @property
    def last_access_time(self) -> datetime:
        return datetime.fromtimestamp(self._stat.st_atime, tz=timezone.utc)

    def __repr__(self) -> str:
        return f"FileInfo(path={self.path!r}, length={self.length})"


def format_file_size(size_in_bytes: int) -> str:
    """Human-readable size, e.g. ``400 MB``."""
    size = float(size_in_bytes)
    for unit in ("bytes", "KB", "MB", "GB", "TB"):
        if size < 1024 or unit == "TB":
            if unit == "bytes":
                return f"{int(size)} bytes"
            return f"{size:.4g} {unit}"
        size /= 1024
    return f"{size_in_bytes} bytes"


# =============================================================================
# PhysicalFileSystem
# =============================================================================
class PhysicalFileSystem(ABC):
    """File-system gateway shared by every convention and script engine.

    Subclasses decide what counts as a directory link, how one is removed,
    and how to loosen attributes before a delete is retried.

    Attributes:
        retry_config: Attempt/time budget applied to each retried operation.
        temp_directory: Base directory for temporary files and directories.
    """

    def __init__(
        self,
        retry_config: Optional[FileRetryConfig] = None,
        temp_directory: Optional[str] = None,
        sleep: Callable[[float], Any] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.retry_config = retry_config or FileRetryConfig()
        self.temp_directory = temp_directory or os.path.join(tempfile.gettempdir(), "stagehand")
        self._sleep = sleep
        self._clock = clock
        self._logger = logger.bind(component="file_system")

    def _new_retry_tracker(self) -> RetryTracker:
        return RetryTracker.for_file_operations(self.retry_config, clock=self._clock)

    # =========================================================================
    # Platform hooks
    # =========================================================================

    @abstractmethod
    def is_link(self, path: str) -> bool:
        """Whether ``path`` is a link/junction that must not be traversed."""
        ...

    @abstractmethod
    def _remove_link(self, path: str) -> None:
        ...

    @abstractmethod
    def _reset_attributes(self, path: str) -> None:
        """Make ``path`` deletable before a delete is re-attempted."""
        ...

    def get_disk_free_space(self, directory_path: str) -> Optional[int]:
        """Free bytes on the volume holding ``directory_path``, or None if unknown.

        Walks up to the nearest existing ancestor, so a not-yet-created
        installation directory can be checked.
        """
        path = os.path.abspath(directory_path)
        while not os.path.exists(path):
            parent = os.path.dirname(path)
            if parent == path:
                return None
            path = parent
        try:
            return shutil.disk_usage(path).free
        except OSError:
            return None

    # =========================================================================
    # Queries
    # =========================================================================

    def file_exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def directory_exists(self, path: str) -> bool:
        return os.path.isdir(path)

    def directory_is_empty(self, path: str) -> bool:
        try:
            with os.scandir(path) as entries:
                return not any(True for _ in entries)
        except OSError:
            return False

    def get_file_size(self, path: str) -> int:
        return os.path.getsize(path)

    def enumerate_files(self, parent_directory: str, *patterns: str) -> list[str]:
        """Files directly inside ``parent_directory`` matching any pattern.

        With no patterns every file is returned. Each pattern contributes its
        matches in name order, so a file matching two patterns is listed twice.
        """
        names = sorted(
            entry.name for entry in self._scandir(parent_directory)
            if not entry.is_dir()
        )
        return [os.path.join(parent_directory, name) for name in self._match(names, patterns)]

    def enumerate_files_recursively(self, parent_directory: str, *patterns: str) -> list[str]:
        results: list[str] = []
        for pattern in patterns or ("*",):
            for root, _dirs, files in os.walk(parent_directory):
                results.extend(
                    os.path.join(root, name) for name in sorted(files)
                    if fnmatch.fnmatch(name, pattern)
                )
        return results

    def enumerate_directories(self, parent_directory: str) -> list[str]:
        """Subdirectories directly inside ``parent_directory`` (links included)."""
        return sorted(
            entry.path for entry in self._scandir(parent_directory)
            if entry.is_dir()
        )

    def enumerate_directories_recursively(self, parent_directory: str) -> list[str]:
        results: list[str] = []
        for root, dirs, _files in os.walk(parent_directory):
            dirs.sort()
            results.extend(os.path.join(root, name) for name in dirs)
        return results

    @staticmethod
    def _scandir(path: str) -> Iterator[os.DirEntry]:
        with os.scandir(path) as entries:
            yield from entries

    @staticmethod
    def _match(names: list[str], patterns: tuple[str, ...]) -> list[str]:
        if not patterns:
            return names
        return [name for pattern in patterns for name in names if fnmatch.fnmatch(name, pattern)]

    # =========================================================================
    # Reading and writing
    # =========================================================================

    def read_file(self, path: str, encoding: str = "utf-8") -> str:
        with open(path, encoding=encoding, newline="") as f:
            return f.read()

    def overwrite_file(self, path: str, contents: str, encoding: str = "utf-8") -> None:
        with open(path, "w", encoding=encoding, newline="") as f:
            f.write(contents)

    def write_all_bytes(self, path: str, data: bytes) -> None:
        with open(path, "wb") as f:
            f.write(data)

    def ensure_directory_exists(self, directory_path: str) -> None:
        os.makedirs(directory_path, exist_ok=True)

    def create_temporary_file(self, extension: str) -> str:
        """Create an empty uuid-named file under the temp base; returns its path."""
        if not extension.startswith("."):
            extension = "." + extension
        self.ensure_directory_exists(self.temp_directory)
        path = os.path.join(self.temp_directory, f"{uuid4()}{extension}")
        with open(path, "x"):
            pass
        return path

    def create_temporary_directory(self) -> str:
        path = os.path.join(self.temp_directory, str(uuid4()))
        os.makedirs(path)
        return path

    # =========================================================================
    # Retried operations
    # =========================================================================

    def _retry(
        self,
        operation: str,
        path: str,
        action: Callable[[RetryTracker], None],
        options: FailureOptions,
    ) -> None:
        retry = self._new_retry_tracker()
        while retry.try_():
            try:
                action(retry)
                return
            except (OSError, TransientIOError) as e:
                # A missing path will not appear by waiting; locks and sharing
                # violations (PermissionError on Windows) might clear.
                missing = isinstance(e, (FileNotFoundError, NotADirectoryError))
                if not missing and retry.can_retry():
                    if retry.should_log_warning():
                        self._logger.debug(
                            "file_operation_retry",
                            operation=operation,
                            path=path,
                            attempt=retry.current_try,
                            error=str(e),
                        )
                    self._sleep(retry.sleep())
                    continue

                if options == FailureOptions.THROW_ON_FAILURE:
                    raise PermanentIOError(
                        message=f"Could not {operation} '{path}' after {retry.current_try} attempt(s): {e}",
                        path=path,
                        error_code="PATH_NOT_FOUND" if missing else "RETRIES_EXHAUSTED",
                        details={"operation": operation, "attempts": retry.current_try},
                    ) from e

                self._logger.warning(
                    "file_operation_failed",
                    operation=operation,
                    path=path,
                    attempts=retry.current_try,
                    error=str(e),
                )
                return

    def delete_file(
        self,
        path: Optional[str],
        options: FailureOptions = FailureOptions.THROW_ON_FAILURE,
    ) -> None:
        """Delete a file, retrying while it is locked. Missing files are fine."""
        if not path or not path.strip():
            return

        def delete(retry: RetryTracker) -> None:
            if os.path.lexists(path) and not os.path.isdir(path):
                if retry.is_not_first_attempt:
                    self._reset_attributes(path)
                try:
                    os.remove(path)
                except FileNotFoundError:
                    pass

        self._retry("delete file", path, delete, options)

    def delete_directory(
        self,
        path: Optional[str],
        options: FailureOptions = FailureOptions.THROW_ON_FAILURE,
    ) -> None:
        """Delete a directory tree and wait until it is really gone."""
        if not path or not path.strip():
            return

        def delete(retry: RetryTracker) -> None:
            if self.is_link(path):
                self._remove_link(path)
                return
            if os.path.isdir(path):
                if retry.is_not_first_attempt:
                    self._reset_tree_attributes(path)
                try:
                    shutil.rmtree(path)
                except FileNotFoundError:
                    pass
                self._ensure_directory_deleted(path)

        self._retry("delete directory", path, delete, options)

    def _ensure_directory_deleted(self, path: str) -> None:
        retry = self._new_retry_tracker()
        while retry.try_():
            if not os.path.exists(path):
                return
            if retry.can_retry():
                if retry.should_log_warning():
                    self._logger.debug("directory_delete_pending", path=path)
                self._sleep(retry.sleep())

        raise TransientIOError(
            message=f"Directory '{path}' still exists, despite requested deletion",
            path=path,
        )

    def _reset_tree_attributes(self, path: str) -> None:
        self._reset_attributes(path)
        for root, dirs, files in os.walk(path):
            for name in dirs + files:
                self._reset_attributes(os.path.join(root, name))

    def copy_file(self, source_file: str, target_file: str) -> None:
        """Copy a file, overwriting the target. Always fails fast once retries run out."""
        self._retry(
            "copy file",
            target_file,
            lambda _retry: shutil.copyfile(source_file, target_file),
            FailureOptions.THROW_ON_FAILURE,
        )

    def copy_directory(
        self,
        source_directory: str,
        target_directory: str,
        cancel: Optional[CancellationSignal] = None,
    ) -> int:
        """Copy a directory tree. Returns the number of files copied.

        Raises:
            OperationCancelledError: When ``cancel`` is set between files.
        """
        if not self.directory_exists(source_directory):
            return 0

        self.ensure_directory_exists(target_directory)

        count = 0
        for source_file in self.enumerate_files(source_directory):
            self._throw_if_cancelled(cancel, source_file)
            target_file = os.path.join(target_directory, os.path.basename(source_file))
            self.copy_file(source_file, target_file)
            count += 1

        for child_source in self.enumerate_directories(source_directory):
            self._throw_if_cancelled(cancel, child_source)
            child_target = os.path.join(target_directory, os.path.basename(child_source))
            count += self.copy_directory(child_source, child_target, cancel)

        return count

    def purge_directory(
        self,
        target_directory: str,
        include: Optional[Callable[[FileInfo], bool]] = None,
        options: FailureOptions = FailureOptions.THROW_ON_FAILURE,
        cancel: Optional[CancellationSignal] = None,
    ) -> None:
        """Delete the contents of ``target_directory`` (the directory itself stays).

        Args:
            target_directory: Directory to empty.
            include: Predicate selecting files to delete. None deletes all.
            options: Failure policy for each individual delete.
            cancel: Cooperative cancellation signal.

        Raises:
            OperationCancelledError: When ``cancel`` is set mid-walk.
        """
        self._purge(target_directory, include, options, cancel, include_target=False)

    def _purge(
        self,
        target_directory: str,
        include: Optional[Callable[[FileInfo], bool]],
        options: FailureOptions,
        cancel: Optional[CancellationSignal],
        include_target: bool,
    ) -> None:
        if not self.directory_exists(target_directory):
            return

        for file in self.enumerate_files(target_directory):
            self._throw_if_cancelled(cancel, file)
            if include is not None and not include(FileInfo(file)):
                continue
            self.delete_file(file, options)

        for directory in self.enumerate_directories(target_directory):
            self._throw_if_cancelled(cancel, directory)
            if self.is_link(directory):
                self._logger.debug("purge_link_removed", path=directory)
                self._remove_link(directory)
            else:
                self._purge(directory, include, options, cancel, include_target=True)

        if include_target and self.directory_is_empty(target_directory):
            self.delete_directory(target_directory, options)

    @staticmethod
    def _throw_if_cancelled(cancel: Optional[CancellationSignal], path: str) -> None:
        if cancel is not None and cancel.is_set():
            raise OperationCancelledError(message="The operation was cancelled", path=path)

    def overwrite_and_delete(self, original_file: str, temporary_replacement: str) -> None:
        """Replace ``original_file`` with ``temporary_replacement``.

        Afterwards only ``original_file`` exists, holding the replacement's
        content; the replacement and any backup are gone.
        """
        backup = f"{original_file}.backup{uuid4()}"

        if not os.path.exists(original_file):
            shutil.copyfile(temporary_replacement, original_file)
            os.remove(temporary_replacement)
            return

        try:
            shutil.copy2(original_file, backup)
            os.replace(temporary_replacement, original_file)
        finally:
            if os.path.exists(backup):
                os.remove(backup)

    def ensure_disk_has_enough_free_space(
        self,
        directory_path: str,
        required_space_in_bytes: int = MINIMUM_FREE_DISK_SPACE_BYTES,
    ) -> None:
        """Fail when the volume cannot hold ``max(required, 500MB)``.

        An unknown free-space figure passes silently.

        Raises:
            PermanentIOError: With error code INSUFFICIENT_DISK_SPACE.
        """
        free = self.get_disk_free_space(directory_path)
        if free is None:
            return

        required = max(max(required_space_in_bytes, 0), MINIMUM_FREE_DISK_SPACE_BYTES)
        if free < required:
            raise PermanentIOError(
                message=(
                    f"The drive containing the directory '{directory_path}' on machine "
                    f"'{socket.gethostname()}' does not have enough free disk space available "
                    f"for this operation to proceed. The disk only has {format_file_size(free)} "
                    f"available; please free up at least {format_file_size(required)}."
                ),
                path=directory_path,
                error_code="INSUFFICIENT_DISK_SPACE",
                details={"free_bytes": free, "required_bytes": required},
            )


# =============================================================================
# Platform variants
# =============================================================================
class NixPhysicalFileSystem(PhysicalFileSystem):
    """POSIX gateway: symbolic links are links, deletes need no attribute reset."""

    def is_link(self, path: str) -> bool:
        return os.path.islink(path)

    def _remove_link(self, path: str) -> None:
        os.unlink(path)

    def _reset_attributes(self, path: str) -> None:
        pass


class WindowsPhysicalFileSystem(PhysicalFileSystem):
    """Windows gateway: any reparse point (symlink or junction) is a link."""

    def is_link(self, path: str) -> bool:
        try:
            attributes = getattr(os.lstat(path), "st_file_attributes", 0)
        except OSError:
            return False
        return os.path.islink(path) or bool(attributes & stat.FILE_ATTRIBUTE_REPARSE_POINT)

    def _remove_link(self, path: str) -> None:
        os.rmdir(path)

    def _reset_attributes(self, path: str) -> None:
        try:
            os.chmod(path, stat.S_IWRITE | stat.S_IREAD)
        except OSError:
            self._logger.debug("reset_attributes_failed", path=path)


def get_physical_file_system(
    retry_config: Optional[FileRetryConfig] = None,
    temp_directory: Optional[str] = None,
) -> PhysicalFileSystem:
    """Pick the gateway for the host platform."""
    if sys.platform == "win32":
        return WindowsPhysicalFileSystem(retry_config, temp_directory)
    return NixPhysicalFileSystem(retry_config, temp_directory)
