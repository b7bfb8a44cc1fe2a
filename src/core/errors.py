"""Taxonomía de errores del Core.

Reglas:
- La CLI traduce cada categoría a un exit code estable.
- Los adaptadores envuelven excepciones de httpx/OS/subprocess en estas clases
  para que el Core nunca dependa de tipos de terceros.
"""

from __future__ import annotations

from enum import IntEnum
from typing import ClassVar, Sequence


class ExitCode(IntEnum):
    """Exit codes for scripting integration."""

    SUCCESS = 0

    USAGE_ERROR = 1
    CONFIG_ERROR = 2

    NETWORK_ERROR = 20

    COMMAND_ERROR = 40
    FILE_ERROR = 41

    DATA_CORRUPT = 50
    DATA_INVALID = 51


class DownloaderError(Exception):
    """Base exception with structured error info.

    Attributes:
        message: Human-readable error message.
        details: Optional additional context (release tag, stage, path).
    """

    code: ClassVar[ExitCode] = ExitCode.USAGE_ERROR

    def __init__(self, message: str, details: str | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def format_full(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class NetworkError(DownloaderError):
    """Transport failure or non-success HTTP status."""

    code = ExitCode.NETWORK_ERROR


class DecodeError(DownloaderError):
    """Release listing payload is not an array of release records."""

    code = ExitCode.DATA_CORRUPT


class ParseError(DownloaderError):
    """Malformed version output or date tag."""

    code = ExitCode.DATA_INVALID


class CommandError(DownloaderError):
    """The local executable ran but exited non-zero."""

    code = ExitCode.COMMAND_ERROR


class FileError(DownloaderError):
    """Filesystem failure while installing an artifact."""

    code = ExitCode.FILE_ERROR


class UnsupportedPlatformError(DownloaderError):
    """No published artifact exists for this OS/architecture."""

    code = ExitCode.CONFIG_ERROR


class CheckFailedError(DownloaderError):
    """One or more candidate pipelines failed during a check.

    `failures` keeps every (tag, error) pair in listing order; the first one
    decides the message and the exit code.
    """

    def __init__(self, failures: Sequence[tuple[str, DownloaderError]]) -> None:
        if not failures:
            raise ValueError("CheckFailedError requires at least one failure")
        self.failures = list(failures)
        tag, first = self.failures[0]
        super().__init__(
            f"release {tag}: {first.message}",
            details=f"{len(self.failures)} candidate(s) failed",
        )

    @property
    def first(self) -> DownloaderError:
        return self.failures[0][1]

    @property
    def code(self) -> ExitCode:  # type: ignore[override]
        return self.first.code


def get_exit_code(error: BaseException) -> int:
    """Map any exception to a process exit code."""

    if isinstance(error, DownloaderError):
        return int(error.code)
    if isinstance(error, PermissionError):
        return int(ExitCode.FILE_ERROR)
    return int(ExitCode.USAGE_ERROR)
