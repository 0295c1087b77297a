"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import ClassVar


class ErrorCode(StrEnum):
    """Stable error identifiers, one per failure category."""

    CONFIGURATION = "E_CONFIGURATION"
    RESOLUTION = "E_RESOLUTION"
    BUILD = "E_BUILD"
    FILESYSTEM = "E_FILESYSTEM"
    EMULATOR = "E_EMULATOR"
    POLICY = "E_POLICY"


class BootImageError(Exception):
    """Base error class that carries code, optional hint, and context.

    Each category subclass pins its code through ``category``; concrete errors
    inherit it and only differ by type.
    """

    category: ClassVar[ErrorCode]

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = self.category.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ConfigurationError(BootImageError):
    category = ErrorCode.CONFIGURATION


class OutNotExistError(ConfigurationError):
    """Output directory is missing and could not (or may not) be created."""


class KernelManifestError(ConfigurationError):
    """Kernel manifest is unreadable or has no usable package identity."""


class ResolutionError(BootImageError):
    category = ErrorCode.RESOLUTION


class ManifestNotFoundError(ResolutionError):
    pass


class BootloaderNotFoundError(ResolutionError):
    pass


class RootNotFoundError(ResolutionError):
    """A path that must have a parent (or file name) component has none."""


class BuildFailedError(BootImageError):
    category = ErrorCode.BUILD


class FilesystemError(BootImageError):
    category = ErrorCode.FILESYSTEM


class MoveError(FilesystemError):
    pass


class FindMovedError(FilesystemError):
    pass


class OutputWriteError(FilesystemError):
    """A report or log file could not be written."""


class EmulatorError(BootImageError):
    category = ErrorCode.EMULATOR


class MissingImageError(BootImageError):
    category = ErrorCode.POLICY


__all__ = [
    "BootImageError",
    "BootloaderNotFoundError",
    "BuildFailedError",
    "ConfigurationError",
    "EmulatorError",
    "ErrorCode",
    "FilesystemError",
    "FindMovedError",
    "KernelManifestError",
    "ManifestNotFoundError",
    "MissingImageError",
    "MoveError",
    "OutNotExistError",
    "OutputWriteError",
    "ResolutionError",
    "RootNotFoundError",
]
