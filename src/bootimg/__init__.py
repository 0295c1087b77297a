"""Public package entrypoint for the kernel disk image builder."""

from .config import ToolConfig
from .errors import (
    BootImageError,
    BootloaderNotFoundError,
    BuildFailedError,
    ConfigurationError,
    EmulatorError,
    FilesystemError,
    FindMovedError,
    KernelManifestError,
    ManifestNotFoundError,
    MissingImageError,
    MoveError,
    OutNotExistError,
    OutputWriteError,
    ResolutionError,
    RootNotFoundError,
)
from .models import BuildOptions, BuildResult, BuildTarget, DiskImageSet, ExitOutcome, RunOptions
from .pipeline import build, prepare_run_image, run
from .report import BuildReport

__all__ = [
    "BootImageError",
    "BootloaderNotFoundError",
    "BuildFailedError",
    "BuildOptions",
    "BuildReport",
    "BuildResult",
    "BuildTarget",
    "ConfigurationError",
    "DiskImageSet",
    "EmulatorError",
    "ExitOutcome",
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
    "RunOptions",
    "ToolConfig",
    "build",
    "prepare_run_image",
    "run",
]
