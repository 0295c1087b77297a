"""Core typed dataclasses for build/run requests and their results."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

Firmware = Literal["bios", "uefi"]
MissingImagePolicy = Literal["allow", "warn", "error"]

FIRMWARE_ORDER: tuple[Firmware, ...] = ("bios", "uefi")

# Exit code the kernel writes to the isa-debug-exit port when its tests pass.
SUCCESS_EXIT_CODE = 5


@dataclass(frozen=True, slots=True)
class BuildTarget:
    kernel_binary: Path
    target: str
    out_dir: Path


@dataclass(frozen=True, slots=True)
class DiskImageSet:
    bios: Path | None = None
    uefi: Path | None = None

    def image_for(self, firmware: Firmware) -> Path | None:
        return self.bios if firmware == "bios" else self.uefi

    def produced(self) -> tuple[Firmware, ...]:
        return tuple(fw for fw in FIRMWARE_ORDER if self.image_for(fw) is not None)

    def missing(self, requested: tuple[Firmware, ...]) -> tuple[Firmware, ...]:
        return tuple(fw for fw in FIRMWARE_ORDER if fw in requested and self.image_for(fw) is None)


@dataclass(frozen=True, slots=True)
class ExitOutcome:
    """Raw emulator status; ``code`` is None when the child died by a signal."""

    code: int | None

    def exit_status(self) -> int:
        if self.code is None:
            return 1
        if self.code == SUCCESS_EXIT_CODE:
            return 0
        return self.code


@dataclass(frozen=True, slots=True)
class BuildOptions:
    out_dir: Path
    target: str
    build_command: str
    bios: bool = True
    uefi: bool = True
    create_out: bool = False
    missing_images: MissingImagePolicy = "warn"

    def requested_firmware(self) -> tuple[Firmware, ...]:
        requested: list[Firmware] = []
        if self.bios:
            requested.append("bios")
        if self.uefi:
            requested.append("uefi")
        return tuple(requested)


@dataclass(frozen=True, slots=True)
class RunOptions:
    binary_path: Path
    out_dir: Path | None = None
    run_args: str = ""
    timeout: float | None = None
    create_out: bool = False


@dataclass(frozen=True, slots=True)
class BuildResult:
    target: BuildTarget
    kernel_name: str
    images: DiskImageSet
