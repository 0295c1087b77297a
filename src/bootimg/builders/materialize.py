"""Relocation of bootloader-built disk images into the output directory.

The bootloader builder writes ``bootimage-{bios,uefi}-<kernel>.img`` next to
the kernel binary. Each image that exists is moved (never copied) to a fixed
name in the output directory; a variant that was not produced yields ``None``.
"""

from __future__ import annotations

from pathlib import Path

from bootimg.config import BIOS_IMAGE_NAME, UEFI_IMAGE_NAME
from bootimg.errors import FindMovedError, MoveError, RootNotFoundError
from bootimg.models import DiskImageSet, Firmware

OUTPUT_NAMES: dict[Firmware, str] = {
    "bios": BIOS_IMAGE_NAME,
    "uefi": UEFI_IMAGE_NAME,
}


def candidate_image_path(kernel_binary: Path, firmware: Firmware) -> Path:
    if not kernel_binary.name or kernel_binary.parent == kernel_binary:
        raise RootNotFoundError(
            "Kernel binary path has no file name.",
            context={"kernel_binary": str(kernel_binary)},
        )
    return kernel_binary.parent / f"bootimage-{firmware}-{kernel_binary.name}.img"


def materialize_disk_images(kernel_binary: Path, out_dir: Path) -> DiskImageSet:
    return DiskImageSet(
        bios=_relocate(kernel_binary, out_dir, "bios"),
        uefi=_relocate(kernel_binary, out_dir, "uefi"),
    )


def _relocate(kernel_binary: Path, out_dir: Path, firmware: Firmware) -> Path | None:
    source = candidate_image_path(kernel_binary, firmware)
    if not source.exists():
        return None

    destination = out_dir / OUTPUT_NAMES[firmware]
    try:
        source.replace(destination)
    except OSError as exc:
        raise MoveError(
            f"Failed to move {firmware} image to output directory.",
            hint=str(exc),
            context={"source": str(source), "destination": str(destination)},
        ) from exc

    try:
        return destination.resolve(strict=True)
    except OSError as exc:
        raise FindMovedError(
            f"Moved {firmware} image not found at its destination.",
            hint=str(exc),
            context={"destination": str(destination)},
        ) from exc
