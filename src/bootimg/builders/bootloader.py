"""Disk image construction through the bootloader crate's ``builder`` binary."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from bootimg.builders.base import run_process
from bootimg.errors import RootNotFoundError
from bootimg.locate.paths import derive_target_root, project_root


@dataclass(slots=True)
class BootloaderBuilder:
    tool: str = "cargo"

    def command(
        self,
        *,
        kernel_manifest: Path,
        kernel_binary: Path,
        uefi: bool,
    ) -> tuple[str, ...]:
        # --target-dir is the kernel project's, never the bootloader checkout's.
        command = [
            self.tool,
            "builder",
            "--quiet",
            "--kernel-manifest",
            str(kernel_manifest),
            "--kernel-binary",
            str(kernel_binary),
            "--target-dir",
            str(derive_target_root(kernel_manifest)),
            "--out-dir",
            str(_binary_dir(kernel_binary)),
        ]
        if not uefi:
            command.extend(["--firmware", "bios"])
        return tuple(command)

    def build(
        self,
        *,
        bootloader_manifest: Path,
        kernel_manifest: Path,
        kernel_binary: Path,
        uefi: bool,
    ) -> None:
        command = self.command(
            kernel_manifest=kernel_manifest,
            kernel_binary=kernel_binary,
            uefi=uefi,
        )
        run_process(command, builder="bootloader", cwd=project_root(bootloader_manifest))


def _binary_dir(kernel_binary: Path) -> Path:
    if not kernel_binary.name or kernel_binary.parent == kernel_binary:
        raise RootNotFoundError(
            "Kernel binary path has no parent directory.",
            context={"kernel_binary": str(kernel_binary)},
        )
    return kernel_binary.parent
