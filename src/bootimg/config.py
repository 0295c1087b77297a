"""Tool locations and default build settings."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

# Name of the kernel and bootloader build descriptors.
MANIFEST_NAME = "Cargo.toml"
# Dependency name under which the kernel pulls in the bootloader builder.
BOOTLOADER_CRATE = "bootloader"
# Target triple the kernel is compiled for.
DEFAULT_TARGET = "x86_64-kernel"
# Arguments passed to cargo to compile the kernel.
DEFAULT_BUILD_COMMAND = "build --release"
# Emulator used by the run operation.
QEMU_EXECUTABLE = "qemu-system-x86_64"

BIOS_IMAGE_NAME = "bios.img"
UEFI_IMAGE_NAME = "uefi.img"


@dataclass(frozen=True, slots=True)
class ToolConfig:
    cargo: str = "cargo"
    qemu: str = QEMU_EXECUTABLE
    bootloader_crate: str = BOOTLOADER_CRATE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ToolConfig:
        """Build config from the environment.

        ``CARGO`` is set by cargo for runners and build scripts, so a runner
        invocation reuses the same toolchain that built the kernel.
        """
        env = os.environ if environ is None else environ
        return cls(
            cargo=env.get("CARGO") or "cargo",
            qemu=env.get("BOOTIMG_QEMU") or QEMU_EXECUTABLE,
            bootloader_crate=env.get("BOOTIMG_BOOTLOADER_CRATE") or BOOTLOADER_CRATE,
        )

    def with_overrides(self, *, cargo: str | None = None, qemu: str | None = None) -> ToolConfig:
        return ToolConfig(
            cargo=cargo or self.cargo,
            qemu=qemu or self.qemu,
            bootloader_crate=self.bootloader_crate,
        )
