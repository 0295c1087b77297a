"""Emulator launch for built disk images."""

from __future__ import annotations

from .qemu import qemu_command, remap_exit_code, run_vm, split_run_args, supervise

__all__ = [
    "qemu_command",
    "remap_exit_code",
    "run_vm",
    "split_run_args",
    "supervise",
]
