"""Builders for the kernel binary and its bootable disk images."""

from .base import run_process
from .bootloader import BootloaderBuilder
from .kernel import KernelBuilder
from .materialize import candidate_image_path, materialize_disk_images

__all__ = [
    "BootloaderBuilder",
    "KernelBuilder",
    "candidate_image_path",
    "materialize_disk_images",
    "run_process",
]
