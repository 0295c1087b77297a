"""Resolution of build descriptors, dependency crates and output paths."""

from .bootloader import find_dependency_manifest, locate_bootloader_tool
from .manifest import locate_build_descriptor, read_package_name
from .paths import derive_binary_path, derive_target_dir, derive_target_root, project_root

__all__ = [
    "derive_binary_path",
    "derive_target_dir",
    "derive_target_root",
    "find_dependency_manifest",
    "locate_bootloader_tool",
    "locate_build_descriptor",
    "project_root",
    "read_package_name",
]
