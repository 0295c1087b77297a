"""Pure path derivations for cargo build output."""

from __future__ import annotations

from pathlib import Path

from bootimg.errors import RootNotFoundError


def project_root(descriptor: Path) -> Path:
    # A bare file name has no project directory to anchor target/ on.
    if not descriptor.name or descriptor.parent in (descriptor, Path(".")):
        raise RootNotFoundError(
            "Build descriptor has no parent directory.",
            context={"descriptor": str(descriptor)},
        )
    return descriptor.parent


def derive_target_root(descriptor: Path) -> Path:
    return project_root(descriptor) / "target"


def derive_target_dir(descriptor: Path, target: str) -> Path:
    return derive_target_root(descriptor) / target / "release"


def derive_binary_path(target_dir: Path, package_name: str) -> Path:
    return target_dir / f"{package_name}.elf"
