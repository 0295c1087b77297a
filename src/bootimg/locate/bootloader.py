"""Locate the bootloader builder crate through ``cargo metadata``."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any

from bootimg.config import BOOTLOADER_CRATE
from bootimg.errors import BootloaderNotFoundError


def locate_bootloader_tool(
    name: str = BOOTLOADER_CRATE,
    *,
    kernel_manifest: Path,
    cargo: str = "cargo",
) -> Path:
    """Return the manifest path of the kernel's *name* dependency."""
    metadata = _cargo_metadata(cargo=cargo, kernel_manifest=kernel_manifest)
    return find_dependency_manifest(metadata, name=name, kernel_manifest=kernel_manifest)


def find_dependency_manifest(
    metadata: dict[str, Any],
    *,
    name: str,
    kernel_manifest: Path,
) -> Path:
    packages = metadata.get("packages")
    resolve = metadata.get("resolve")
    if not isinstance(packages, list) or not isinstance(resolve, dict):
        raise BootloaderNotFoundError(
            "cargo metadata output has no dependency graph.",
            context={"manifest": str(kernel_manifest)},
        )
    by_id = {pkg.get("id"): pkg for pkg in packages if isinstance(pkg, dict)}

    root_id = _root_package_id(by_id, kernel_manifest) or resolve.get("root")
    node = next(
        (n for n in resolve.get("nodes", []) if isinstance(n, dict) and n.get("id") == root_id),
        None,
    )
    if node is None:
        raise BootloaderNotFoundError(
            "Kernel package not found in cargo metadata.",
            context={"manifest": str(kernel_manifest)},
        )

    for dep_id in node.get("dependencies", []):
        package = by_id.get(dep_id)
        if package is not None and package.get("name") == name:
            manifest_path = package.get("manifest_path")
            if not manifest_path:
                break
            return Path(manifest_path).resolve()

    raise BootloaderNotFoundError(
        f"Kernel does not depend on `{name}`.",
        hint=f"Add `{name}` to the kernel's [dependencies].",
        context={"manifest": str(kernel_manifest), "dependency": name},
    )


def _root_package_id(by_id: dict[Any, dict[str, Any]], kernel_manifest: Path) -> str | None:
    wanted = kernel_manifest.resolve()
    for package_id, package in by_id.items():
        manifest_path = package.get("manifest_path")
        if manifest_path and Path(manifest_path).resolve() == wanted:
            return package_id
    return None


def _cargo_metadata(*, cargo: str, kernel_manifest: Path) -> dict[str, Any]:
    command = [
        cargo,
        "metadata",
        "--format-version",
        "1",
        "--manifest-path",
        str(kernel_manifest),
    ]
    try:
        result = subprocess.run(command, stdout=subprocess.PIPE, text=True, check=False)
    except OSError as exc:
        raise BootloaderNotFoundError(
            "Failed to run cargo metadata.",
            hint=str(exc),
            context={"command": " ".join(command)},
        ) from exc
    if result.returncode != 0:
        raise BootloaderNotFoundError(
            "cargo metadata failed.",
            context={"command": " ".join(command), "returncode": str(result.returncode)},
        )
    try:
        payload = json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise BootloaderNotFoundError(
            "Invalid cargo metadata JSON.",
            hint=str(exc),
            context={"command": " ".join(command)},
        ) from exc
    if not isinstance(payload, dict):
        raise BootloaderNotFoundError("Invalid cargo metadata payload type.")
    return payload
