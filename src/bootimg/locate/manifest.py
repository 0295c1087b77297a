"""Kernel build descriptor lookup and parsing."""

from __future__ import annotations

import tomllib
from pathlib import Path

from bootimg.config import MANIFEST_NAME
from bootimg.errors import KernelManifestError, ManifestNotFoundError


def locate_build_descriptor(start: str | Path | None = None) -> Path:
    """Return the nearest ``Cargo.toml`` at or above *start* (default: cwd)."""
    origin = Path.cwd() if start is None else Path(start).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / MANIFEST_NAME
        if candidate.is_file():
            return candidate.resolve()
    raise ManifestNotFoundError(
        f"No {MANIFEST_NAME} found in {origin} or any parent directory.",
        hint="Run from inside the kernel project.",
        context={"start": str(origin)},
    )


def read_package_name(descriptor: Path) -> str:
    try:
        with descriptor.open("rb") as handle:
            payload = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ManifestNotFoundError(
            "Kernel manifest does not exist.",
            context={"path": str(descriptor)},
        ) from exc
    except OSError as exc:
        raise KernelManifestError(
            "Could not read kernel manifest.",
            hint=str(exc),
            context={"path": str(descriptor)},
        ) from exc
    except tomllib.TOMLDecodeError as exc:
        raise KernelManifestError(
            "Invalid kernel manifest.",
            hint=str(exc),
            context={"path": str(descriptor)},
        ) from exc

    package = payload.get("package")
    if not isinstance(package, dict):
        raise KernelManifestError(
            "Kernel manifest has no [package] table.",
            hint="Point the tool at the kernel crate, not a virtual workspace manifest.",
            context={"path": str(descriptor)},
        )
    name = package.get("name")
    if not isinstance(name, str) or not name:
        raise KernelManifestError(
            "Kernel manifest has no package name.",
            context={"path": str(descriptor)},
        )
    return name
