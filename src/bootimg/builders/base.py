"""Synchronous child-process execution shared by the builders."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from bootimg.errors import BuildFailedError


def run_process(
    command: Sequence[str],
    *,
    builder: str,
    cwd: Path | None = None,
) -> None:
    """Run *command* to completion with inherited stdio.

    The child's own diagnostics reach the user unmodified, so failures only
    record the command and status.
    """
    argv = list(command)
    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            check=False,
        )
    except OSError as exc:
        raise BuildFailedError(
            f"Failed to start {builder} build.",
            hint=f"Ensure `{argv[0]}` is installed and in PATH.",
            context={
                "builder": builder,
                "command": " ".join(argv),
                "error": str(exc),
            },
        ) from exc

    if result.returncode != 0:
        raise BuildFailedError(
            f"{builder} build failed.",
            hint=f"Check {builder} output above for details.",
            context={
                "builder": builder,
                "command": " ".join(argv),
                "returncode": str(result.returncode),
                "cwd": str(cwd) if cwd is not None else "",
            },
        )
