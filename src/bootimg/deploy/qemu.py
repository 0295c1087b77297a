"""QEMU supervision for the run operation.

Boots a raw disk image, optionally bounded by a wall-clock timeout, and maps
the emulator's exit status onto the outer process:

- exit code 5 (the kernel's "tests passed" code) becomes 0
- a child killed by a signal, including the timeout kill, becomes 1
- every other code passes through unchanged
"""

from __future__ import annotations

import re
import subprocess
import sys
from pathlib import Path
from typing import NoReturn

from bootimg.config import QEMU_EXECUTABLE
from bootimg.errors import EmulatorError
from bootimg.models import ExitOutcome
from bootimg.observability import StructuredLogger

RUN_ARG_SEPARATORS = re.compile(r"[ |]")


def split_run_args(run_args: str) -> list[str]:
    """Split extra emulator arguments on spaces or ``|``."""
    return [arg for arg in RUN_ARG_SEPARATORS.split(run_args) if arg]


def qemu_command(
    disk_image: Path,
    run_args: str = "",
    *,
    qemu_binary: str = QEMU_EXECUTABLE,
) -> list[str]:
    return [
        qemu_binary,
        "-drive",
        f"format=raw,file={disk_image}",
        *split_run_args(run_args),
    ]


def remap_exit_code(code: int | None) -> int:
    return ExitOutcome(code).exit_status()


def supervise(
    disk_image: Path,
    run_args: str = "",
    timeout: float | None = None,
    *,
    qemu_binary: str = QEMU_EXECUTABLE,
    logger: StructuredLogger | None = None,
) -> ExitOutcome:
    logger = logger or StructuredLogger()
    command = qemu_command(disk_image, run_args, qemu_binary=qemu_binary)
    logger.debug("supervise", f"Starting emulator: {' '.join(command)}", phase="run")

    try:
        child = subprocess.Popen(command)
    except OSError as exc:
        raise EmulatorError(
            "Failed to start virtual machine.",
            hint=f"Install QEMU and ensure `{qemu_binary}` is in PATH.",
            context={"command": " ".join(command), "error": str(exc)},
        ) from exc

    # Popen.__exit__ waits on the child, so it is reaped on every path.
    with child:
        if timeout is None:
            returncode = child.wait()
        else:
            try:
                returncode = child.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                logger.warning(
                    "supervise",
                    f"Virtual machine still running after {timeout}s; killing it.",
                    phase="run",
                    pid=child.pid,
                )
                try:
                    child.kill()
                except OSError as exc:
                    raise EmulatorError(
                        "Failed to kill virtual machine.",
                        context={"pid": str(child.pid), "error": str(exc)},
                    ) from exc
                returncode = child.wait()

    # Negative return codes are signal deaths: there is no exit code.
    outcome = ExitOutcome(returncode if returncode >= 0 else None)
    logger.debug(
        "supervise",
        f"Virtual machine exited with {outcome.code}.",
        phase="run",
        returncode=returncode,
    )
    return outcome


def run_vm(
    disk_image: Path,
    run_args: str = "",
    timeout: float | None = None,
    *,
    qemu_binary: str = QEMU_EXECUTABLE,
    logger: StructuredLogger | None = None,
) -> NoReturn:
    """Boot *disk_image* and terminate the process with the remapped status."""
    outcome = supervise(
        disk_image,
        run_args,
        timeout,
        qemu_binary=qemu_binary,
        logger=logger,
    )
    sys.exit(outcome.exit_status())
