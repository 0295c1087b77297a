import os
import time
from pathlib import Path

import pytest

from bootimg.deploy.qemu import qemu_command, remap_exit_code, run_vm, split_run_args, supervise
from bootimg.errors import EmulatorError
from bootimg.observability import StructuredLogger


def test_split_run_args_accepts_space_and_pipe_separators() -> None:
    assert split_run_args("-serial stdio|-display none") == [
        "-serial",
        "stdio",
        "-display",
        "none",
    ]
    assert split_run_args("") == []
    assert split_run_args("  -s ||-S ") == ["-s", "-S"]


def test_qemu_command_points_drive_at_raw_image() -> None:
    command = qemu_command(
        Path("/out/bios.img"),
        "-device isa-debug-exit,iobase=0xf4,iosize=0x04|-serial stdio",
    )

    assert command == [
        "qemu-system-x86_64",
        "-drive",
        "format=raw,file=/out/bios.img",
        "-device",
        "isa-debug-exit,iobase=0xf4,iosize=0x04",
        "-serial",
        "stdio",
    ]


@pytest.mark.parametrize(("raw", "expected"), [(5, 0), (3, 3), (0, 0), (None, 1)])
def test_remap_exit_code(raw: int | None, expected: int) -> None:
    assert remap_exit_code(raw) == expected


def test_supervise_passes_drive_and_extra_args(fake_qemu, tmp_path: Path) -> None:
    image = tmp_path / "bios.img"
    image.write_bytes(b"image")

    outcome = supervise(image, "-serial stdio|exit 3", qemu_binary=str(fake_qemu.path))

    assert outcome.code == 3
    assert fake_qemu.calls()[0]["argv"] == [
        "-drive",
        f"format=raw,file={image}",
        "-serial",
        "stdio",
        "exit",
        "3",
    ]


def test_supervise_within_timeout_keeps_exit_code(fake_qemu, tmp_path: Path) -> None:
    outcome = supervise(tmp_path / "bios.img", "exit 5", 30, qemu_binary=str(fake_qemu.path))

    assert outcome.code == 5
    assert outcome.exit_status() == 0


def test_supervise_kills_and_reaps_child_after_timeout(fake_qemu, tmp_path: Path) -> None:
    logger = StructuredLogger()

    started = time.monotonic()
    outcome = supervise(
        tmp_path / "bios.img",
        "hang",
        0.5,
        qemu_binary=str(fake_qemu.path),
        logger=logger,
    )
    elapsed = time.monotonic() - started

    assert outcome.code is None
    assert outcome.exit_status() == 1
    assert elapsed < 10
    (kill_record,) = [r for r in logger.records if r["level"] == "warning"]
    with pytest.raises(ProcessLookupError):
        os.kill(kill_record["extra"]["pid"], 0)


def test_supervise_raises_when_emulator_missing(tmp_path: Path) -> None:
    with pytest.raises(EmulatorError) as excinfo:
        supervise(tmp_path / "bios.img", qemu_binary=str(tmp_path / "no-qemu"))

    assert excinfo.value.code == "E_EMULATOR"
    assert excinfo.value.hint is not None


@pytest.mark.parametrize(("run_args", "expected"), [("exit 5", 0), ("exit 3", 3), ("", 0)])
def test_run_vm_exits_with_remapped_code(
    fake_qemu,
    tmp_path: Path,
    run_args: str,
    expected: int,
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_vm(tmp_path / "bios.img", run_args, qemu_binary=str(fake_qemu.path))

    assert excinfo.value.code == expected


def test_run_vm_exits_with_failure_after_timeout(fake_qemu, tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_vm(tmp_path / "bios.img", "hang", 0.5, qemu_binary=str(fake_qemu.path))

    assert excinfo.value.code == 1
