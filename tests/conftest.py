"""Shared test fixtures: a throwaway kernel project and fake cargo/QEMU tools."""

from __future__ import annotations

import json
import os
import stat
import sys
import textwrap
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pytest

KERNEL_TARGET = "x86_64-kernel"


@dataclass(frozen=True)
class KernelProject:
    root: Path
    manifest: Path
    binary: Path
    bootloader_root: Path

    def bootloader_manifest(self) -> Path:
        return self.bootloader_root / "Cargo.toml"


@dataclass(frozen=True)
class FakeTool:
    path: Path
    log: Path

    def calls(self) -> list[dict[str, object]]:
        if not self.log.exists():
            return []
        return [json.loads(line) for line in self.log.read_text(encoding="utf-8").splitlines()]


def _write_script(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body), encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def kernel_project(tmp_path: Path) -> KernelProject:
    root = tmp_path / "kernel"
    root.mkdir()
    manifest = root / "Cargo.toml"
    manifest.write_text(
        '[package]\nname = "kernel"\nversion = "0.1.0"\n\n[dependencies]\nbootloader = "0.10"\n',
        encoding="utf-8",
    )
    release_dir = root / "target" / KERNEL_TARGET / "release"
    release_dir.mkdir(parents=True)
    binary = release_dir / "kernel.elf"
    binary.write_bytes(b"\x7fELF kernel")

    bootloader_root = tmp_path / "registry" / "bootloader-0.10"
    bootloader_root.mkdir(parents=True)
    (bootloader_root / "Cargo.toml").write_text(
        '[package]\nname = "bootloader"\nversion = "0.10.0"\n',
        encoding="utf-8",
    )
    return KernelProject(
        root=root.resolve(),
        manifest=manifest.resolve(),
        binary=binary.resolve(),
        bootloader_root=bootloader_root.resolve(),
    )


@pytest.fixture
def fake_cargo(
    tmp_path: Path,
    kernel_project: KernelProject,
) -> Callable[..., FakeTool]:
    """Create a cargo stand-in handling ``metadata``, ``builder`` and builds."""
    if os.name != "posix":
        pytest.skip("Fake tools are POSIX shebang scripts.")

    def factory(
        *,
        build_exit: int = 0,
        builder_exit: int = 0,
        produce: tuple[str, ...] = ("bios", "uefi"),
    ) -> FakeTool:
        tools = tmp_path / "tools"
        tools.mkdir(exist_ok=True)
        log = tools / "cargo.log"
        metadata_path = tools / "metadata.json"
        kernel_id = "kernel 0.1.0 (path+file:///kernel)"
        bootloader_id = "bootloader 0.10.0 (registry+https://github.com/rust-lang/crates.io-index)"
        metadata_path.write_text(
            json.dumps(
                {
                    "packages": [
                        {
                            "id": kernel_id,
                            "name": "kernel",
                            "manifest_path": str(kernel_project.manifest),
                        },
                        {
                            "id": bootloader_id,
                            "name": "bootloader",
                            "manifest_path": str(kernel_project.bootloader_manifest()),
                        },
                    ],
                    "resolve": {
                        "root": kernel_id,
                        "nodes": [
                            {"id": kernel_id, "dependencies": [bootloader_id]},
                            {"id": bootloader_id, "dependencies": []},
                        ],
                    },
                }
            ),
            encoding="utf-8",
        )
        script = _write_script(
            tools / "cargo",
            f"""\
            import json
            import os
            import pathlib
            import sys

            args = sys.argv[1:]
            with open({str(log)!r}, "a", encoding="utf-8") as handle:
                handle.write(json.dumps({{"argv": args, "cwd": os.getcwd()}}) + "\\n")

            if args[:1] == ["metadata"]:
                sys.stdout.write(pathlib.Path({str(metadata_path)!r}).read_text())
                sys.exit(0)

            if args[:1] == ["builder"]:
                binary = pathlib.Path(args[args.index("--kernel-binary") + 1])
                out_dir = pathlib.Path(args[args.index("--out-dir") + 1])
                firmware = ["bios"] if "--firmware" in args else ["bios", "uefi"]
                for name in firmware:
                    if name in {list(produce)!r}:
                        image = out_dir / f"bootimage-{{name}}-{{binary.name}}.img"
                        image.write_bytes(f"{{name}} image for {{binary.name}}".encode())
                sys.exit({builder_exit})

            sys.exit({build_exit})
            """,
        )
        return FakeTool(path=script, log=log)

    return factory


@pytest.fixture
def fake_qemu(tmp_path: Path) -> FakeTool:
    """QEMU stand-in: ``exit N`` exits with N, ``hang`` never returns."""
    if os.name != "posix":
        pytest.skip("Fake tools are POSIX shebang scripts.")
    tools = tmp_path / "tools"
    tools.mkdir(exist_ok=True)
    log = tools / "qemu.log"
    script = _write_script(
        tools / "qemu-system-x86_64",
        f"""\
        import json
        import sys
        import time

        args = sys.argv[1:]
        with open({str(log)!r}, "a", encoding="utf-8") as handle:
            handle.write(json.dumps({{"argv": args}}) + "\\n")

        if "hang" in args:
            time.sleep(600)
        if "exit" in args:
            sys.exit(int(args[args.index("exit") + 1]))
        sys.exit(0)
        """,
    )
    return FakeTool(path=script, log=log)
