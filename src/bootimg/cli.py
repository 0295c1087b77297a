"""Command line interface.

Usage:
    bootimg build --out images/ --create-out
    bootimg run target/x86_64-kernel/release/kernel.elf --timeout 30
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from bootimg import pipeline
from bootimg.config import DEFAULT_BUILD_COMMAND, DEFAULT_TARGET, ToolConfig
from bootimg.deploy.qemu import supervise
from bootimg.errors import BootImageError
from bootimg.models import BuildOptions, RunOptions
from bootimg.observability import StructuredLogger, configure_logging
from bootimg.report import BuildReport


def cmd_build(args: argparse.Namespace, config: ToolConfig, log: StructuredLogger) -> int:
    options = BuildOptions(
        out_dir=args.out,
        target=args.target,
        build_command=args.build_cmd,
        bios=not args.disable_bios,
        uefi=not args.disable_uefi,
        create_out=args.create_out,
        missing_images=args.missing_images,
    )
    result = pipeline.build(options, config=config, logger=log)
    if args.report is not None:
        path = BuildReport.from_result(result).write(args.report)
        log.info("report", f"Wrote build report to {path}", phase="report")
    return 0


def cmd_run(args: argparse.Namespace, config: ToolConfig, log: StructuredLogger) -> int:
    options = RunOptions(
        binary_path=args.binary_path,
        out_dir=args.out,
        run_args=args.run_args,
        timeout=args.timeout,
        create_out=args.create_out,
    )
    disk_image = pipeline.prepare_run_image(options, config=config, logger=log)
    outcome = supervise(
        disk_image,
        options.run_args,
        options.timeout,
        qemu_binary=config.qemu,
        logger=log,
    )
    return outcome.exit_status()


def _timeout_seconds(value: str) -> int:
    try:
        seconds = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid timeout: {value!r}") from None
    if seconds < 0:
        raise argparse.ArgumentTypeError(f"timeout must not be negative: {value}")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bootimg",
        description="Build bootable disk images for a kernel and run them in QEMU",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-json", type=Path, help="Write structured log records to this file")
    parser.add_argument("--cargo", help="cargo executable (default: $CARGO or cargo)")
    parser.add_argument("--qemu", help="QEMU executable (default: qemu-system-x86_64)")
    sub = parser.add_subparsers(dest="command", required=True)

    build_p = sub.add_parser("build", help="Compile the kernel and create disk images")
    build_p.add_argument("--out", type=Path, required=True, help="Output directory for the images")
    build_p.add_argument("--create-out", action="store_true", help="Create the output directory")
    build_p.add_argument("--target", default=DEFAULT_TARGET, help="Kernel target triple")
    build_p.add_argument(
        "--build-cmd",
        default=DEFAULT_BUILD_COMMAND,
        help="cargo arguments used to compile the kernel",
    )
    build_p.add_argument("--disable-bios", action="store_true", help="Don't require a BIOS image")
    build_p.add_argument("--disable-uefi", action="store_true", help="Build the BIOS image only")
    build_p.add_argument(
        "--missing-images",
        choices=("allow", "warn", "error"),
        default="warn",
        help="What to do when a requested image was not produced",
    )
    build_p.add_argument("--report", type=Path, help="Write a JSON (or .cbor) build report")

    run_p = sub.add_parser("run", help="Create a BIOS image for a kernel binary and boot it")
    run_p.add_argument("binary_path", type=Path, help="Compiled kernel binary")
    run_p.add_argument("--out", type=Path, help="Output directory (default: binary directory)")
    run_p.add_argument("--create-out", action="store_true", help="Create the output directory")
    run_p.add_argument(
        "--run-args",
        default="",
        help="Extra QEMU arguments, separated by spaces or '|'",
    )
    run_p.add_argument("--timeout", type=_timeout_seconds, help="Kill QEMU after this many seconds")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    config = ToolConfig.from_env().with_overrides(cargo=args.cargo, qemu=args.qemu)
    log = StructuredLogger()
    handler = cmd_build if args.command == "build" else cmd_run
    try:
        status = handler(args, config, log)
    except BootImageError as exc:
        log.error(args.command, str(exc), phase="error", code=exc.code)
        status = 1
    if args.log_json is not None:
        try:
            log.to_json_lines(args.log_json)
        except BootImageError as exc:
            log.error("log_json", str(exc), phase="error", code=exc.code)
            status = 1
    return status
