"""Build orchestration for kernel disk images.

``build`` runs the full linear pipeline::

    validate_output_dir -> compile_kernel -> resolve_descriptor
        -> resolve_binary_path -> invoke_bootloader_builder -> materialize
        -> enforce_image_policy -> report

``run`` reuses the same steps on a kernel binary supplied by the caller
(cargo runner style): no compile step and no build report, BIOS image only,
then hands the image to the emulator.

Each step takes the current :class:`PipelineState` and returns a new one;
the first error aborts the pipeline and nothing already written is removed.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import NoReturn, TypeVar

from bootimg.builders import BootloaderBuilder, KernelBuilder, materialize_disk_images
from bootimg.config import DEFAULT_TARGET, ToolConfig
from bootimg.deploy.qemu import run_vm
from bootimg.errors import OutNotExistError, ResolutionError
from bootimg.locate import (
    derive_binary_path,
    derive_target_dir,
    locate_bootloader_tool,
    locate_build_descriptor,
    read_package_name,
)
from bootimg.models import BuildOptions, BuildResult, BuildTarget, DiskImageSet, RunOptions
from bootimg.observability import StructuredLogger
from bootimg.policy import ensure_images_present, require_image


@dataclass(frozen=True, slots=True)
class PipelineState:
    options: BuildOptions
    config: ToolConfig
    logger: StructuredLogger
    out_dir: Path | None = None
    kernel_manifest: Path | None = None
    kernel_name: str | None = None
    kernel_binary: Path | None = None
    images: DiskImageSet | None = None


Step = Callable[[PipelineState], PipelineState]

T = TypeVar("T")


def validate_output_dir(state: PipelineState) -> PipelineState:
    out_dir = state.options.out_dir
    if not out_dir.exists():
        if not state.options.create_out:
            raise OutNotExistError(
                "Output directory does not exist.",
                hint="Create it first or pass --create-out.",
                context={"out_dir": str(out_dir)},
            )
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutNotExistError(
                "Could not create output directory.",
                hint=str(exc),
                context={"out_dir": str(out_dir)},
            ) from exc
        state.logger.debug("validate_output_dir", f"Created {out_dir}", phase="build")
    elif not out_dir.is_dir():
        raise OutNotExistError(
            "Output path is not a directory.",
            context={"out_dir": str(out_dir)},
        )
    return replace(state, out_dir=out_dir.resolve(strict=True))


def compile_kernel(state: PipelineState) -> PipelineState:
    state.logger.info("compile_kernel", "Compiling kernel...", phase="build")
    KernelBuilder(tool=state.config.cargo).build(state.options.build_command)
    return state


def resolve_descriptor(state: PipelineState) -> PipelineState:
    return replace(state, kernel_manifest=locate_build_descriptor())


def resolve_binary_path(state: PipelineState) -> PipelineState:
    kernel_manifest = _required(state.kernel_manifest, "kernel_manifest")
    kernel_name = read_package_name(kernel_manifest)
    target_dir = derive_target_dir(kernel_manifest, state.options.target)
    binary_path = derive_binary_path(target_dir, kernel_name)
    state.logger.debug(
        "resolve_binary_path",
        f"Using {binary_path} as kernel binary",
        phase="build",
    )
    return replace(
        state,
        kernel_name=kernel_name,
        kernel_binary=_canonical_binary(binary_path),
    )


def invoke_bootloader_builder(state: PipelineState) -> PipelineState:
    kernel_manifest = _required(state.kernel_manifest, "kernel_manifest")
    kernel_binary = _required(state.kernel_binary, "kernel_binary")
    state.logger.info("invoke_bootloader_builder", "Creating disk image", phase="build")
    bootloader_manifest = locate_bootloader_tool(
        state.config.bootloader_crate,
        kernel_manifest=kernel_manifest,
        cargo=state.config.cargo,
    )
    BootloaderBuilder(tool=state.config.cargo).build(
        bootloader_manifest=bootloader_manifest,
        kernel_manifest=kernel_manifest,
        kernel_binary=kernel_binary,
        uefi=state.options.uefi,
    )
    return state


def materialize(state: PipelineState) -> PipelineState:
    kernel_binary = _required(state.kernel_binary, "kernel_binary")
    out_dir = _required(state.out_dir, "out_dir")
    state.logger.info(
        "materialize",
        "Created images. Moving them to the output directory",
        phase="build",
    )
    return replace(state, images=materialize_disk_images(kernel_binary, out_dir))


def enforce_image_policy(state: PipelineState) -> PipelineState:
    ensure_images_present(
        images=_required(state.images, "images"),
        requested=state.options.requested_firmware(),
        policy=state.options.missing_images,
        logger=state.logger,
    )
    return state


def report(state: PipelineState) -> PipelineState:
    images = _required(state.images, "images")
    for firmware in images.produced():
        image = images.image_for(firmware)
        state.logger.info(
            "report",
            f"Created bootable {firmware} image {state.kernel_name} at {image}",
            phase="report",
            firmware=firmware,
            path=str(image),
        )
    if not images.produced():
        state.logger.warning("report", "No bootable image was created.", phase="report")
    return state


BUILD_STEPS: tuple[Step, ...] = (
    validate_output_dir,
    compile_kernel,
    resolve_descriptor,
    resolve_binary_path,
    invoke_bootloader_builder,
    materialize,
    enforce_image_policy,
    report,
)

RUN_STEPS: tuple[Step, ...] = (
    validate_output_dir,
    resolve_descriptor,
    invoke_bootloader_builder,
    materialize,
)


def run_steps(steps: Sequence[Step], state: PipelineState) -> PipelineState:
    for step in steps:
        state.logger.debug("pipeline", f"Running step {step.__name__}", phase="pipeline")
        state = step(state)
    return state


def build(
    options: BuildOptions,
    *,
    config: ToolConfig | None = None,
    logger: StructuredLogger | None = None,
) -> BuildResult:
    state = run_steps(
        BUILD_STEPS,
        PipelineState(
            options=options,
            config=config or ToolConfig.from_env(),
            logger=logger or StructuredLogger(),
        ),
    )
    return BuildResult(
        target=BuildTarget(
            kernel_binary=_required(state.kernel_binary, "kernel_binary"),
            target=options.target,
            out_dir=_required(state.out_dir, "out_dir"),
        ),
        kernel_name=_required(state.kernel_name, "kernel_name"),
        images=_required(state.images, "images"),
    )


def prepare_run_image(
    options: RunOptions,
    *,
    config: ToolConfig | None = None,
    logger: StructuredLogger | None = None,
) -> Path:
    """Build the BIOS disk image for an already compiled kernel binary."""
    kernel_binary = _canonical_binary(options.binary_path)
    out_dir = options.out_dir if options.out_dir is not None else kernel_binary.parent
    state = run_steps(
        RUN_STEPS,
        PipelineState(
            options=BuildOptions(
                out_dir=out_dir,
                target=DEFAULT_TARGET,
                build_command="",
                bios=True,
                uefi=False,
                create_out=options.create_out,
                missing_images="error",
            ),
            config=config or ToolConfig.from_env(),
            logger=logger or StructuredLogger(),
            kernel_name=kernel_binary.stem,
            kernel_binary=kernel_binary,
        ),
    )
    return require_image(_required(state.images, "images"), "bios")


def run(
    options: RunOptions,
    *,
    config: ToolConfig | None = None,
    logger: StructuredLogger | None = None,
) -> NoReturn:
    config = config or ToolConfig.from_env()
    logger = logger or StructuredLogger()
    disk_image = prepare_run_image(options, config=config, logger=logger)
    run_vm(
        disk_image,
        options.run_args,
        options.timeout,
        qemu_binary=config.qemu,
        logger=logger,
    )


def _canonical_binary(binary_path: Path) -> Path:
    try:
        return binary_path.resolve(strict=True)
    except OSError as exc:
        raise ResolutionError(
            "Kernel binary not found.",
            hint="Check the package name and --target, and that the kernel build produced an .elf.",
            context={"kernel_binary": str(binary_path)},
        ) from exc


def _required(value: T | None, name: str) -> T:
    if value is None:
        raise ResolutionError(
            f"Pipeline state has no {name}.",
            hint="A step ran before the step that resolves it.",
            context={"field": name},
        )
    return value
