"""Policy for requested disk images the bootloader builder did not produce."""

from __future__ import annotations

from pathlib import Path

from bootimg.errors import MissingImageError
from bootimg.models import DiskImageSet, Firmware, MissingImagePolicy
from bootimg.observability import StructuredLogger


def ensure_images_present(
    *,
    images: DiskImageSet,
    requested: tuple[Firmware, ...],
    policy: MissingImagePolicy,
    logger: StructuredLogger,
) -> None:
    missing = images.missing(requested)
    if not missing or policy == "allow":
        return
    if policy == "error":
        raise MissingImageError(
            "Bootloader builder did not produce the requested disk image(s).",
            hint="Check the bootloader builder output, or pass --missing-images warn.",
            context={
                "missing": ", ".join(missing),
                "requested": ", ".join(requested),
            },
        )
    for firmware in missing:
        logger.warning(
            "ensure_images_present",
            f"No {firmware} image was produced.",
            phase="policy",
            firmware=firmware,
        )


def require_image(images: DiskImageSet, firmware: Firmware) -> Path:
    image = images.image_for(firmware)
    if image is None:
        raise MissingImageError(
            f"Bootable {firmware} image not found.",
            hint="The bootloader builder finished without writing the image.",
            context={"firmware": firmware},
        )
    return image
