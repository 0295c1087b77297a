"""Build report export."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import cbor2

from bootimg.errors import OutputWriteError
from bootimg.models import BuildResult


@dataclass(frozen=True, slots=True)
class BuildReport:
    kernel_name: str
    target: str
    kernel_binary: Path
    out_dir: Path
    images: dict[str, Path]
    schema_version: int = 1

    @classmethod
    def from_result(cls, result: BuildResult) -> BuildReport:
        images: dict[str, Path] = {}
        for firmware in result.images.produced():
            image = result.images.image_for(firmware)
            if image is not None:
                images[firmware] = image
        return cls(
            kernel_name=result.kernel_name,
            target=result.target.target,
            kernel_binary=result.target.kernel_binary,
            out_dir=result.target.out_dir,
            images=images,
        )

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self._payload(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self._payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def write(self, path: str | Path) -> Path:
        """Write the report, as CBOR for a ``.cbor`` suffix and JSON otherwise."""
        output_path = Path(path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            if output_path.suffix == ".cbor":
                self.to_cbor(output_path)
            else:
                self.to_json(output_path)
        except OSError as exc:
            raise OutputWriteError(
                "Could not write build report.",
                hint=str(exc),
                context={"path": str(output_path)},
            ) from exc
        return output_path

    def _payload(self) -> dict[str, object]:
        return {
            "schema_version": self.schema_version,
            "kernel": self.kernel_name,
            "target": self.target,
            "kernel_binary": str(self.kernel_binary),
            "out_dir": str(self.out_dir),
            "images": {firmware: str(path) for firmware, path in sorted(self.images.items())},
        }
