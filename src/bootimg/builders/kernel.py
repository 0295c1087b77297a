"""Kernel compilation via cargo."""

from __future__ import annotations

from dataclasses import dataclass

from bootimg.builders.base import run_process


@dataclass(slots=True)
class KernelBuilder:
    tool: str = "cargo"

    def command(self, build_command: str) -> tuple[str, ...]:
        return (self.tool, *build_command.split())

    def build(self, build_command: str) -> None:
        run_process(self.command(build_command), builder="kernel")
