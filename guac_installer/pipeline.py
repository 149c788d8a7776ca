from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol, Sequence

from .setup_config import SetupConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallCtx:
    """Read-only context handed to every step."""

    cfg: SetupConfig
    dry_run: bool = False

    @property
    def script_dir(self) -> Path:
        return self.cfg.download_path

    @property
    def log_path(self) -> str:
        return self.cfg.install_log

    def script(self, name: str) -> Path:
        return self.script_dir / name


class Step(Protocol):
    """A single install step."""

    step_id: str

    def enabled(self, cfg: SetupConfig) -> bool:
        ...

    def run(self, ctx: InstallCtx) -> None:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ran_steps: List[str]
    skipped_steps: List[str]


def run_pipeline(*, ctx: InstallCtx, steps: Sequence[Step]) -> PipelineResult:
    """Run steps in order. The first exception halts the pipeline; nothing is retried."""

    ran: List[str] = []
    skipped: List[str] = []

    for step in steps:
        if not step.enabled(ctx.cfg):
            logger.info("Skipping step %s (not selected)", step.step_id)
            skipped.append(step.step_id)
            continue

        logger.info("Running step %s", step.step_id)
        try:
            step.run(ctx)
        except Exception:
            logger.exception("Step %s failed; halting", step.step_id)
            raise
        ran.append(step.step_id)

    return PipelineResult(ran_steps=ran, skipped_steps=skipped)
