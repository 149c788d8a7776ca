from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from ..console import console
from ..errors import StepFailedError
from .command import sudo_cmd

if TYPE_CHECKING:
    from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


def run_step_script(
    ctx: "InstallCtx",
    step_id: str,
    name: str,
    args: Sequence[str] = (),
    *,
    tee_to_log: bool = False,
) -> None:
    """Run a downloaded step script as root with the resolved config as its environment.

    tee_to_log captures the script's output, echoes it and appends it to the
    install log; otherwise the script writes to the terminal directly.
    """

    path = ctx.script(name)
    if not ctx.dry_run and not path.is_file():
        raise StepFailedError(step_id, name, f"script missing from {ctx.script_dir}", ctx.log_path)

    r = sudo_cmd(
        [str(path), *args],
        preserve_env=True,
        check=False,
        env=ctx.cfg.as_env(),
        cwd=str(ctx.script_dir),
        capture=tee_to_log,
        dry_run=ctx.dry_run,
    )

    if tee_to_log and r.stdout:
        console.out(r.stdout, end="", highlight=False)
        with open(ctx.log_path, "a", encoding="utf-8") as log_file:
            log_file.write(r.stdout)

    if r.returncode != 0:
        raise StepFailedError(step_id, name, f"exit status {r.returncode}", ctx.log_path)
    logger.info("Step script %s completed", name)
