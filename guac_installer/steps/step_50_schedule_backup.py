from __future__ import annotations

import logging
import shutil

from ..console import info
from ..errors import StepFailedError
from ..fetcher import BACKUP_GUACAMOLE
from ..lib.cron import install_tagged_entry
from ..pipeline import InstallCtx
from ..setup_config import SetupConfig

logger = logging.getLogger(__name__)

BACKUP_SCHEDULE = "0 0 * * 1-5"  # Mon-Fri, midnight
BACKUP_TAG = "backup guacamole"


class ScheduleBackupStep:
    """Move the parameterised backup script next to its backups and cron it."""

    step_id = "50_schedule_backup"

    def enabled(self, cfg: SetupConfig) -> bool:
        return True

    def run(self, ctx: InstallCtx) -> None:
        backup_dir = ctx.cfg.backup_path
        src = ctx.script(BACKUP_GUACAMOLE)
        dst = backup_dir / BACKUP_GUACAMOLE

        if ctx.dry_run:
            logger.info("Would move %s -> %s", src, dst)
        else:
            backup_dir.mkdir(parents=True, exist_ok=True)
            if src.exists():
                shutil.move(str(src), str(dst))
            elif not dst.exists():
                raise StepFailedError(self.step_id, BACKUP_GUACAMOLE, "backup script missing", ctx.log_path)

        install_tagged_entry(f"{BACKUP_SCHEDULE} {dst}", BACKUP_TAG, dry_run=ctx.dry_run)
        info(f"Database backup scheduled ({BACKUP_SCHEDULE}) into {backup_dir}")
