from __future__ import annotations

import logging

from .command import run_cmd

logger = logging.getLogger(__name__)


def replace_tagged_entry(crontab_text: str, entry: str, tag: str) -> str:
    """Drop every line carrying ``# <tag>`` and append ``entry # <tag>``."""

    marker = f"# {tag}"
    kept = [line for line in crontab_text.splitlines() if marker not in line]
    kept.append(f"{entry} {marker}")
    return "\n".join(kept) + "\n"


def read_user_crontab(*, dry_run: bool = False) -> str:
    r = run_cmd(["crontab", "-l"], check=False, dry_run=dry_run)
    if r.returncode != 0:
        # "no crontab for <user>" is the normal first-run case.
        logger.info("No existing crontab (%s)", r.stderr.strip() or r.returncode)
        return ""
    return r.stdout


def install_tagged_entry(entry: str, tag: str, *, dry_run: bool = False) -> str:
    """Install entry in the invoking user's crontab, replacing any previous copy."""

    new_text = replace_tagged_entry(read_user_crontab(dry_run=dry_run), entry, tag)
    run_cmd(["crontab", "-"], input_text=new_text, dry_run=dry_run)
    logger.info("Installed cron entry: %s # %s", entry, tag)
    return new_text
