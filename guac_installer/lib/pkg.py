from __future__ import annotations

import logging
import re
from typing import Sequence

from ..console import warn
from .command import CmdResult, run_cmd, sudo_cmd

logger = logging.getLogger(__name__)

SOURCES_LIST_DIR = "/etc/apt/sources.list.d"


def apt_update(*, log_path: str | None = None, dry_run: bool = False) -> bool:
    # A stale mirror should not stop the install; the step scripts refresh again.
    r = sudo_cmd(["apt-get", "update", "-qq"], check=False, log_path=log_path, dry_run=dry_run)
    if r.returncode != 0:
        warn(f"apt-get update failed (exit {r.returncode}); continuing with cached package lists.")
    return r.returncode == 0


def add_universe_repo(*, log_path: str | None = None, dry_run: bool = False) -> bool:
    # Some Ubuntu derivatives ship without universe enabled; minimal images
    # also lack add-apt-repository itself.
    r = sudo_cmd(["add-apt-repository", "-y", "universe"], check=False, log_path=log_path, dry_run=dry_run)
    if r.returncode != 0:
        warn(f"Could not enable the universe repository (exit {r.returncode}); continuing.")
    return r.returncode == 0


def add_apt_source(list_name: str, line: str, *, dry_run: bool = False) -> None:
    """Write a one-line sources.list.d entry (root-owned, hence sudo tee)."""

    path = f"{SOURCES_LIST_DIR}/{list_name}"
    sudo_cmd(["tee", path], input_text=line + "\n", dry_run=dry_run)
    logger.info("Configured apt source %s: %s", path, line)


def apt_has_version(package: str, major: int, *, dry_run: bool = False) -> bool:
    """Return True if apt knows a candidate of package with the given major version."""

    if dry_run:
        return False
    r = run_cmd(["apt-cache", "show", package], check=False)
    if r.returncode != 0:
        return False
    return re.search(rf"^Version: {major}\b", r.stdout, re.MULTILINE) is not None


def apt_remove(
    packages: Sequence[str],
    *,
    log_path: str | None = None,
    dry_run: bool = False,
) -> CmdResult:
    return sudo_cmd(
        ["apt-get", "remove", "-y", *packages],
        check=False,
        log_path=log_path,
        dry_run=dry_run,
    )


def apt_autoremove(*, log_path: str | None = None, dry_run: bool = False) -> CmdResult:
    return sudo_cmd(["apt-get", "-y", "autoremove"], check=False, log_path=log_path, dry_run=dry_run)
