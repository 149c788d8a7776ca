from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    capture: bool = True,
    log_path: str | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - capture=True collects stdout/stderr; capture=False lets the child write
      straight to the terminal (step scripts print their own progress).
    - log_path appends both streams to that file instead of capturing them.
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s", _fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    child_env = dict(os.environ, **(env or {}))

    try:
        if log_path:
            with open(log_path, "a", encoding="utf-8") as log_file:
                p = subprocess.run(
                    argv_list,
                    input=input_text,
                    text=True,
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                    cwd=cwd,
                    env=child_env,
                )
        else:
            p = subprocess.run(
                argv_list,
                input=input_text,
                text=True,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.PIPE if capture else None,
                cwd=cwd,
                env=child_env,
            )
    except OSError as e:
        if check:
            raise CommandError(f"Unable to run {_fmt_argv(argv_list)}: {e}") from e
        logger.debug("Unable to run %s: %s", _fmt_argv(argv_list), e)
        return CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode != 0:
        raise CommandError(f"Command failed ({p.returncode}): {_fmt_argv(argv_list)}\n{stderr}")

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)


def sudo_cmd(argv: Sequence[str], *, preserve_env: bool = False, **kwargs) -> CmdResult:
    """Run a command through sudo (-E keeps the caller-supplied environment)."""

    prefix = ["sudo", "-E"] if preserve_env else ["sudo"]
    return run_cmd([*prefix, *argv], **kwargs)
