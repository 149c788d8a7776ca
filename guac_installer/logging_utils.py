"""The install log.

One file records everything: the orchestrator's decisions and commands
(through the root logger configured here) and the step scripts' own output,
which they append to the same path. Operator-facing text goes through
guac_installer.console, which mirrors each message into this log.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "guacamole_install.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


def _open_install_log(log_path: str) -> tuple[logging.Handler, str]:
    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path), log_path
    except OSError:
        # Home directory not writable (e.g. a read-only NFS home): log beside the operator.
        fallback = str(Path.cwd() / LOG_FILE_NAME)
        return logging.FileHandler(fallback), fallback


def configure_logging(
    log_path: str,
    level: int = logging.DEBUG,
    also_console: bool = False,
) -> str:
    """Attach the install log to the root logger and return its actual path.

    Only the first call has an effect; later calls return the path already in
    use, so a --log override given once stays in force for the whole run.
    """

    root = logging.getLogger()
    root.setLevel(level)

    if getattr(root, "_guac_configured", False):
        return getattr(root, "_guac_log_path", log_path)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    file_handler, chosen_path = _open_install_log(log_path)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    if also_console:
        stream = logging.StreamHandler()
        stream.setFormatter(fmt)
        stream.setLevel(logging.INFO)
        root.addHandler(stream)

    setattr(root, "_guac_configured", True)
    setattr(root, "_guac_log_path", chosen_path)

    logging.getLogger(__name__).info("Install log: %s (requested %s)", chosen_path, log_path)
    return chosen_path


def current_log_path() -> Optional[str]:
    """Path of the install log, or None before configure_logging() has run."""

    return getattr(logging.getLogger(), "_guac_log_path", None)
