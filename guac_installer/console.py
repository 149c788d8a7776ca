"""Operator-facing terminal output.

Informational text is grey, success green, reminders yellow and errors red on
stderr. Each message is mirrored to the install log.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.theme import Theme

logger = logging.getLogger(__name__)

THEME = Theme(
    {
        "info": "grey70",
        "success": "bright_green",
        "warn": "bright_yellow",
        "error": "bright_red",
        "heading": "bold bright_white",
        "dim": "grey50",
    }
)

console = Console(theme=THEME, highlight=False)
err_console = Console(theme=THEME, stderr=True, highlight=False)


def info(message: str) -> None:
    console.print(message, style="info", markup=False)
    logger.info(message)


def success(message: str) -> None:
    console.print(message, style="success", markup=False)
    logger.info(message)


def warn(message: str) -> None:
    console.print(message, style="warn", markup=False)
    logger.warning(message)


def error(message: str) -> None:
    # No wrapping: error lines often end in a log path the operator copies.
    err_console.print(message, style="error", markup=False, soft_wrap=True)
    logger.error(message)


def heading(message: str) -> None:
    console.print()
    console.print(message, style="success", markup=False)


def banner(guac_version: str) -> None:
    console.print()
    console.print(f"Guacamole {guac_version} Auto Installer.", style="heading", markup=False)
    console.print()
