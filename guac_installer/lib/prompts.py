from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from ..console import console, error
from ..errors import InputValidationError

logger = logging.getLogger(__name__)

# (prompt text, secret) -> answer
Reader = Callable[[str, bool], str]


@dataclass(frozen=True)
class RetryPolicy:
    """How often a validated prompt may be re-asked. None means forever."""

    max_attempts: Optional[int] = None

    def attempts(self) -> Iterator[int]:
        n = 0
        while self.max_attempts is None or n < self.max_attempts:
            n += 1
            yield n


def _console_reader(prompt: str, secret: bool) -> str:
    return console.input(prompt, password=secret, markup=False)


class Prompter:
    def __init__(self, read: Optional[Reader] = None, retry: RetryPolicy = RetryPolicy()):
        self._read = read or _console_reader
        self.retry = retry

    def yes_no(self, question: str, *, default: bool) -> bool:
        """Ask a y/n question. Anything but the non-default letter gives the default."""

        hint = "y" if default else "n"
        answer = self._read(f"{question} [y/n] [default {hint}]: ", False).strip().lower()
        if default:
            result = answer != "n"
        else:
            result = answer == "y"
        logger.info("Prompt %r -> %s", question, result)
        return result

    def text(self, question: str, *, default: str = "") -> str:
        suffix = f" [{default}]" if default else ""
        answer = self._read(f"{question}{suffix}: ", False).strip()
        return answer or default

    def required_text(self, question: str, *, complaint: str) -> str:
        for _ in self.retry.attempts():
            answer = self._read(f"{question} : ", False).strip()
            if answer:
                return answer
            error(f"{complaint} Please try again.")
        raise InputValidationError(f"No value given for: {question}")

    def confirmed_secret(self, question: str, confirm: str) -> str:
        """Read a secret twice until both entries match and are non-empty."""

        for _ in self.retry.attempts():
            first = self._read(f"{question}: ", True)
            second = self._read(f"{confirm}: ", True)
            if first and first == second:
                return first
            error("Passwords don't match or can't be null. Please try again.")
        raise InputValidationError(f"No matching non-empty password given for: {question}")
