"""Apache Guacamole installer (Python orchestrator for the shell step scripts).

Core design goals:
- Every option resolved before anything is installed
- One frozen configuration handed to every step
- Fail fast, never retry a step
- Centralized logging to the install log
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = []
