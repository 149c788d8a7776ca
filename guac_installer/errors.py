from __future__ import annotations


class SetupError(RuntimeError):
    """Base for every failure that ends the run with exit code 1."""


class PreconditionError(SetupError):
    pass


class ConfigError(SetupError):
    pass


class ConfigConflictError(ConfigError):
    """Two mutually exclusive options both resolved true."""


class InputValidationError(SetupError):
    pass


class CommandError(SetupError):
    pass


class FetchError(SetupError):
    def __init__(self, failures: dict[str, str]):
        self.failures = dict(failures)
        names = ", ".join(sorted(self.failures))
        super().__init__(f"Failed to download step scripts: {names}")


class PropagationError(SetupError):
    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Unable to update {path}: {reason}")


class StepFailedError(SetupError):
    def __init__(self, step_id: str, script: str, reason: str, log_path: str):
        self.step_id = step_id
        self.script = script
        self.log_path = log_path
        super().__init__(f"{script} FAILED ({reason}). See {log_path}")
