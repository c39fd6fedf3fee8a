"""Exception hierarchy.

Per-file problems stay inside a validator, per-validator problems stay inside
the orchestrator, and only invocation errors reach the process exit code.
"""


class ValidatorSuiteError(Exception):
    """Base class for all engine errors."""


class UnreadableFileError(ValidatorSuiteError):
    """A file could not be analyzed (oversized, binary, undecodable, or denied)."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class PreconditionError(ValidatorSuiteError):
    """A validator cannot run at all against this project."""


class ConfigError(ValidatorSuiteError):
    pass


class UnknownValidatorError(ValidatorSuiteError):
    pass


class InvalidRootError(ValidatorSuiteError):
    pass
