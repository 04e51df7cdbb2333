"""Custom exceptions for xcmake."""


class TranslatorError(Exception):
    """Base exception for all translator errors."""


class LogReadError(TranslatorError):
    """Raised when the captured build log cannot be opened or read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read build log {path}: {reason}")


class OutputWriteError(TranslatorError):
    """Raised when the rule set cannot be written to its destination."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write rule set {path}: {reason}")


class StepSkipped(TranslatorError):
    """Raised by a step classifier when its record window is incomplete.

    Caught by the translator loop; never escapes translate().
    """
