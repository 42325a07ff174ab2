"""Pipeline error types."""

from __future__ import annotations


class PrerequisiteError(RuntimeError):
    """A stage cannot start because an input artifact or tool is missing."""

    def __init__(self, step: str, missing: str, hint: str = ""):
        self.step = step
        self.missing = missing
        self.hint = hint
        message = f"[{step}] Missing prerequisite: {missing}"
        if hint:
            message += f" ({hint})"
        super().__init__(message)
