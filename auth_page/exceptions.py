"""
auth_page.exceptions — Errors raised by the deploy driver and preview server.

Each error is raised where the failure happens and turned into an exit code
only by the ``main()`` of the command that hit it.
"""

from __future__ import annotations


class AuthPageError(RuntimeError):
    """Base class for auth page tooling failures."""


class ConfigError(AuthPageError):
    """Raised when an environment variable holds an unusable value."""


class PrerequisiteError(AuthPageError):
    """
    Raised when a deploy prerequisite is missing.

    Attributes:
        hint: Operator-facing follow-up printed under the error line.
    """

    def __init__(self, message: str, *, hint: str = "") -> None:
        super().__init__(message)
        self.hint = hint


class CommandFailedError(AuthPageError):
    """Raised when a delegated AWS CLI command exits non-zero."""

    def __init__(self, *, command: list[str], returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed ({returncode}): {' '.join(command)}")
