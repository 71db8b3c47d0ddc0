"""Domain errors for queuer-sql."""

from typing import Optional


class InstallError(RuntimeError):
    """Raised when a group of SQL functions could not be installed."""

    def __init__(self, message: str, group: Optional[str] = None, phase: Optional[str] = None):
        super().__init__(message)
        self.group = group
        self.phase = phase


class DatabaseError(InstallError):
    """The database driver failed while probing the catalog or executing a payload."""


class IncompleteInstallError(InstallError):
    """The payload ran without errors but expected functions are still missing."""
