"""
Exception types raised by the dashboard services
"""


class DashboardError(Exception):
    """Base class for all dashboard errors."""


class ConfigurationError(DashboardError):
    """Required configuration (e.g. storage credentials) is missing."""


class StorageError(DashboardError):
    """The object store could not be listed or read."""

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key


class ReportNotFoundError(DashboardError):
    """No stored files match the requested run."""

    def __init__(self, run_id: str):
        super().__init__(f"No files found for runId: {run_id}")
        self.run_id = run_id


class AuthenticationError(DashboardError):
    """Login credentials were rejected."""


class TokenError(DashboardError):
    """Bearer token is missing or invalid."""

    def __init__(self, message: str, status_code: int = 403):
        super().__init__(message)
        self.status_code = status_code
