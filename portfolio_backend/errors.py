"""
Error taxonomy shared by the services and the HTTP layer.
"""

from __future__ import annotations


class PortfolioError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortfolioError):
    """Malformed or missing input."""

    status_code = 400


class UnauthorizedError(PortfolioError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(PortfolioError):
    status_code = 404


class InternalError(PortfolioError):
    """Unexpected failure in the store or an upstream provider.

    The message given to callers is always generic; the original cause is
    kept on ``__cause__`` for logging.
    """

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


class NotificationError(Exception):
    """Raised by email notifiers. Never surfaced to HTTP callers."""
