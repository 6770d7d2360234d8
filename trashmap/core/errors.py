"""
Error Types.

Exception hierarchy shared by the services and the view shell.
"""

from typing import Optional


class TrashMapError(Exception):
    """Base class for all application errors."""


class ApiError(TrashMapError):
    """
    Raised when the backend cannot be reached or rejects a request.

    Attributes:
        message: User-facing reason (the backend's ``msg`` when available).
        code: Backend envelope code, or None for transport failures.
    """

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class SearchFailed(ApiError):
    """Raised when a nearby search fails. The marker registry stays untouched."""


class ContributionFailed(ApiError):
    """Raised when submitting a new trash can fails. The draft is kept for retry."""


class InvalidDraftError(TrashMapError, ValueError):
    """Raised when a contribution draft is incomplete or its image is unusable."""
