"""
Defines custom exceptions for the application to allow for more specific error handling.
"""

from typing import Optional


class SpotifyQueueError(Exception):
    """Base exception for all application-specific errors."""


class AuthError(SpotifyQueueError):
    """Raised when the client-credentials exchange fails or the clock is invalid."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(message)


class CatalogError(SpotifyQueueError):
    """Raised on a non-200 or malformed response from the Spotify Web API."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(message)


class MediaLookupError(SpotifyQueueError):
    """Raised when the YouTube search fails or returns no results."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class ConfigurationError(SpotifyQueueError):
    """Raised for issues related to configuration loading or validation."""
