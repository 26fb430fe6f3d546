"""
Digicard error hierarchy.

Every failure surfaced by the wallet projections derives from DigicardError,
so callers can catch the whole family or branch on the specific kind.
"""

from typing import Optional


class DigicardError(Exception):
    """Base exception for Digicard errors."""

    pass


class ConfigurationError(DigicardError):
    """Raised when credentials, certificates or options are missing or malformed."""

    pass


class RecordError(DigicardError, ValueError):
    """Raised when a student record cannot be projected into a wallet schema."""

    pass


class RemoteNotFound(DigicardError):
    """Raised when the wallet object does not exist in the remote store."""

    def __init__(self, object_id: str):
        super().__init__(f"Wallet object not found: {object_id}")
        self.object_id = object_id


class RemoteApiError(DigicardError):
    """Raised on transport, auth or quota failures from the wallet object API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkTimeout(DigicardError):
    """Raised when a remote call exceeds its configured timeout."""

    def __init__(self, url: str, timeout: float):
        super().__init__(f"Request to {url} timed out after {timeout}s")
        self.url = url
        self.timeout = timeout


class FetchError(DigicardError):
    """Raised when a remote asset (photo, logo) cannot be retrieved."""

    pass


class ImageUnsupported(DigicardError):
    """Raised when the source image cannot be decoded by the imaging library."""

    pass


class PackagingError(DigicardError):
    """Raised when the pass archive cannot be assembled or signed."""

    pass


class UnsupportedOperation(DigicardError):
    """Raised when a wallet ecosystem cannot perform the requested lifecycle step."""

    pass
