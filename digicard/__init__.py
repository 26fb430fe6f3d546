"""
Digicard - Digital student ID cards for mobile wallets.

This package turns a student record into a save-to-wallet link for the
generic-object wallet and a signed pass archive for the packaged-pass wallet,
and keeps both up to date over the card's lifecycle.
"""

__version__ = "1.0.0"

# Data model
from .record import StudentRecord, StudyCourse
from .validation import build_validation_url

# Configuration
from .config import GoogleWalletConfig, AppleWalletConfig

# Errors
from .errors import (
    DigicardError,
    ConfigurationError,
    RecordError,
    RemoteNotFound,
    RemoteApiError,
    NetworkTimeout,
    FetchError,
    ImageUnsupported,
    PackagingError,
    UnsupportedOperation,
)


# Wallet projections (lazy imports keep the vendor libraries off the import path)
def __getattr__(name):
    """Lazy loading of wallet projections."""
    if name in ("GoogleCard", "WalletObjectsClient", "SaveLinkSigner"):
        from . import google

        return getattr(google, name)
    elif name in ("AppleCard", "PassArchive", "PassPackager"):
        from . import apple

        return getattr(apple, name)
    raise AttributeError(f"module 'digicard' has no attribute '{name}'")


__all__ = [
    "__version__",
    # Data model
    "StudentRecord",
    "StudyCourse",
    "build_validation_url",
    # Configuration
    "GoogleWalletConfig",
    "AppleWalletConfig",
    # Errors
    "DigicardError",
    "ConfigurationError",
    "RecordError",
    "RemoteNotFound",
    "RemoteApiError",
    "NetworkTimeout",
    "FetchError",
    "ImageUnsupported",
    "PackagingError",
    "UnsupportedOperation",
    # Wallets (lazy loaded)
    "GoogleCard",
    "WalletObjectsClient",
    "SaveLinkSigner",
    "AppleCard",
    "PassArchive",
    "PassPackager",
]
