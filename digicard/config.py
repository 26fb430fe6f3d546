# digicard/config.py
"""
Centralized configuration for Digicard.

Endpoint and asset defaults are read from environment variables so different
deployments can point at different hosts without code changes. Wallet
credentials are grouped in GoogleWalletConfig / AppleWalletConfig, which can be
built directly or loaded from the environment with ``from_env()``.

Usage:
    from digicard.config import GoogleWalletConfig

    config = GoogleWalletConfig.from_env()

Environment Variables:
    DIGICARD_WALLET_SAVE_URL: Save-to-wallet link prefix (default: https://pay.google.com/gp/v/save)
    DIGICARD_WALLET_API: Wallet objects REST base (default: https://walletobjects.googleapis.com/walletobjects/v1)
    DIGICARD_LOGO_URL: Organization logo shown on both cards
    DIGICARD_HTTP_TIMEOUT: Timeout in seconds for every outbound request (default: 10)
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Final, List, Optional

from digicard.errors import ConfigurationError

# =============================================================================
# Endpoint Configuration
# =============================================================================

# Prefix of the deep link handed to the student
WALLET_SAVE_URL: Final[str] = os.getenv(
    "DIGICARD_WALLET_SAVE_URL",
    "https://pay.google.com/gp/v/save"
)

WALLET_API_BASE: Final[str] = os.getenv(
    "DIGICARD_WALLET_API",
    "https://walletobjects.googleapis.com/walletobjects/v1"
)

WALLET_SCOPE: Final[str] = "https://www.googleapis.com/auth/wallet_object.issuer"

# =============================================================================
# Asset Configuration
# =============================================================================

LOGO_URL: Final[str] = os.getenv(
    "DIGICARD_LOGO_URL",
    "https://www.uni-osnabrueck.de/favicon.ico"
)

HTTP_TIMEOUT: Final[float] = float(os.getenv("DIGICARD_HTTP_TIMEOUT", "10"))


# =============================================================================
# Wallet Configurations
# =============================================================================

def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(f"Missing required environment variable: {name}")
    return value


def load_service_account(path: str) -> Dict[str, Any]:
    """
    Load a service account key file.

    Args:
        path: Path to the JSON key downloaded from the cloud console.

    Returns:
        The parsed key material.

    Raises:
        ConfigurationError: If the file is missing or not valid JSON.
    """
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read service account file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Service account file {path} is not valid JSON: {e}") from e


@dataclass
class GoogleWalletConfig:
    """
    Configuration for the generic-object wallet.

    Attributes:
        class_suffix: Groups all issued objects under one generic class
        issuer_id: Issuer account identifier, namespaces object ids
        credentials: Service account key material (client_email, private_key, ...)
        validation_url_template: Template fed to build_validation_url
        origins: Domains allowed to render the save button (JWT origins claim)
        logo_url: Logo image shown on the card
        background_color: Hex card background
        language: Language tag for photo descriptions
    """
    class_suffix: str
    issuer_id: str
    credentials: Dict[str, Any]
    validation_url_template: str
    origins: List[str] = field(default_factory=list)
    logo_url: str = LOGO_URL
    background_color: str = "#4285f4"
    language: str = "de-DE"

    def __post_init__(self):
        if not self.issuer_id:
            raise ConfigurationError("GoogleWalletConfig requires 'issuer_id'")
        if not self.class_suffix:
            raise ConfigurationError("GoogleWalletConfig requires 'class_suffix'")
        for key in ("client_email", "private_key"):
            if not self.credentials or not self.credentials.get(key):
                raise ConfigurationError(f"Service account credentials missing '{key}'")

    @property
    def class_id(self) -> str:
        return f"{self.issuer_id}.{self.class_suffix}"

    @classmethod
    def from_env(cls) -> "GoogleWalletConfig":
        """Build from DIGICARD_GOOGLE_* environment variables."""
        origins = os.getenv("DIGICARD_GOOGLE_ORIGINS", "")
        return cls(
            class_suffix=_require_env("DIGICARD_GOOGLE_CLASS_SUFFIX"),
            issuer_id=_require_env("DIGICARD_GOOGLE_ISSUER_ID"),
            credentials=load_service_account(_require_env("DIGICARD_GOOGLE_CREDENTIALS")),
            validation_url_template=_require_env("DIGICARD_VALIDATION_URL"),
            origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


@dataclass
class AppleWalletConfig:
    """
    Configuration for the packaged-pass wallet.

    Attributes:
        certificate_path: PKCS#12 bundle holding the pass signing certificate and key
        certificate_password: Password of the PKCS#12 bundle
        wwdr_certificate_path: Apple WWDR intermediate certificate (PEM or DER)
        team_identifier: Developer team identifier
        pass_type_identifier: Registered pass type identifier
        organization_name: Organization shown on the lock screen
        validation_url_template: Template fed to build_validation_url
    """
    certificate_path: str
    certificate_password: Optional[str]
    wwdr_certificate_path: str
    team_identifier: str
    pass_type_identifier: str
    organization_name: str
    validation_url_template: str
    logo_url: str = LOGO_URL
    foreground_color: str = "rgb(255, 255, 255)"
    background_color: str = "rgb(66, 133, 244)"

    def __post_init__(self):
        for name in ("certificate_path", "wwdr_certificate_path",
                     "team_identifier", "pass_type_identifier"):
            if not getattr(self, name):
                raise ConfigurationError(f"AppleWalletConfig requires '{name}'")

    @classmethod
    def from_env(cls) -> "AppleWalletConfig":
        """Build from DIGICARD_APPLE_* environment variables."""
        return cls(
            certificate_path=_require_env("DIGICARD_APPLE_CERTIFICATE"),
            certificate_password=os.getenv("DIGICARD_APPLE_CERTIFICATE_PASSWORD"),
            wwdr_certificate_path=_require_env("DIGICARD_APPLE_WWDR_CERTIFICATE"),
            team_identifier=_require_env("DIGICARD_APPLE_TEAM_ID"),
            pass_type_identifier=_require_env("DIGICARD_APPLE_PASS_TYPE_ID"),
            organization_name=os.getenv("DIGICARD_APPLE_ORGANIZATION", ""),
            validation_url_template=_require_env("DIGICARD_VALIDATION_URL"),
        )


# =============================================================================
# Configuration Summary (for debugging)
# =============================================================================

def print_config() -> None:
    """Print current configuration (useful for debugging)."""
    print("Digicard Configuration:")
    print(f"  WALLET_SAVE_URL: {WALLET_SAVE_URL}")
    print(f"  WALLET_API_BASE: {WALLET_API_BASE}")
    print(f"  LOGO_URL:        {LOGO_URL}")
    print(f"  HTTP_TIMEOUT:    {HTTP_TIMEOUT}")


if __name__ == "__main__":
    print_config()
