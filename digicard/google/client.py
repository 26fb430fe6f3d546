# digicard/google/client.py
"""
Wallet objects REST client.

Thin wrapper over the generic object and generic class resources. Existence
checks return an explicit ObjectLookup instead of raising, so callers branch
on the lookup status rather than on exception types. Timeouts and auth
failures during a lookup are reported as TRANSPORT_ERROR.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from google.auth.exceptions import GoogleAuthError

from digicard.config import HTTP_TIMEOUT, WALLET_API_BASE, WALLET_SCOPE
from digicard.errors import ConfigurationError, DigicardError, NetworkTimeout, RemoteApiError

logger = logging.getLogger(__name__)


class LookupStatus(str, Enum):
    """Outcome of a remote existence check."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"


@dataclass
class ObjectLookup:
    """Result of WalletObjectsClient.get_object()."""

    status: LookupStatus
    resource: Optional[Dict[str, Any]] = None
    error: Optional[DigicardError] = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND


class WalletObjectsClient:
    """
    Client for the generic object API.

    Example:
        >>> client = WalletObjectsClient.from_service_account(credentials)
        >>> lookup = client.get_object("3388000000012345678.student-1")
        >>> if lookup.found:
        ...     client.patch_object(lookup.resource["id"], {"state": "EXPIRED"})
    """

    def __init__(
        self,
        session: requests.Session,
        base_url: str = WALLET_API_BASE,
        timeout: float = HTTP_TIMEOUT,
    ):
        """
        Initialize the client.

        Args:
            session: Authorized requests session
            base_url: REST base URL
            timeout: Per-request timeout in seconds
        """
        self._session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_service_account(cls, credentials: Dict[str, Any], **kwargs) -> "WalletObjectsClient":
        """
        Build a client authorized with service account key material.

        Raises:
            ConfigurationError: If the key material is rejected.
        """
        from google.auth.transport.requests import AuthorizedSession
        from google.oauth2 import service_account

        try:
            creds = service_account.Credentials.from_service_account_info(
                credentials, scopes=[WALLET_SCOPE]
            )
        except (ValueError, KeyError) as e:
            raise ConfigurationError(f"Invalid service account credentials: {e}") from e

        return cls(AuthorizedSession(creds), **kwargs)

    # -------------------------------------------------------------------------
    # Generic objects
    # -------------------------------------------------------------------------

    def get_object(self, object_id: str) -> ObjectLookup:
        """Look up a generic object; a 404 is reported as NOT_FOUND."""
        return self._lookup("genericObject", object_id)

    def insert_object(self, resource: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Inserting wallet object {resource.get('id')}")
        return self._request("post", self._url("genericObject"), resource)

    def update_object(self, object_id: str, resource: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Updating wallet object {object_id}")
        return self._request("put", self._url("genericObject", object_id), resource)

    def patch_object(self, object_id: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Patching wallet object {object_id}: {sorted(partial)}")
        return self._request("patch", self._url("genericObject", object_id), partial)

    # -------------------------------------------------------------------------
    # Generic classes
    # -------------------------------------------------------------------------

    def get_class(self, class_id: str) -> ObjectLookup:
        return self._lookup("genericClass", class_id)

    def insert_class(self, resource: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Inserting wallet class {resource.get('id')}")
        return self._request("post", self._url("genericClass"), resource)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _url(self, collection: str, resource_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/{collection}"
        if resource_id is not None:
            url = f"{url}/{quote(resource_id, safe='')}"
        return url

    def _lookup(self, collection: str, resource_id: str) -> ObjectLookup:
        try:
            resource = self._request("get", self._url(collection, resource_id))
        except RemoteApiError as e:
            if e.status_code == 404:
                return ObjectLookup(LookupStatus.NOT_FOUND)
            return ObjectLookup(LookupStatus.TRANSPORT_ERROR, error=e)
        except NetworkTimeout as e:
            return ObjectLookup(LookupStatus.TRANSPORT_ERROR, error=e)
        return ObjectLookup(LookupStatus.FOUND, resource=resource)

    def _request(
        self, method: str, url: str, body: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"timeout": self.timeout}
        if body is not None:
            kwargs["json"] = body

        try:
            response = getattr(self._session, method)(url, **kwargs)
        except requests.Timeout as e:
            raise NetworkTimeout(url, self.timeout) from e
        except requests.RequestException as e:
            raise RemoteApiError(f"{method.upper()} {url} failed: {e}") from e
        except GoogleAuthError as e:
            # token refresh happens inside the authorized session
            raise RemoteApiError(f"{method.upper()} {url} authorization failed: {e}") from e

        if response.status_code >= 400:
            raise RemoteApiError(
                f"{method.upper()} {url} returned HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            return {}
