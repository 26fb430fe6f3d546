# digicard/google/card.py
"""
GoogleCard - student IDs in the generic-object wallet.

Each student maps to one generic object ``{issuer_id}.{record.id}``. Issuing
writes the object to the remote store (create or update) and returns a signed
save-to-wallet link that embeds the same object.
"""

import logging
from typing import Any, Dict, Optional

from digicard.config import GoogleWalletConfig
from digicard.errors import RemoteNotFound
from digicard.google.client import LookupStatus, ObjectLookup, WalletObjectsClient
from digicard.google.objects import (
    build_expiry_patch,
    build_generic_class,
    build_generic_object,
    object_id,
)
from digicard.google.signer import SaveLinkSigner
from digicard.record import StudentRecord

logger = logging.getLogger(__name__)


class GoogleCard:
    """
    Issues, refreshes and expires generic wallet objects.

    Usage:
        card = GoogleCard(GoogleWalletConfig.from_env())
        link = card.issue_or_refresh(record)
    """

    def __init__(
        self,
        config: GoogleWalletConfig,
        client: Optional[WalletObjectsClient] = None,
        signer: Optional[SaveLinkSigner] = None,
    ):
        """
        Args:
            config: Wallet configuration
            client: Remote API client (default: authorized from config.credentials)
            signer: Link signer (default: built from config.credentials)
        """
        self.config = config
        self.client = client or WalletObjectsClient.from_service_account(config.credentials)
        self.signer = signer or SaveLinkSigner(
            client_email=config.credentials["client_email"],
            private_key=config.credentials["private_key"],
            origins=config.origins,
        )

    @classmethod
    def from_env(cls) -> "GoogleCard":
        return cls(GoogleWalletConfig.from_env())

    def _lookup(self, remote_id: str) -> ObjectLookup:
        lookup = self.client.get_object(remote_id)
        if lookup.status is LookupStatus.TRANSPORT_ERROR:
            raise lookup.error
        return lookup

    def issue_or_refresh(self, record: StudentRecord) -> str:
        """
        Create or update the student's wallet object and return a save link.

        Args:
            record: Student to issue a card for

        Returns:
            Deep link of the form https://pay.google.com/gp/v/save/<token>

        Raises:
            RecordError: If the record has no id.
            RemoteApiError: If the remote lookup or write fails.
        """
        resource = build_generic_object(self.config, record)
        remote_id = resource["id"]

        if self._lookup(remote_id).found:
            self.client.update_object(remote_id, resource)
        else:
            self.client.insert_object(resource)

        return self.signer.save_link(resource)

    def save_link(self, record: StudentRecord) -> str:
        """Signed save link only, without writing to the remote store."""
        return self.signer.save_link(build_generic_object(self.config, record))

    def update(self, record: StudentRecord) -> Dict[str, Any]:
        """
        Refresh an existing wallet object with the record's current data.

        Raises:
            RemoteNotFound: If the object was never issued.
        """
        resource = build_generic_object(self.config, record)
        remote_id = resource["id"]

        if not self._lookup(remote_id).found:
            raise RemoteNotFound(remote_id)

        return self.client.update_object(remote_id, resource)

    def expire(self, record: StudentRecord) -> str:
        """
        Move the student's wallet object to EXPIRED.

        Returns:
            Identifier of the expired object as reported by the API.

        Raises:
            RemoteNotFound: If the object was never issued.
        """
        remote_id = object_id(self.config, record)

        if not self._lookup(remote_id).found:
            raise RemoteNotFound(remote_id)

        response = self.client.patch_object(remote_id, build_expiry_patch())
        logger.info(f"Expired wallet object {remote_id}")
        return response.get("id", remote_id)

    def ensure_class(self) -> bool:
        """
        Create the generic class if the issuer account does not have it yet.

        Returns:
            True if the class was created, False if it already existed.
        """
        lookup = self.client.get_class(self.config.class_id)
        if lookup.status is LookupStatus.TRANSPORT_ERROR:
            raise lookup.error
        if lookup.found:
            return False

        self.client.insert_class(build_generic_class(self.config))
        return True
