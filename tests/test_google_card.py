"""
Tests for GoogleCard lifecycle operations.
"""

import base64
import json
from unittest.mock import MagicMock

import pytest
from google.auth.exceptions import RefreshError

from conftest import FakeWalletClient
from digicard import RecordError, RemoteApiError, RemoteNotFound, StudentRecord
from digicard.google import GoogleCard
from digicard.google.client import WalletObjectsClient


def _payload(link: str) -> dict:
    token = link.rsplit("/", 1)[1]
    body = token.split(".")[1]
    return json.loads(base64.urlsafe_b64decode(body + "=" * (-len(body) % 4)))


@pytest.fixture
def card(google_config, wallet_client) -> GoogleCard:
    return GoogleCard(google_config, client=wallet_client)


@pytest.fixture
def existing_card(google_config, existing_wallet_client) -> GoogleCard:
    return GoogleCard(google_config, client=existing_wallet_client)


class TestIssueOrRefresh:
    """Tests for issue_or_refresh()."""

    def test_creates_missing_object(self, card, wallet_client, sample_record):
        """Missing object: one insert, no update."""
        card.issue_or_refresh(sample_record)
        assert wallet_client.count("insert") == 1
        assert wallet_client.count("update") == 0

    def test_updates_existing_object(self, existing_card, existing_wallet_client, sample_record):
        """Existing object: one update, no insert."""
        existing_card.issue_or_refresh(sample_record)
        assert existing_wallet_client.count("update") == 1
        assert existing_wallet_client.count("insert") == 0

    def test_returns_save_link(self, card, sample_record):
        """Link embeds the full object."""
        link = card.issue_or_refresh(sample_record)
        assert link.startswith("https://pay.google.com/gp/v/save/")

        embedded = _payload(link)["payload"]["genericObjects"][0]
        assert embedded["id"] == "3388000000012345678.S1"
        assert embedded["state"] == "ACTIVE"
        assert len(embedded["textModulesData"]) == 3

    def test_remote_object_matches_link(self, card, wallet_client, sample_record):
        """The stored object equals the embedded one."""
        link = card.issue_or_refresh(sample_record)
        stored = wallet_client.objects["3388000000012345678.S1"]
        assert _payload(link)["payload"]["genericObjects"][0] == stored

    def test_transport_error_fails_call(self, google_config, sample_record):
        """Lookup failures are surfaced, nothing is written."""
        client = FakeWalletClient(error=RemoteApiError("quota", status_code=429))
        card = GoogleCard(google_config, client=client)

        with pytest.raises(RemoteApiError):
            card.issue_or_refresh(sample_record)
        assert client.count("insert") == 0

    def test_credential_refresh_failure(self, google_config, sample_record):
        """A failed token refresh fails the call with RemoteApiError."""
        session = MagicMock()
        session.get.side_effect = RefreshError("invalid_grant")
        card = GoogleCard(google_config, client=WalletObjectsClient(session))

        with pytest.raises(RemoteApiError, match="invalid_grant"):
            card.issue_or_refresh(sample_record)
        session.post.assert_not_called()

    def test_blank_id(self, card, wallet_client):
        """Records without id are rejected before any remote call."""
        with pytest.raises(RecordError):
            card.issue_or_refresh(StudentRecord(name="x"))
        assert wallet_client.calls == []

    def test_save_link_has_no_remote_calls(self, card, wallet_client, sample_record):
        """save_link() only signs."""
        card.save_link(sample_record)
        assert wallet_client.calls == []


class TestUpdate:
    """Tests for update()."""

    def test_update_existing(self, existing_card, existing_wallet_client, sample_record):
        existing_card.update(sample_record)
        assert existing_wallet_client.count("update") == 1

    def test_update_missing_raises(self, card, wallet_client, sample_record):
        """Missing object raises RemoteNotFound and creates nothing."""
        with pytest.raises(RemoteNotFound):
            card.update(sample_record)
        assert wallet_client.count("insert") == 0
        assert wallet_client.count("update") == 0


class TestExpire:
    """Tests for expire()."""

    def test_expire_existing(self, existing_card, existing_wallet_client, sample_record):
        """Existing object is patched to EXPIRED and its id returned."""
        result = existing_card.expire(sample_record)

        assert result == "3388000000012345678.S1"
        patches = [c for c in existing_wallet_client.calls if c[0] == "patch"]
        assert patches == [("patch", "3388000000012345678.S1", {"state": "EXPIRED"})]

    def test_expire_missing_raises(self, card, wallet_client, sample_record):
        """Missing object raises RemoteNotFound and sends no patch."""
        with pytest.raises(RemoteNotFound) as exc_info:
            card.expire(sample_record)
        assert exc_info.value.object_id == "3388000000012345678.S1"
        assert wallet_client.count("patch") == 0


class TestEnsureClass:
    """Tests for ensure_class()."""

    def test_creates_missing_class(self, card, wallet_client):
        assert card.ensure_class() is True
        assert "3388000000012345678.student_id" in wallet_client.classes

    def test_keeps_existing_class(self, google_config):
        client = FakeWalletClient(classes=[google_config.class_id])
        assert GoogleCard(google_config, client=client).ensure_class() is False
        assert client.count("insert_class") == 0
