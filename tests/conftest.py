"""
Shared pytest fixtures for Digicard tests.
"""

import io
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import requests
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID
from PIL import Image, features

from digicard import AppleWalletConfig, GoogleWalletConfig, StudentRecord
from digicard.google.client import LookupStatus, ObjectLookup


VALIDATION_TEMPLATE = "https://uni.example/verify/%s"
PHOTO_URL = "https://campus.example/photos/S1.webp"
LOGO_URL = "https://uni.example/favicon.ico"


# =============================================================================
# Records
# =============================================================================


@pytest.fixture
def sample_record() -> StudentRecord:
    """Student with one study course."""
    return StudentRecord.from_dict({
        "id": "S1",
        "name": "Jane Doe",
        "institution": "Universität Osnabrück",
        "matriculationNumber": "12345",
        "photoUrl": PHOTO_URL,
        "studyCourses": [{"name": "CS101", "semester": "3"}],
        "semesterStart": "2025-04-01",
        "semesterEnd": "2025-09-30",
    })


# =============================================================================
# Generic-object wallet
# =============================================================================


@pytest.fixture(scope="session")
def rsa_key():
    """RSA key standing in for the service account key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def service_account(rsa_key) -> dict:
    """Service account key material as downloaded from the cloud console."""
    pem = rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    return {
        "type": "service_account",
        "client_email": "wallet@digicard-test.iam.gserviceaccount.com",
        "private_key": pem,
        "token_uri": "https://oauth2.googleapis.com/token",
    }


@pytest.fixture
def google_config(service_account) -> GoogleWalletConfig:
    return GoogleWalletConfig(
        class_suffix="student_id",
        issuer_id="3388000000012345678",
        credentials=service_account,
        validation_url_template=VALIDATION_TEMPLATE,
        origins=["uni.example"],
        logo_url=LOGO_URL,
    )


class FakeWalletClient:
    """In-memory stand-in for WalletObjectsClient that records every call."""

    def __init__(self, existing=(), classes=(), error=None):
        self.objects = {object_id: {"id": object_id} for object_id in existing}
        self.classes = set(classes)
        self.error = error
        self.calls = []

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)

    def _lookup(self, store, resource_id):
        if self.error is not None:
            return ObjectLookup(LookupStatus.TRANSPORT_ERROR, error=self.error)
        if resource_id in store:
            resource = store[resource_id] if isinstance(store, dict) else {"id": resource_id}
            return ObjectLookup(LookupStatus.FOUND, resource=resource)
        return ObjectLookup(LookupStatus.NOT_FOUND)

    def get_object(self, object_id):
        self.calls.append(("get", object_id))
        return self._lookup(self.objects, object_id)

    def insert_object(self, resource):
        self.calls.append(("insert", resource))
        self.objects[resource["id"]] = resource
        return resource

    def update_object(self, object_id, resource):
        self.calls.append(("update", object_id, resource))
        self.objects[object_id] = resource
        return resource

    def patch_object(self, object_id, partial):
        self.calls.append(("patch", object_id, partial))
        self.objects[object_id] = {**self.objects[object_id], **partial}
        return self.objects[object_id]

    def get_class(self, class_id):
        self.calls.append(("get_class", class_id))
        return self._lookup(self.classes, class_id)

    def insert_class(self, resource):
        self.calls.append(("insert_class", resource))
        self.classes.add(resource["id"])
        return resource


@pytest.fixture
def wallet_client() -> FakeWalletClient:
    """Remote store with no objects."""
    return FakeWalletClient()


@pytest.fixture
def existing_wallet_client(google_config) -> FakeWalletClient:
    """Remote store that already holds the sample student's object."""
    return FakeWalletClient(existing=[f"{google_config.issuer_id}.S1"])


# =============================================================================
# Packaged-pass wallet
# =============================================================================


def _self_signed(common_name: str, key) -> x509.Certificate:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )


@pytest.fixture
def pass_certificates(tmp_path, rsa_key) -> dict:
    """PKCS#12 signer bundle and WWDR certificate written to tmp_path."""
    signer_cert = _self_signed("Pass Type ID: pass.example.studentid", rsa_key)
    wwdr_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    wwdr_cert = _self_signed("Test WWDR CA", wwdr_key)

    p12_path = tmp_path / "pass.p12"
    p12_path.write_bytes(
        pkcs12.serialize_key_and_certificates(
            b"pass", rsa_key, signer_cert, None,
            serialization.BestAvailableEncryption(b"secret"),
        )
    )
    wwdr_path = tmp_path / "wwdr.pem"
    wwdr_path.write_bytes(wwdr_cert.public_bytes(serialization.Encoding.PEM))

    return {
        "certificate_path": str(p12_path),
        "certificate_password": "secret",
        "wwdr_certificate_path": str(wwdr_path),
    }


@pytest.fixture
def apple_config(pass_certificates) -> AppleWalletConfig:
    return AppleWalletConfig(
        team_identifier="TEAM123456",
        pass_type_identifier="pass.example.studentid",
        organization_name="Universität Osnabrück",
        validation_url_template=VALIDATION_TEMPLATE,
        logo_url=LOGO_URL,
        **pass_certificates,
    )


@pytest.fixture
def webp_photo() -> bytes:
    """A 300x400 WebP portrait."""
    if not features.check("webp"):
        pytest.skip("Pillow built without WebP support")
    buf = io.BytesIO()
    Image.new("RGB", (300, 400), color="teal").save(buf, format="WEBP")
    return buf.getvalue()


@pytest.fixture
def ico_logo() -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (32, 32), color="navy").save(buf, format="ICO")
    return buf.getvalue()


class FakeHttpSession:
    """requests.Session stand-in serving fixed bodies per URL."""

    def __init__(self, routes):
        self.routes = routes
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        body = self.routes.get(url)
        if body is None:
            raise requests.ConnectionError(f"no route to {url}")
        response = MagicMock()
        response.status_code = 200
        response.content = body
        return response


@pytest.fixture
def http_session(webp_photo, ico_logo) -> FakeHttpSession:
    """Serves the sample photo and logo."""
    return FakeHttpSession({PHOTO_URL: webp_photo, LOGO_URL: ico_logo})
