# digicard/apple/packager.py
"""
PassPackager - signed .pkpass archives.

A .pkpass is a zip holding pass.json, the image files, a manifest.json of
SHA-1 digests over every file, and a detached PKCS#7 signature of the
manifest made with the pass type certificate. The Apple WWDR intermediate
certificate is embedded in the signature so devices can build the chain.
"""

import hashlib
import io
import json
import logging
import zipfile
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.serialization import pkcs7, pkcs12

from digicard.errors import PackagingError

logger = logging.getLogger(__name__)

PASS_FILENAME = "pass.json"
MANIFEST_FILENAME = "manifest.json"
SIGNATURE_FILENAME = "signature"


def load_certificate(path: str) -> x509.Certificate:
    """Load a PEM or DER certificate."""
    data = Path(path).read_bytes()
    try:
        return x509.load_pem_x509_certificate(data)
    except ValueError:
        return x509.load_der_x509_certificate(data)


def build_manifest(files: Dict[str, bytes]) -> Dict[str, str]:
    """SHA-1 hex digest of every file, keyed by archive name."""
    return {name: hashlib.sha1(content).hexdigest() for name, content in files.items()}


class PassPackager:
    """
    Assembles and signs pass archives.

    Usage:
        packager = PassPackager("pass.p12", "secret", "AppleWWDRCAG4.pem")
        data = packager.package(definition, {"icon.png": icon_bytes})
    """

    def __init__(
        self,
        certificate_path: str,
        certificate_password: Optional[str],
        wwdr_certificate_path: str,
    ):
        self.certificate_path = certificate_path
        self.certificate_password = certificate_password
        self.wwdr_certificate_path = wwdr_certificate_path

    def _load_signer(self) -> Tuple[Any, x509.Certificate, x509.Certificate]:
        try:
            p12_data = Path(self.certificate_path).read_bytes()
            password = self.certificate_password.encode() if self.certificate_password else None
            private_key, certificate, _ = pkcs12.load_key_and_certificates(p12_data, password)
        except (OSError, ValueError) as e:
            raise PackagingError(f"Cannot load pass certificate {self.certificate_path}: {e}") from e

        if private_key is None or certificate is None:
            raise PackagingError(f"Pass certificate {self.certificate_path} has no key or certificate")

        try:
            wwdr = load_certificate(self.wwdr_certificate_path)
        except (OSError, ValueError) as e:
            raise PackagingError(
                f"Cannot load WWDR certificate {self.wwdr_certificate_path}: {e}"
            ) from e

        return private_key, certificate, wwdr

    def sign_manifest(self, manifest_json: bytes) -> bytes:
        """Detached DER PKCS#7 signature over the manifest bytes."""
        private_key, certificate, wwdr = self._load_signer()
        try:
            return (
                pkcs7.PKCS7SignatureBuilder()
                .set_data(manifest_json)
                .add_signer(certificate, private_key, hashes.SHA256())
                .add_certificate(wwdr)
                .sign(
                    serialization.Encoding.DER,
                    [pkcs7.PKCS7Options.DetachedSignature, pkcs7.PKCS7Options.Binary],
                )
            )
        except (TypeError, ValueError) as e:
            raise PackagingError(f"Signing pass manifest failed: {e}") from e

    def package(self, definition: Dict[str, Any], files: Dict[str, bytes]) -> bytes:
        """
        Build a signed pass archive.

        Args:
            definition: pass.json content
            files: Additional archive members (images) keyed by filename

        Returns:
            The .pkpass archive bytes.

        Raises:
            PackagingError: If the definition is malformed or signing fails.
        """
        for key in ("passTypeIdentifier", "serialNumber", "teamIdentifier"):
            if not definition.get(key):
                raise PackagingError(f"Pass definition missing '{key}'")

        try:
            pass_json = json.dumps(definition, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise PackagingError(f"Pass definition is not serializable: {e}") from e

        members = {PASS_FILENAME: pass_json}
        members.update(files)

        manifest_json = json.dumps(build_manifest(members), sort_keys=True).encode("utf-8")
        signature = self.sign_manifest(manifest_json)

        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as archive:
            for name, content in members.items():
                archive.writestr(name, content)
            archive.writestr(MANIFEST_FILENAME, manifest_json)
            archive.writestr(SIGNATURE_FILENAME, signature)

        logger.info(f"Packaged pass {definition['serialNumber']} with {len(members)} files")
        return buf.getvalue()
