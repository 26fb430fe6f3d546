# digicard/apple/card.py
"""
AppleCard - student IDs as packaged passes.

There is no server-side object in this ecosystem: issuing and updating both
produce a complete signed archive. A refreshed pass keeps the serial number
(the record id) and pass type identifier, so the wallet app replaces the old
one instead of adding a second card.
"""

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

import requests

from digicard.config import AppleWalletConfig
from digicard.errors import DigicardError, UnsupportedOperation
from digicard.fetch import fetch_bytes
from digicard.apple.images import derive_pass_images, placeholder_png, to_png
from digicard.apple.packager import PassPackager
from digicard.apple.passdef import build_pass_definition, void_pass_definition
from digicard.record import StudentRecord

logger = logging.getLogger(__name__)

MIME_TYPE = "application/vnd.apple.pkpass"
FILE_EXTENSION = "pkpass"
LOGO_FILENAME = "logo.png"


@dataclass
class PassArchive:
    """A signed pass ready to hand to the student."""

    data: bytes
    serial_number: str
    mime_type: str = MIME_TYPE

    @property
    def filename(self) -> str:
        return f"{self.serial_number}.{FILE_EXTENSION}"

    def save(self, path: Union[str, Path]) -> Path:
        """Write the archive to disk and return the path."""
        path = Path(path)
        path.write_bytes(self.data)
        return path


class PassUpdateChannel(Protocol):
    """Delivers a replacement pass to devices that installed the serial number."""

    def push(self, serial_number: str, archive: PassArchive) -> bool:
        ...


class AppleCard:
    """
    Issues and refreshes signed student ID passes.

    Usage:
        card = AppleCard(AppleWalletConfig.from_env())
        archive = card.issue(record)
        archive.save("student.pkpass")
    """

    MIME_TYPE = MIME_TYPE

    def __init__(
        self,
        config: AppleWalletConfig,
        packager: Optional[PassPackager] = None,
        session: Optional[requests.Session] = None,
        update_channel: Optional[PassUpdateChannel] = None,
    ):
        """
        Args:
            config: Wallet configuration
            packager: Archive engine (default: built from the configured certificates)
            session: HTTP session for the photo and logo fetches
            update_channel: Push channel used by expire(); without one expire() is unsupported
        """
        self.config = config
        self.packager = packager or PassPackager(
            config.certificate_path,
            config.certificate_password,
            config.wwdr_certificate_path,
        )
        self.session = session
        self.update_channel = update_channel

    @classmethod
    def from_env(cls) -> "AppleCard":
        return cls(AppleWalletConfig.from_env())

    def _fetch_logo(self) -> bytes:
        try:
            return to_png(fetch_bytes(self.config.logo_url, session=self.session))
        except DigicardError as e:
            logger.warning(f"Logo unavailable, using placeholder: {e}")
            return placeholder_png()

    def _build(self, record: StudentRecord, voided: bool = False) -> PassArchive:
        definition = build_pass_definition(self.config, record)
        if voided:
            definition = void_pass_definition(definition)

        photo = fetch_bytes(record.photo_url, session=self.session)

        files: Dict[str, bytes] = {}
        with tempfile.TemporaryDirectory(prefix="digicard-") as workdir:
            for filename, path in derive_pass_images(photo, workdir).items():
                files[filename] = path.read_bytes()
        files[LOGO_FILENAME] = self._fetch_logo()

        data = self.packager.package(definition, files)
        return PassArchive(data=data, serial_number=definition["serialNumber"])

    def issue(self, record: StudentRecord) -> PassArchive:
        """
        Build and sign a pass for the student.

        Raises:
            RecordError: If the record has no id or an unencodable barcode.
            FetchError / NetworkTimeout: If the photo cannot be retrieved.
            ImageUnsupported: If the photo cannot be decoded.
            PackagingError: If assembling or signing the archive fails.
        """
        archive = self._build(record)
        logger.info(f"Issued pass {archive.serial_number}")
        return archive

    def update(self, record: StudentRecord) -> PassArchive:
        """Re-issue the pass; same serial number, so it replaces the installed one."""
        return self.issue(record)

    def expire(self, record: StudentRecord) -> bool:
        """
        Void the student's pass on their devices.

        Installed passes can only change through a push update, so this needs
        an update channel. A voided copy of the pass is built and pushed.

        Returns:
            The channel's delivery result.

        Raises:
            UnsupportedOperation: If no update channel is configured. The
                installed pass stays valid in that case.
        """
        if self.update_channel is None:
            raise UnsupportedOperation(
                "Packaged passes cannot be expired without a push update channel"
            )

        archive = self._build(record, voided=True)
        delivered = self.update_channel.push(archive.serial_number, archive)
        logger.info(f"Pushed voided pass {archive.serial_number}: delivered={delivered}")
        return delivered
