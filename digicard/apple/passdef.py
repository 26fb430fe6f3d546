# digicard/apple/passdef.py
"""
Pass definition (pass.json) for the packaged-pass wallet.

The generic pass style is used: name up front, matriculation number and
validity period below, one back field per study course.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List

from digicard.config import AppleWalletConfig
from digicard.errors import RecordError
from digicard.record import StudentRecord
from digicard.validation import build_validation_url

BARCODE_ENCODING = "iso-8859-1"


def _field(key: str, label: str, value: str) -> Dict[str, str]:
    return {"key": key, "label": label, "value": value}


def back_fields(record: StudentRecord) -> List[Dict[str, str]]:
    return [
        _field(
            f"courses-{index}",
            "Study Course",
            f"{course.name} - Fachsemester:{course.semester}",
        )
        for index, course in enumerate(record.study_courses)
    ]


def barcode_message(config: AppleWalletConfig, record: StudentRecord) -> str:
    """
    Validation URL for the QR code.

    Raises:
        RecordError: If the URL cannot be represented in ISO-8859-1, the
            single-byte encoding the pass barcode declares.
    """
    message = build_validation_url(config.validation_url_template, record)
    try:
        message.encode(BARCODE_ENCODING)
    except UnicodeEncodeError as e:
        raise RecordError(f"Barcode message is not {BARCODE_ENCODING} encodable: {message!r}") from e
    return message


def build_pass_definition(config: AppleWalletConfig, record: StudentRecord) -> Dict[str, Any]:
    """
    Build pass.json for a student.

    Args:
        config: Wallet configuration (identifiers, branding)
        record: Student to project

    Returns:
        The pass definition as a plain dict.

    Raises:
        RecordError: If the record has no id or the barcode cannot be encoded.
    """
    return {
        "formatVersion": 1,
        "passTypeIdentifier": config.pass_type_identifier,
        "serialNumber": record.require_id(),
        "teamIdentifier": config.team_identifier,
        "organizationName": config.organization_name,
        "description": f"Student ID for {record.name}",
        "logoText": record.institution,
        "foregroundColor": config.foreground_color,
        "backgroundColor": config.background_color,
        "barcodes": [
            {
                "message": barcode_message(config, record),
                "format": "PKBarcodeFormatQR",
                "messageEncoding": BARCODE_ENCODING,
            }
        ],
        "generic": {
            "primaryFields": [_field("name", "Name", record.name)],
            "secondaryFields": [
                _field("matriculation", "Matriculation Number", record.matriculation_number)
            ],
            "auxiliaryFields": [_field("validity", "Valid", record.validity_period)],
            "backFields": back_fields(record),
        },
    }


def void_pass_definition(definition: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a pass definition marked as voided and expired now."""
    voided = dict(definition)
    voided["voided"] = True
    voided["expirationDate"] = datetime.now(timezone.utc).replace(microsecond=0).isoformat()
    return voided
