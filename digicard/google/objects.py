# digicard/google/objects.py
"""
Generic wallet object schema.

Builders that project a StudentRecord into the JSON shape the wallet objects
REST API accepts for ``genericObject`` and ``genericClass`` resources. Every
call returns a fresh dict; nothing here talks to the network.
"""

from typing import Any, Dict, List

from digicard.config import GoogleWalletConfig
from digicard.record import StudentRecord
from digicard.validation import build_validation_url

# Lifecycle states
STATE_ACTIVE = "ACTIVE"
STATE_EXPIRED = "EXPIRED"

CARD_TITLE_PREFIX = "Studierendenausweis "
MATRICULATION_HEADER = "Matrikelnummer"
VALIDITY_HEADER = "Semesterzeitraum / Gültigkeit"
SEMESTER_PREFIX = "Fachsemester: "


def object_id(config: GoogleWalletConfig, record: StudentRecord) -> str:
    """Remote identifier of the record's wallet object."""
    return f"{config.issuer_id}.{record.require_id()}"


def localized(value: str, language: str = "en-US") -> Dict[str, Any]:
    """LocalizedString with a single default value."""
    return {"defaultValue": {"language": language, "value": value}}


def image(uri: str, description: str, language: str = "en-US") -> Dict[str, Any]:
    """Image referenced by URI; the wallet fetches and renders it itself."""
    return {
        "sourceUri": {"uri": uri},
        "contentDescription": localized(description, language),
    }


def text_module(module_id: str, header: str, body: str) -> Dict[str, str]:
    return {"id": module_id, "header": header, "body": body}


def text_modules(record: StudentRecord) -> List[Dict[str, str]]:
    """Matriculation number, one entry per study course, then the validity period."""
    modules = [text_module("matriculation", MATRICULATION_HEADER, record.matriculation_number)]
    for index, course in enumerate(record.study_courses):
        modules.append(
            text_module(f"course-{index}", course.name, SEMESTER_PREFIX + course.semester)
        )
    modules.append(text_module("validity", VALIDITY_HEADER, record.validity_period))
    return modules


def build_generic_object(
    config: GoogleWalletConfig,
    record: StudentRecord,
    state: str = STATE_ACTIVE,
) -> Dict[str, Any]:
    """
    Build the full generic object for a student.

    Args:
        config: Wallet configuration (issuer, class, branding)
        record: Student to project
        state: Lifecycle state to set

    Returns:
        The genericObject resource as a plain dict.

    Raises:
        RecordError: If the record has no id.
    """
    photo = image(record.photo_url, record.name, config.language)
    return {
        "id": object_id(config, record),
        "classId": config.class_id,
        "state": state,
        "heroImage": photo,
        "textModulesData": text_modules(record),
        "imageModulesData": [
            {"id": "photo", "mainImage": image(record.photo_url, record.name, config.language)}
        ],
        "barcode": {
            "type": "QR_CODE",
            "value": build_validation_url(config.validation_url_template, record),
        },
        "cardTitle": localized(CARD_TITLE_PREFIX + record.institution),
        "header": localized(record.name),
        "hexBackgroundColor": config.background_color,
        "logo": image(config.logo_url, record.institution),
    }


def build_expiry_patch() -> Dict[str, str]:
    """Partial object that moves a wallet object to EXPIRED."""
    return {"state": STATE_EXPIRED}


def build_generic_class(config: GoogleWalletConfig) -> Dict[str, Any]:
    """
    Build the generic class every student object points at.

    The class only carries the id; the card layout falls back to the
    default generic template.
    """
    return {"id": config.class_id}
