# digicard/record.py
"""
Student records - the wallet-agnostic card data.

A StudentRecord is built once per issuance or update request and handed to
the wallet projections, which derive their own schemas from it and never keep
a reference.
"""

import json
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Iterable, Tuple

from digicard.errors import RecordError


@dataclass(frozen=True)
class StudyCourse:
    """A study course shown on the card."""

    name: str = ""
    semester: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudyCourse":
        """Create from dictionary."""
        return cls(name=str(data.get("name", "")), semester=str(data.get("semester", "")))


@dataclass(frozen=True)
class StudentRecord:
    """
    Canonical identity-card data for one student.

    Attributes:
        id: Stable identifier, becomes the wallet object suffix and the pass serial number
        name: Display name
        institution: University name
        matriculation_number: Matriculation number
        photo_url: Portrait image (WebP) fetched for the packaged pass
        study_courses: Ordered study courses, may be empty
        semester_start: Start of the validity period (display only)
        semester_end: End of the validity period (display only)
    """
    id: str = ""
    name: str = ""
    institution: str = ""
    matriculation_number: str = ""
    photo_url: str = ""
    study_courses: Tuple[StudyCourse, ...] = field(default_factory=tuple)
    semester_start: str = ""
    semester_end: str = ""

    @property
    def validity_period(self) -> str:
        """Label such as '2025-04-01 - 2025-09-30'."""
        return f"{self.semester_start} - {self.semester_end}"

    def require_id(self) -> str:
        """
        Return the record id, refusing blank ones.

        Raises:
            RecordError: If the id is empty, which would yield a malformed wallet identifier.
        """
        if not self.id:
            raise RecordError("Student record requires a non-empty 'id'")
        return self.id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["study_courses"] = [asdict(c) for c in self.study_courses]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudentRecord":
        """
        Create from dictionary.

        Accepts snake_case, camelCase and the legacy keys used by the
        campus management export ('matrikel', 'imageUrl', 'studycourses').
        Missing fields default to empty values.
        """
        def pick(*keys: str) -> Any:
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return ""

        courses: Iterable[Dict[str, Any]] = pick("study_courses", "studyCourses", "studycourses") or []
        return cls(
            id=str(pick("id")),
            name=str(pick("name")),
            institution=str(pick("institution")),
            matriculation_number=str(pick("matriculation_number", "matriculationNumber", "matrikel")),
            photo_url=str(pick("photo_url", "photoUrl", "imageUrl")),
            study_courses=tuple(StudyCourse.from_dict(c) for c in courses),
            semester_start=str(pick("semester_start", "semesterStart")),
            semester_end=str(pick("semester_end", "semesterEnd")),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "StudentRecord":
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))
