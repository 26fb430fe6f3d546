"""Validation URLs encoded in the QR code of both cards."""

import logging
from typing import Optional

from digicard.record import StudentRecord

logger = logging.getLogger(__name__)


def _substitute_percent(template: str, value: str) -> Optional[str]:
    """printf-style substitution of the first ``%s``, with ``%%`` as a literal ``%``."""
    segments = template.split("%%")
    for i, segment in enumerate(segments):
        if "%s" in segment:
            segments[i] = segment.replace("%s", value, 1)
            return "%".join(segments)
    return None


def build_validation_url(template: str, record: StudentRecord) -> str:
    """
    Substitute the record id into a validation URL template.

    The template carries a single ``%s`` placeholder (``{}`` is accepted too),
    e.g. ``https://uni.example/verify/%s``. In ``%s`` templates ``%%`` stands
    for a literal percent sign, so ``https://u/%s?q=100%%`` gives
    ``https://u/S1?q=100%``. A template without a placeholder is returned
    unchanged.

    Args:
        template: URL template with one placeholder
        record: Student whose id is inserted

    Returns:
        The per-user validation URL
    """
    url = _substitute_percent(template, record.id)
    if url is not None:
        return url
    if "{}" in template:
        return template.replace("{}", record.id, 1)

    logger.warning(f"Validation URL template has no placeholder: {template}")
    return template
