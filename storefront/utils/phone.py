# storefront/utils/phone.py
import re

from storefront.domain.errors import ValidationError

PHONE_FORMAT_MESSAGE = "Invalid phone format. Example: +7 999 123 45 67"


def normalize_phone(phone: str) -> str:
    """
    Canonical form: 11 digits starting with 7, e.g. 79991234567.
    Any punctuation or spacing is dropped before the check.
    """
    cleaned = re.sub(r"\D", "", phone or "")
    if not cleaned.startswith("7") or len(cleaned) != 11:
        raise ValidationError(PHONE_FORMAT_MESSAGE)
    return cleaned
