"""
Contact and credential helpers used by account flows.
"""

import re
import secrets
import string

from django.conf import settings

PASSWORD_ALPHABET = string.ascii_letters + string.digits


def format_phone_number(contact: str, country_code: str = None) -> str:
    """
    Normalise a local phone number to international format for the SMS gateway.

    "082 123 4567" -> "+27821234567", "27821234567" -> "+27821234567".

    Args:
        contact: Phone number as typed by the user
        country_code: Prefix to apply, defaults to settings.SMS_COUNTRY_CODE

    Returns:
        The number with a leading country code
    """
    country_code = country_code or getattr(settings, "SMS_COUNTRY_CODE", "+27")
    digits = re.sub(r"\D", "", contact or "")
    bare_code = country_code.lstrip("+")

    if digits.startswith("0"):
        return country_code + digits[1:]
    if digits.startswith(bare_code):
        return "+" + digits
    return country_code + digits


def generate_random_password(length: int = None) -> str:
    """Random alphanumeric password for resets."""
    length = length or getattr(settings, "UNILIFT_RESET_PASSWORD_LENGTH", 8)
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
