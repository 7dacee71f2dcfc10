"""
utils/validation_utils.py

Purpose: Input validation

- International phone number validation
- Phone normalisation for the WhatsApp API
- Masking of phone numbers for logs
"""

from typing import Any

from utils.constants import PHONE_PATTERN


def validate_phone_number(phone: Any) -> bool:
    """
    Validates an international phone number.

    Format: optional leading "+", a first digit 1-9, then 7 to 14 more
    digits. No spaces or separators are accepted.
    Example: +14155552671

    Args:
        phone: Phone number string

    Returns:
        True if valid, False otherwise
    """
    if not isinstance(phone, str) or not phone:
        return False

    # fullmatch so a trailing newline does not slip past "$"
    return PHONE_PATTERN.fullmatch(phone) is not None


def strip_leading_plus(phone: str) -> str:
    """
    Removes a single leading "+" from a phone number.

    WATI expects the receiver number as bare digits with country code.
    """
    if phone.startswith("+"):
        return phone[1:]
    return phone


def mask_phone(phone: str, visible: int = 4) -> str:
    """
    Masks all but the last few digits of a phone number for logging.

    Args:
        phone: Phone number string
        visible: Number of trailing characters left readable

    Returns:
        Masked phone, e.g. "*******2671"
    """
    if not phone:
        return ""

    if len(phone) <= visible:
        return "*" * len(phone)

    return "*" * (len(phone) - visible) + phone[-visible:]
