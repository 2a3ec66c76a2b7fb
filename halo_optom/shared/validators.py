"""Shared validation utilities"""

import re
from typing import Optional


def validate_id_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize an Indonesian phone number to E.164 format.

    Accepts 08xx..., 628xx... and +628xx... forms.

    Returns:
        Normalized phone number (+628XXXXXXXX)

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    if digits.startswith("62"):
        digits = digits[2:]
    elif digits.startswith("0"):
        digits = digits[1:]

    # Mobile numbers start with 8 and carry 9-12 digits after the country code
    if not digits.startswith("8") or not 9 <= len(digits) <= 12:
        raise ValueError("Phone number must be a valid Indonesian mobile number")

    return f"+62{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_percentage(value: Optional[float]) -> Optional[float]:
    if value is None:
        return value
    if value < 0 or value > 100:
        raise ValueError("Percentage must be between 0 and 100")
    return value
