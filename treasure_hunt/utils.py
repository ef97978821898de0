"""
Utility functions
"""
from typing import Optional

from treasure_hunt.errors import ValidationError


INVALID_CODE = "Invalid QR code."

# Longest position accepted from outside; keeps int() well clear of its digit limit
MAX_POSITION_DIGITS = 9


def is_plain_number(text: Optional[str], max_digits: int = MAX_POSITION_DIGITS) -> bool:
    """True for a short run of ASCII digits only (no signs, superscripts or other scripts)"""
    if not text or len(text) > max_digits:
        return False
    return text.isascii() and text.isdigit()


def parse_position(raw: Optional[str]) -> int:
    """
    Parse the clue position carried by a QR code URL

    Args:
        raw: Value of the ``clue`` query parameter, None if absent

    Returns:
        Position as a positive integer

    Raises:
        ValidationError: If the value is absent, non-numeric or below 1

    Example:
        >>> parse_position("7")
        7
    """
    if raw is None:
        raise ValidationError(INVALID_CODE)

    text = str(raw).strip()
    if not is_plain_number(text):
        raise ValidationError(INVALID_CODE)

    position = int(text)
    if position < 1:
        raise ValidationError(INVALID_CODE)

    return position
