"""
Answer normalization and comparison
"""
from typing import Optional


def normalize_answer(text: Optional[str]) -> str:
    """
    Normalize an answer for comparison: trim surrounding whitespace, fold case

    Example:
        >>> normalize_answer("  Paris ")
        'paris'
    """
    if text is None:
        return ""
    return text.strip().casefold()


def is_blank(text: Optional[str]) -> bool:
    """True when nothing is left after trimming"""
    return not normalize_answer(text)


def is_correct(submitted: Optional[str], expected: str) -> bool:
    """Exact match after normalization; a blank submission is never correct"""
    given = normalize_answer(submitted)
    if not given:
        return False
    return given == normalize_answer(expected)
