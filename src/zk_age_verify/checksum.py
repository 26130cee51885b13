"""
Verhoeff checksum validation for identity numbers.

An Aadhaar number is eleven payload digits followed by one Verhoeff check
digit. The check runs the digits from least to most significant through the
dihedral group D5: ``c = D[c][P[i % 8][digit]]`` with ``c`` starting at 0.
A number is valid when ``c`` ends at 0.

Everything here is a pure function of its input and the constant tables in
``constants``; nothing logs or stores the digits it is given.
"""

import re
from typing import Iterable

from .constants import (
    IDENTITY_NUMBER_LENGTH,
    VERHOEFF_INVERSE,
    VERHOEFF_MULTIPLICATION,
    VERHOEFF_PERMUTATION,
)
from .exceptions import IdentityFormatError

# ASCII digits only; str.isdigit would also accept other scripts
_NON_DIGIT = re.compile(r"[^0-9]")
_DIGITS_ONLY = re.compile(r"[0-9]+")


def strip_non_digits(raw: str) -> str:
    """
    Remove every character that is not an ASCII decimal digit.

    Parameters
    ----------
    raw : str
        Input as typed by the user, e.g. ``"2341 2341 2346"``.

    Returns
    -------
    str
        The digit characters of ``raw`` in their original order.
    """
    return _NON_DIGIT.sub("", raw)


def _running_check(digits: Iterable[int], offset: int = 0) -> int:
    c = 0
    for i, value in enumerate(digits):
        c = VERHOEFF_MULTIPLICATION[c][VERHOEFF_PERMUTATION[(i + offset) % 8][value]]
    return c


def verhoeff_checksum(digits: str) -> int:
    """
    Compute the Verhoeff running value for a digit string.

    Parameters
    ----------
    digits : str
        ASCII decimal digits, most significant first. No length rule applies.

    Returns
    -------
    int
        The final value of ``c``; 0 means the string carries a valid check digit.

    Raises
    ------
    IdentityFormatError
        If ``digits`` contains anything other than ASCII decimal digits.
    """
    if not _DIGITS_ONLY.fullmatch(digits):
        raise IdentityFormatError(
            "Checksum input must be a non-empty string of decimal digits",
            reason="non_digit_input",
        )
    return _running_check(int(ch) for ch in reversed(digits))


def validate_identity_number(raw: str) -> bool:
    """
    Check that ``raw`` is a well-formed, checksum-consistent identity number.

    Non-digit characters are stripped first, so spaces and hyphens are
    accepted as separators. The remaining digits must number exactly twelve.

    Parameters
    ----------
    raw : str
        Candidate identity number.

    Returns
    -------
    bool
        True when the digits pass the Verhoeff check.

    Examples
    --------
    >>> validate_identity_number("")
    False
    >>> validate_identity_number("1234")
    False
    """
    if not isinstance(raw, str):
        return False

    digits = strip_non_digits(raw)
    if len(digits) != IDENTITY_NUMBER_LENGTH:
        return False

    return _running_check(int(ch) for ch in reversed(digits)) == 0


def compute_check_digit(payload: str) -> int:
    """
    Compute the Verhoeff check digit to append to ``payload``.

    The payload digits sit one position further from the least significant
    end than they will in the final number, hence the offset of one.

    Parameters
    ----------
    payload : str
        Digits without their check digit, most significant first.

    Returns
    -------
    int
        Check digit in the range 0-9.

    Raises
    ------
    IdentityFormatError
        If ``payload`` is empty or contains non-digit characters.

    Examples
    --------
    >>> compute_check_digit("236")
    3
    """
    if not _DIGITS_ONLY.fullmatch(payload or ""):
        raise IdentityFormatError(
            "Check digit payload must be a non-empty string of decimal digits",
            reason="non_digit_input",
        )
    c = _running_check((int(ch) for ch in reversed(payload)), offset=1)
    return VERHOEFF_INVERSE[c]


def append_check_digit(payload: str) -> str:
    """Return ``payload`` followed by its Verhoeff check digit."""
    return f"{payload}{compute_check_digit(payload)}"
