"""
Calendar-aware age calculation.

Age is counted in completed birthdays, never by dividing a day count by
365.25. A person born on 29 February has their birthday considered passed
from 1 March in common years.
"""

from datetime import date
from typing import Optional

from .constants import ADULT_AGE


def age_from_birth_date(birth_date: date, reference_date: Optional[date] = None) -> int:
    """
    Compute age in completed years.

    Parameters
    ----------
    birth_date : date
        Date of birth.
    reference_date : Optional[date], default=None
        Date at which age is evaluated. Defaults to today.

    Returns
    -------
    int
        ``reference.year - birth.year``, minus one if the birthday has not
        yet occurred in the reference year.

    Raises
    ------
    ValueError
        If ``birth_date`` lies after ``reference_date``.

    Examples
    --------
    >>> age_from_birth_date(date(2006, 3, 15), date(2024, 3, 14))
    17
    >>> age_from_birth_date(date(2000, 2, 29), date(2024, 2, 28))
    23
    """
    reference = reference_date or date.today()
    if birth_date > reference:
        raise ValueError("birth_date lies after reference_date")

    age = reference.year - birth_date.year
    if (reference.month, reference.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def is_adult(
    birth_date: date,
    reference_date: Optional[date] = None,
    threshold: int = ADULT_AGE,
) -> bool:
    """Return True when the age at ``reference_date`` is at least ``threshold``."""
    return age_from_birth_date(birth_date, reference_date) >= threshold
