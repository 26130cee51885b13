"""Tests for calendar-aware age calculation."""

from datetime import date, timedelta

import pytest

from zk_age_verify.age import age_from_birth_date, is_adult


@pytest.mark.parametrize(
    "birth, reference, expected",
    [
        (date(2006, 3, 15), date(2024, 3, 14), 17),
        (date(2006, 3, 15), date(2024, 3, 15), 18),
        (date(2000, 2, 29), date(2024, 2, 28), 23),
        (date(2000, 2, 29), date(2024, 3, 1), 24),
        (date(2000, 2, 29), date(2023, 2, 28), 22),
        (date(1990, 12, 31), date(2024, 1, 1), 33),
        (date(2024, 6, 1), date(2024, 6, 1), 0),
    ],
)
def test_age_from_birth_date(birth, reference, expected):
    assert age_from_birth_date(birth, reference) == expected


def test_reference_defaults_to_today():
    today = date.today()
    assert age_from_birth_date(today) == 0


def test_birth_after_reference_is_rejected():
    with pytest.raises(ValueError):
        age_from_birth_date(date(2024, 6, 2), date(2024, 6, 1))


def test_is_adult_threshold():
    reference = date(2024, 3, 15)
    assert is_adult(date(2006, 3, 15), reference) is True
    assert is_adult(date(2006, 3, 16), reference) is False
    assert is_adult(date(2006, 3, 16), reference, threshold=17) is True


def test_not_a_day_count_approximation():
    # Only four leap days fall in this span, so days / 365.25 is still below 18
    birth = date(2001, 3, 1)
    reference = date(2019, 3, 1)
    assert (reference - birth) / timedelta(days=365.25) < 18
    assert age_from_birth_date(birth, reference) == 18
