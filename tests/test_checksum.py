"""Tests for Verhoeff identity number validation."""

import pytest

from conftest import KNOWN_VALID
from zk_age_verify.checksum import (
    append_check_digit,
    compute_check_digit,
    strip_non_digits,
    validate_identity_number,
    verhoeff_checksum,
)
from zk_age_verify.constants import VERHOEFF_MULTIPLICATION, VERHOEFF_PERMUTATION
from zk_age_verify.exceptions import IdentityFormatError


def _table_checksum(digits: str) -> int:
    c = 0
    for i, ch in enumerate(reversed(digits)):
        c = VERHOEFF_MULTIPLICATION[c][VERHOEFF_PERMUTATION[i % 8][int(ch)]]
    return c


@pytest.mark.parametrize(
    "raw",
    ["", "1", "23412341234", "2341234123460", "0" * 24, "abcdefghijkl", "1234abcd5678"],
)
def test_wrong_length_after_stripping_is_invalid(raw):
    assert validate_identity_number(raw) is False


def test_known_valid_number():
    assert validate_identity_number(KNOWN_VALID) is True


@pytest.mark.parametrize("raw", ["2341 2341 2346", "2341-2341-2346", " 2341.2341.2346 "])
def test_separators_are_stripped(raw):
    assert validate_identity_number(raw) is True


def test_non_ascii_digits_are_stripped():
    # Devanagari digits do not count towards the twelve
    assert strip_non_digits("२३४1") == "1"
    assert validate_identity_number("२३४१२३४१२३४६") is False


def test_all_zero_follows_the_checksum():
    assert validate_identity_number("000000000000") is (_table_checksum("000000000000") == 0)


def test_non_string_input_is_invalid():
    assert validate_identity_number(None) is False
    assert validate_identity_number(234123412346) is False


def test_generated_numbers_are_valid(valid_numbers):
    for number in valid_numbers:
        assert validate_identity_number(number)
        assert verhoeff_checksum(number) == 0


def test_single_digit_substitution_is_always_detected(valid_numbers):
    for number in valid_numbers:
        for position in range(len(number)):
            for digit in "0123456789":
                if digit == number[position]:
                    continue
                mutated = number[:position] + digit + number[position + 1:]
                assert validate_identity_number(mutated) is False, (position, digit)


def test_compute_check_digit_reference_value():
    assert compute_check_digit("236") == 3
    assert append_check_digit("23412341234") == KNOWN_VALID


def test_validity_matches_direct_table_computation():
    for raw in ["123456789012", KNOWN_VALID, "999999999999", "111111111111"]:
        assert validate_identity_number(raw) is (_table_checksum(raw) == 0)


@pytest.mark.parametrize("payload", ["", "12a4", "12 34"])
def test_compute_check_digit_rejects_non_digits(payload):
    with pytest.raises(IdentityFormatError):
        compute_check_digit(payload)


def test_verhoeff_checksum_rejects_non_digits():
    with pytest.raises(IdentityFormatError) as excinfo:
        verhoeff_checksum("2341x")
    assert excinfo.value.error_code == "FORMAT_001"
