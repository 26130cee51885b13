from datetime import date

import pytest
import structlog

from zk_age_verify.checksum import append_check_digit
from zk_age_verify.privacy import Base64Encoder

REFERENCE_DAY = date(2024, 6, 1)

# Verhoeff-valid number, checked by hand against the tables
KNOWN_VALID = "234123412346"


class CountingEncoder(Base64Encoder):
    """Placeholder encoder that records how often it was called."""

    def __init__(self) -> None:
        self.calls = 0

    def encode(self, plaintext: str) -> str:
        self.calls += 1
        return super().encode(plaintext)


@pytest.fixture
def reference_day():
    return REFERENCE_DAY


@pytest.fixture
def clock():
    return lambda: REFERENCE_DAY


@pytest.fixture
def counting_encoder():
    return CountingEncoder()


@pytest.fixture
def valid_numbers():
    payloads = ["23412341234", "49918842307", "70001234567", "31415926535", "10000000000"]
    return [append_check_digit(p) for p in payloads]


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()
