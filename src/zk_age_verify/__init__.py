"""
zk-age-verify - Privacy-preserving age verification

Answers a single question about the holder of an Aadhaar number, whether they
are an adult, without storing, logging or returning the number, the date of
birth or any other personal data.

The core validates the number's Verhoeff check digit, encodes it at the
privacy boundary, resolves a birth date through a registry collaborator and
reduces everything to one boolean.
"""

__version__ = "1.0.0"

from .checksum import validate_identity_number
from .data_models import VerificationResult
from .pipeline import AgeVerificationPipeline, verify_age

__all__ = [
    "AgeVerificationPipeline",
    "VerificationResult",
    "validate_identity_number",
    "verify_age",
]
