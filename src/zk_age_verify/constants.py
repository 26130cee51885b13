"""
Constants for the zk-age-verify system.

This module centralizes the fixed parameters of the verification core: the
Verhoeff checksum tables, the identity number shape, the age threshold and
the user-facing messages. None of these values change at runtime.
"""

from typing import Final, Tuple

# =============================================================================
# Identity Number Shape
# =============================================================================

# Number of decimal digits in an Aadhaar number (11 payload + 1 check digit)
IDENTITY_NUMBER_LENGTH: Final[int] = 12

# =============================================================================
# Verhoeff Checksum Tables
# =============================================================================

# Multiplication table D: Cayley table of the dihedral group D5
VERHOEFF_MULTIPLICATION: Final[Tuple[Tuple[int, ...], ...]] = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9),
    (1, 2, 3, 4, 0, 6, 7, 8, 9, 5),
    (2, 3, 4, 0, 1, 7, 8, 9, 5, 6),
    (3, 4, 0, 1, 2, 8, 9, 5, 6, 7),
    (4, 0, 1, 2, 3, 9, 5, 6, 7, 8),
    (5, 9, 8, 7, 6, 0, 4, 3, 2, 1),
    (6, 5, 9, 8, 7, 1, 0, 4, 3, 2),
    (7, 6, 5, 9, 8, 2, 1, 0, 4, 3),
    (8, 7, 6, 5, 9, 3, 2, 1, 0, 4),
    (9, 8, 7, 6, 5, 4, 3, 2, 1, 0),
)

# Permutation table P, applied cyclically by digit position (i mod 8)
VERHOEFF_PERMUTATION: Final[Tuple[Tuple[int, ...], ...]] = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9),
    (1, 5, 7, 6, 2, 8, 3, 0, 9, 4),
    (5, 8, 0, 3, 7, 9, 6, 1, 4, 2),
    (8, 9, 1, 6, 0, 4, 3, 5, 2, 7),
    (9, 4, 5, 3, 1, 2, 6, 8, 7, 0),
    (4, 2, 8, 6, 5, 7, 3, 9, 0, 1),
    (2, 7, 9, 3, 8, 0, 6, 4, 1, 5),
    (7, 0, 4, 6, 9, 1, 3, 2, 5, 8),
)

# Inverse table: INV[j] is the group inverse of j under D
VERHOEFF_INVERSE: Final[Tuple[int, ...]] = (0, 4, 3, 2, 1, 5, 6, 7, 8, 9)

# =============================================================================
# Age Verification
# =============================================================================

# Minimum age in completed years to be considered an adult
ADULT_AGE: Final[int] = 18

# Placeholder registry: range of synthetic ages (years) it produces
PLACEHOLDER_MIN_AGE: Final[int] = 10
PLACEHOLDER_AGE_SPAN: Final[int] = 50

# =============================================================================
# Result Messages
# =============================================================================

MSG_INVALID_FORMAT: Final[str] = "Invalid identity number format"
MSG_COMPLETED: Final[str] = "Age verification completed successfully"
MSG_FAILED: Final[str] = "Failed to verify age. Please try again."

# Transport-level messages
MSG_AADHAAR_REQUIRED: Final[str] = "Aadhaar number is required"
MSG_INVALID_BODY: Final[str] = "Invalid request body"
MSG_INTERNAL_ERROR: Final[str] = "Internal server error"
MSG_GRAPHQL_STATUS: Final[str] = "zk-age-verify GraphQL API is running"

# =============================================================================
# Privacy Boundary
# =============================================================================

# Replacement text for identity numbers found in log events
REDACTION_PLACEHOLDER: Final[str] = "[REDACTED]"

# HKDF context string for the sealed-box encoder
SEALED_BOX_INFO: Final[bytes] = b"zk-age-verify sealed box v1"

# X25519 public key size in bytes
X25519_KEY_SIZE: Final[int] = 32
