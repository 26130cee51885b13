"""
Privacy boundary for identity numbers.

The encode step marks the point past which the plaintext identity number may
no longer be written anywhere: not to a log, not to an error message, not to
a persisted record. Everything downstream handles only the encoded token.

Two encoders are provided. ``Base64Encoder`` is a reversible placeholder used
when no registry key is configured. ``SealedBoxEncoder`` seals the number to
the registry's X25519 public key (ephemeral X25519, HKDF-SHA256,
ChaCha20-Poly1305) so that only the registry can open it. Both expose the same
``encode(str) -> str`` interface and hold no private key material.
"""

import base64
import binascii
from typing import Optional, Protocol

import structlog
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import (
    X25519PrivateKey,
    X25519PublicKey,
)
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .constants import SEALED_BOX_INFO, X25519_KEY_SIZE
from .exceptions import ConfigurationError, PrivacyBoundaryError

# Initialize structured logger
logger = structlog.get_logger(__name__)

# A fresh key is derived per message, so a fixed nonce is never reused
_NONCE = b"\x00" * 12


class IdentityEncoder(Protocol):
    """Anything that turns a plaintext identity number into an opaque token."""

    name: str

    def encode(self, plaintext: str) -> str:
        ...


class Base64Encoder:
    """
    Placeholder encoder: URL-safe base64 of the UTF-8 bytes.

    This is an encoding, not encryption. It keeps the call-site contract
    (opaque string out, same output for the same input, no state) while no
    registry key is available.
    """

    name = "base64"

    def encode(self, plaintext: str) -> str:
        try:
            return base64.urlsafe_b64encode(plaintext.encode("utf-8")).decode("ascii")
        except (AttributeError, UnicodeEncodeError):
            raise PrivacyBoundaryError("Identity number could not be encoded", encoder=self.name)


def _raw_public_bytes(public_key: X25519PublicKey) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw
    )


def _derive_key(shared_secret: bytes, ephemeral_public: bytes, recipient_public: bytes) -> bytes:
    return HKDF(
        algorithm=hashes.SHA256(),
        length=32,
        salt=ephemeral_public + recipient_public,
        info=SEALED_BOX_INFO,
    ).derive(shared_secret)


class SealedBoxEncoder:
    """
    Anonymous public-key sealed box addressed to the registry.

    Each call generates an ephemeral X25519 key pair, agrees a shared secret
    with the registry key, derives a one-time ChaCha20-Poly1305 key through
    HKDF-SHA256 and discards the ephemeral private key. The token is
    ``base64url(ephemeral_public || ciphertext)``.

    Parameters
    ----------
    public_key : X25519PublicKey
        The registry's public key.

    Examples
    --------
    >>> encoder = SealedBoxEncoder.from_base64(registry_key_b64)
    >>> token = encoder.encode("234123412346")
    """

    name = "sealed_box"

    def __init__(self, public_key: X25519PublicKey) -> None:
        self._public_key = public_key
        self._public_bytes = _raw_public_bytes(public_key)

    @classmethod
    def from_base64(cls, public_key_b64: str) -> "SealedBoxEncoder":
        """
        Build an encoder from a base64 (standard or URL-safe) raw X25519 key.

        Raises
        ------
        ConfigurationError
            If the key does not decode to exactly 32 bytes.
        """
        try:
            raw = base64.b64decode(public_key_b64.strip(), altchars=b"-_", validate=True)
        except (binascii.Error, ValueError):
            raise ConfigurationError(
                "Registry public key is not valid base64", config_key="REGISTRY_PUBLIC_KEY"
            )
        if len(raw) != X25519_KEY_SIZE:
            raise ConfigurationError(
                f"Registry public key must be {X25519_KEY_SIZE} bytes, got {len(raw)}",
                config_key="REGISTRY_PUBLIC_KEY",
            )
        return cls(X25519PublicKey.from_public_bytes(raw))

    def encode(self, plaintext: str) -> str:
        try:
            ephemeral = X25519PrivateKey.generate()
            ephemeral_public = _raw_public_bytes(ephemeral.public_key())
            key = _derive_key(
                ephemeral.exchange(self._public_key), ephemeral_public, self._public_bytes
            )
            ciphertext = ChaCha20Poly1305(key).encrypt(_NONCE, plaintext.encode("utf-8"), None)
        except (AttributeError, UnicodeEncodeError, ValueError):
            raise PrivacyBoundaryError("Identity number could not be sealed", encoder=self.name)

        return base64.urlsafe_b64encode(ephemeral_public + ciphertext).decode("ascii")


def open_sealed_box(private_key: X25519PrivateKey, token: str) -> str:
    """
    Open a token produced by ``SealedBoxEncoder``.

    This is the registry-side counterpart; the verification core never holds
    the private key. It exists for registry fixtures and tests.

    Raises
    ------
    PrivacyBoundaryError
        If the token is malformed or was not sealed to ``private_key``.
    """
    try:
        blob = base64.urlsafe_b64decode(token.encode("ascii"))
        ephemeral_public, ciphertext = blob[:X25519_KEY_SIZE], blob[X25519_KEY_SIZE:]
        shared = private_key.exchange(X25519PublicKey.from_public_bytes(ephemeral_public))
        key = _derive_key(shared, ephemeral_public, _raw_public_bytes(private_key.public_key()))
        return ChaCha20Poly1305(key).decrypt(_NONCE, ciphertext, None).decode("utf-8")
    except (binascii.Error, ValueError, InvalidTag, UnicodeDecodeError):
        raise PrivacyBoundaryError("Sealed token could not be opened", encoder="sealed_box")


def build_encoder(public_key_b64: Optional[str] = None) -> IdentityEncoder:
    """
    Select the encoder for the configured registry key.

    Parameters
    ----------
    public_key_b64 : Optional[str], default=None
        Registry X25519 public key. When absent the placeholder is used.

    Returns
    -------
    IdentityEncoder
        ``SealedBoxEncoder`` when a key is given, otherwise ``Base64Encoder``.
    """
    if public_key_b64:
        encoder: IdentityEncoder = SealedBoxEncoder.from_base64(public_key_b64)
    else:
        encoder = Base64Encoder()

    logger.info("Identity encoder selected", encoder=encoder.name)
    return encoder
