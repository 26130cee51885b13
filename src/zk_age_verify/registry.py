"""
Registry collaborator seam.

The registry is the external identity authority that turns an encoded
identity number into a date of birth. The pipeline depends only on the
``RegistryClient`` protocol, so a real client can replace the stand-ins here
without touching the pipeline.

``PlaceholderRegistry`` is not a verification source. It derives a synthetic
birth date from a digest of the identity it receives so that development and
tests get stable, varied outcomes without any network access. Sealed tokens
differ on every call, so the placeholder can only answer them when it holds
the registry private key.
"""

import asyncio
import hashlib
from datetime import date
from typing import Callable, Mapping, Optional, Protocol

import structlog
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from .constants import PLACEHOLDER_AGE_SPAN, PLACEHOLDER_MIN_AGE
from .exceptions import PrivacyBoundaryError, RegistryResponseError
from .privacy import open_sealed_box

# Initialize structured logger
logger = structlog.get_logger(__name__)


class RegistryClient(Protocol):
    """Capability returning the birth date registered for an encoded id."""

    name: str

    async def resolve_birth_date(self, encoded_id: str) -> date:
        """
        Resolve a birth date.

        Raises
        ------
        RegistryError
            When the registry cannot answer or answers with unusable data.
        """
        ...


class PlaceholderRegistry:
    """
    Deterministic stand-in for the registry.

    The synthetic birth date is ``PLACEHOLDER_MIN_AGE`` to
    ``PLACEHOLDER_MIN_AGE + PLACEHOLDER_AGE_SPAN - 1`` years before the
    clock's today, with month and day (1-28) also taken from the digest.
    Equal identities therefore resolve to equal dates on the same day.

    Without a private key the digest is taken over the token itself, which is
    only stable for a deterministic encoder. With one, each token is opened
    first and the digest is taken over the plaintext.

    Parameters
    ----------
    simulated_latency : float, default=0.0
        Seconds to suspend before answering, standing in for network time.
    clock : Optional[Callable[[], date]], default=None
        Source of "today". Defaults to ``date.today``.
    private_key : Optional[X25519PrivateKey], default=None
        Registry key for opening ``SealedBoxEncoder`` tokens.
    """

    name = "placeholder"

    def __init__(
        self,
        simulated_latency: float = 0.0,
        clock: Optional[Callable[[], date]] = None,
        private_key: Optional[X25519PrivateKey] = None,
    ) -> None:
        if simulated_latency < 0:
            raise ValueError("simulated_latency cannot be negative")
        self.simulated_latency = simulated_latency
        self._clock = clock or date.today
        self._private_key = private_key

    @property
    def opens_sealed_tokens(self) -> bool:
        return self._private_key is not None

    async def resolve_birth_date(self, encoded_id: str) -> date:
        await asyncio.sleep(self.simulated_latency)

        if not encoded_id:
            raise RegistryResponseError("Empty identity token", registry=self.name)

        subject = encoded_id
        if self._private_key is not None:
            try:
                subject = open_sealed_box(self._private_key, encoded_id)
            except PrivacyBoundaryError:
                raise RegistryResponseError("Identity token could not be opened", registry=self.name)

        digest = hashlib.sha256(subject.encode("utf-8")).digest()
        age_years = PLACEHOLDER_MIN_AGE + digest[0] % PLACEHOLDER_AGE_SPAN
        month = 1 + digest[1] % 12
        day = 1 + digest[2] % 28

        today = self._clock()
        return date(today.year - age_years, month, day)


class StaticRegistry:
    """
    In-memory registry keyed by encoded token.

    Used for fixtures and tests where the birth date must be known exactly.

    Parameters
    ----------
    birth_dates : Mapping[str, date]
        Encoded token to birth date.
    """

    name = "static"

    def __init__(self, birth_dates: Mapping[str, date]) -> None:
        self._birth_dates = dict(birth_dates)

    async def resolve_birth_date(self, encoded_id: str) -> date:
        try:
            birth_date = self._birth_dates[encoded_id]
        except KeyError:
            raise RegistryResponseError("No record for identity token", registry=self.name)

        if not isinstance(birth_date, date):
            raise RegistryResponseError("Record has no usable birth date", registry=self.name)
        return birth_date
