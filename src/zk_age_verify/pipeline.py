"""
Age verification pipeline.

The pipeline is the only entry point external callers use. It runs:

    START -> FORMAT_CHECKED -> REJECTED
                            -> ENCODED -> RESOLVED -> COMPLETED
                                       \\-> ERRORED (from any later step)

Each step returns a ``StepResult`` and the pipeline branches on it, so every
failure path ends in a ``VerificationResult`` and nothing is raised to the
caller. The plaintext number is dropped once encoded, and the encoded token
and birth date are dropped before the result is built. Logs carry only the
run id, state names and error types.
"""

import asyncio
import functools
import uuid
from datetime import date
from typing import Callable, Optional

import structlog

from . import config
from .age import is_adult
from .checksum import strip_non_digits, validate_identity_number
from .constants import ADULT_AGE
from .data_models import ErrorKind, PipelineState, StepResult, VerificationResult
from .exceptions import (
    AgeVerifyError,
    ConfigurationError,
    RegistryResponseError,
    RegistryTimeoutError,
)
from .privacy import IdentityEncoder, SealedBoxEncoder, build_encoder
from .registry import PlaceholderRegistry, RegistryClient

# Initialize structured logger
logger = structlog.get_logger(__name__)


class AgeVerificationPipeline:
    """
    Orchestrates checksum validation, encoding, registry lookup and age check.

    Instances hold only immutable collaborators, so one pipeline can serve
    any number of concurrent ``verify_age`` calls.

    Parameters
    ----------
    registry : Optional[RegistryClient], default=None
        Birth date source. Defaults to ``PlaceholderRegistry``.
    encoder : Optional[IdentityEncoder], default=None
        Privacy boundary encoder. Defaults to the placeholder encoder.
    clock : Optional[Callable[[], date]], default=None
        Source of the reference date for the age check.
    registry_timeout : Optional[float], default=None
        Seconds to wait for the registry; None or 0 waits indefinitely.
    adult_age : int, default=ADULT_AGE
        Completed years at which a holder counts as an adult.

    Raises
    ------
    ConfigurationError
        If a sealed-box encoder is paired with a placeholder registry that
        cannot open its tokens.

    Examples
    --------
    >>> pipeline = AgeVerificationPipeline()
    >>> result = asyncio.run(pipeline.verify_age("1234"))
    >>> result.to_dict()
    {'success': False, 'message': 'Invalid identity number format'}
    """

    def __init__(
        self,
        registry: Optional[RegistryClient] = None,
        encoder: Optional[IdentityEncoder] = None,
        clock: Optional[Callable[[], date]] = None,
        registry_timeout: Optional[float] = None,
        adult_age: int = ADULT_AGE,
    ) -> None:
        self.registry = registry or PlaceholderRegistry(clock=clock)
        self.encoder = encoder or build_encoder()
        if (
            isinstance(self.encoder, SealedBoxEncoder)
            and isinstance(self.registry, PlaceholderRegistry)
            and not self.registry.opens_sealed_tokens
        ):
            raise ConfigurationError(
                "Placeholder registry needs the registry private key to resolve sealed tokens",
                config_key="REGISTRY_PUBLIC_KEY",
            )
        self.registry_timeout = registry_timeout or None
        self.adult_age = adult_age
        self._clock = clock or date.today

    async def verify_age(self, raw_identity_number: str) -> VerificationResult:
        """
        Decide whether the holder of ``raw_identity_number`` is an adult.

        Parameters
        ----------
        raw_identity_number : str
            Identity number as supplied by the caller; separators allowed.

        Returns
        -------
        VerificationResult
            Rejected for a malformed number, errored for any failure after
            validation, otherwise completed with the age flag.
        """
        run_log = logger.bind(run_id=uuid.uuid4().hex[:12])
        run_log.debug("Pipeline state transition", state=PipelineState.START.value)

        checked = self._check_format(raw_identity_number)
        if not checked.ok:
            return self._finish(run_log, PipelineState.REJECTED, VerificationResult.rejected())
        run_log.debug("Pipeline state transition", state=PipelineState.FORMAT_CHECKED.value)

        encoded = self._encode(checked.value, run_log)
        del checked
        if not encoded.ok:
            return self._finish(run_log, PipelineState.ERRORED, VerificationResult.errored())
        run_log.debug("Pipeline state transition", state=PipelineState.ENCODED.value)

        resolved = await self._resolve_birth_date(encoded.value, run_log)
        del encoded
        if not resolved.ok:
            return self._finish(run_log, PipelineState.ERRORED, VerificationResult.errored())
        run_log.debug("Pipeline state transition", state=PipelineState.RESOLVED.value)

        adult = self._check_age(resolved.value, run_log)
        del resolved
        if not adult.ok:
            return self._finish(run_log, PipelineState.ERRORED, VerificationResult.errored())

        return self._finish(
            run_log, PipelineState.COMPLETED, VerificationResult.completed(adult.value)
        )

    def _check_format(self, raw: str) -> StepResult[str]:
        if not validate_identity_number(raw):
            return StepResult.failure(ErrorKind.FORMAT)
        return StepResult.success(strip_non_digits(raw))

    def _encode(self, digits: str, run_log) -> StepResult[str]:
        try:
            return StepResult.success(self.encoder.encode(digits))
        except Exception as e:
            self._log_step_failure(run_log, "encode", e)
            return StepResult.failure(ErrorKind.PIPELINE)

    async def _resolve_birth_date(self, encoded_id: str, run_log) -> StepResult[date]:
        try:
            lookup = self.registry.resolve_birth_date(encoded_id)
            if self.registry_timeout:
                try:
                    birth_date = await asyncio.wait_for(lookup, timeout=self.registry_timeout)
                except asyncio.TimeoutError:
                    raise RegistryTimeoutError(self.registry_timeout, registry=self.registry.name)
            else:
                birth_date = await lookup

            if not isinstance(birth_date, date):
                raise RegistryResponseError(
                    "Registry returned no birth date", registry=self.registry.name
                )
            return StepResult.success(birth_date)
        except Exception as e:
            self._log_step_failure(run_log, "resolve_birth_date", e)
            return StepResult.failure(ErrorKind.PIPELINE)

    def _check_age(self, birth_date: date, run_log) -> StepResult[bool]:
        try:
            return StepResult.success(is_adult(birth_date, self._clock(), self.adult_age))
        except Exception as e:
            self._log_step_failure(run_log, "check_age", e)
            return StepResult.failure(ErrorKind.PIPELINE)

    def _log_step_failure(self, run_log, step: str, error: Exception) -> None:
        # Exception text may echo its input, so only the type and code are logged
        fields = {"step": step, "error_type": type(error).__name__}
        if isinstance(error, AgeVerifyError):
            fields["error_code"] = error.error_code
        run_log.warning("Verification step failed", **fields)

        if isinstance(error, AgeVerifyError) and not config.is_production():
            run_log.debug("Verification step diagnostics", step=step, **error.to_dict())

    def _finish(
        self, run_log, state: PipelineState, result: VerificationResult
    ) -> VerificationResult:
        run_log.info("Age verification finished", state=state.value, success=result.success)
        return result


@functools.lru_cache(maxsize=1)
def get_default_pipeline() -> AgeVerificationPipeline:
    """
    Build the process-wide pipeline from ``config``.

    Only the placeholder registry is wired in, and it holds no registry
    private key, so identities always cross the boundary with the
    deterministic encoder. A configured ``REGISTRY_PUBLIC_KEY`` is ignored
    with a warning until a registry client that opens sealed tokens is added.
    """
    if config.REGISTRY_PUBLIC_KEY:
        logger.warning(
            "Registry public key ignored by placeholder registry",
            config_key="REGISTRY_PUBLIC_KEY",
            registry=PlaceholderRegistry.name,
        )

    return AgeVerificationPipeline(
        registry=PlaceholderRegistry(
            simulated_latency=config.REGISTRY_SIMULATED_LATENCY_MS / 1000.0
        ),
        encoder=build_encoder(),
        registry_timeout=config.REGISTRY_TIMEOUT_SECONDS,
        adult_age=config.ADULT_AGE_THRESHOLD,
    )


async def verify_age(raw_identity_number: str) -> VerificationResult:
    """Verify age with the default pipeline."""
    return await get_default_pipeline().verify_age(raw_identity_number)
