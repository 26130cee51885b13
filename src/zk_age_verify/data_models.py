"""
Data models for the zk-age-verify system.

This module defines the value objects that flow through the verification
pipeline. ``VerificationResult`` is the only object that ever leaves the
core; it is frozen so that nothing downstream can attach identity data to it
after construction.

The step-level ``StepResult`` makes each pipeline stage report its outcome
explicitly instead of relying on exceptions propagating across stages.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from .constants import MSG_COMPLETED, MSG_FAILED, MSG_INVALID_FORMAT

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Caller-recoverable failure categories."""

    FORMAT = "format"
    PIPELINE = "pipeline"
    TRANSPORT = "transport"


class PipelineState(str, Enum):
    """States of a single verification run."""

    START = "start"
    FORMAT_CHECKED = "format_checked"
    REJECTED = "rejected"
    ENCODED = "encoded"
    RESOLVED = "resolved"
    COMPLETED = "completed"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in (
            PipelineState.REJECTED,
            PipelineState.COMPLETED,
            PipelineState.ERRORED,
        )


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """
    Outcome of one pipeline step.

    Exactly one of ``value`` and ``error_kind`` is meaningful: a successful
    step carries a value, a failed step carries the error kind.

    Parameters
    ----------
    value : Optional[T]
        Step output when the step succeeded.
    error_kind : Optional[ErrorKind]
        Failure category when the step failed.
    """

    value: Optional[T] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, value: T) -> "StepResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error_kind: ErrorKind) -> "StepResult[T]":
        return cls(error_kind=error_kind)


@dataclass(frozen=True)
class VerificationResult:
    """
    Result of an age verification request.

    Parameters
    ----------
    success : bool
        Whether the pipeline completed without a structural or transport
        error. This is distinct from the age outcome.
    is_adult : Optional[bool], default=None
        Age flag, only set when ``success`` is True.
    message : Optional[str], default=None
        Human-readable status. Never contains the identity number, a birth
        date or any registry identifier.

    Examples
    --------
    >>> VerificationResult.completed(True).to_dict()
    {'success': True, 'isAdult': True, 'message': 'Age verification completed successfully'}
    """

    success: bool
    is_adult: Optional[bool] = None
    message: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.success and self.is_adult is not None:
            raise ValueError("is_adult must be absent when success is False")

    @classmethod
    def completed(cls, is_adult: bool) -> "VerificationResult":
        return cls(success=True, is_adult=bool(is_adult), message=MSG_COMPLETED)

    @classmethod
    def rejected(cls) -> "VerificationResult":
        return cls(success=False, message=MSG_INVALID_FORMAT)

    @classmethod
    def errored(cls) -> "VerificationResult":
        return cls(success=False, message=MSG_FAILED)

    @classmethod
    def failed(cls, message: str) -> "VerificationResult":
        """Build a failure result carrying a transport-level message."""
        return cls(success=False, message=message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to the wire shape, omitting absent fields.

        Returns
        -------
        dict
            ``{"success": ..., "isAdult": ..., "message": ...}``.
        """
        data: Dict[str, Any] = {"success": self.success}
        if self.is_adult is not None:
            data["isAdult"] = self.is_adult
        if self.message is not None:
            data["message"] = self.message
        return data
