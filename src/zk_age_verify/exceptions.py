"""
Custom exception classes for the zk-age-verify system.

This module defines the exception hierarchy used inside the verification
core. None of these exceptions ever escape ``verify_age``: the pipeline
converts them into a ``VerificationResult``. Context dictionaries attached to
an exception must never carry the identity number or a birth date, because
``to_dict`` output is written to the structured log.
"""

from typing import Optional, Dict, Any


class AgeVerifyError(Exception):
    """
    Base exception class for all zk-age-verify errors.

    Parameters
    ----------
    message : str
        Human-readable error message. Must not contain identity data.
    context : dict, optional
        Additional non-identifying context about the error.
    error_code : str, optional
        Unique error code for programmatic handling.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        self.error_code = error_code
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return a formatted string representation of the error."""
        parts = [self.message]

        if self.error_code:
            parts.append(f"[Error Code: {self.error_code}]")

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"[Context: {context_str}]")

        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the exception to a dictionary for structured logging.

        Returns
        -------
        dict
            Dictionary representation of the exception.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
        }


class IdentityFormatError(AgeVerifyError):
    """
    Exception raised when a digit string cannot be used for checksum work.

    Raised by the check-digit helpers; ``validate_identity_number`` itself
    reports malformed input by returning False.
    """

    def __init__(self, message: str, reason: Optional[str] = None, **kwargs) -> None:
        context = dict(kwargs.get("context") or {})
        if reason:
            context["reason"] = reason

        super().__init__(message, context, kwargs.get("error_code", "FORMAT_001"))


class PrivacyBoundaryError(AgeVerifyError):
    """Exception raised when the identity number cannot be encoded."""

    def __init__(self, message: str, encoder: str = "unknown", **kwargs) -> None:
        context = {"encoder": encoder}
        super().__init__(message, context=context, error_code="PRIVACY_001")


class RegistryError(AgeVerifyError):
    """
    Exception raised when the registry collaborator cannot resolve a birth date.

    This covers transport failures as well as responses the pipeline
    cannot interpret.
    """

    def __init__(self, message: str, registry: Optional[str] = None, **kwargs) -> None:
        context = dict(kwargs.get("context") or {})
        if registry:
            context["registry"] = registry

        super().__init__(message, context, kwargs.get("error_code", "REGISTRY_001"))


class RegistryTimeoutError(RegistryError):
    """Exception raised when the registry does not answer in time."""

    def __init__(self, timeout_seconds: float, registry: Optional[str] = None) -> None:
        super().__init__(
            f"Registry did not respond within {timeout_seconds:.2f}s",
            registry=registry,
            context={"timeout_seconds": timeout_seconds},
            error_code="REGISTRY_002",
        )


class RegistryResponseError(RegistryError):
    """Exception raised for a malformed or unusable registry response."""

    def __init__(self, message: str, registry: Optional[str] = None) -> None:
        super().__init__(message, registry=registry, error_code="REGISTRY_003")


class ConfigurationError(AgeVerifyError):
    """
    Exception raised for configuration-related errors.

    This includes invalid configuration values and malformed key material.
    The offending value is only recorded when it is not secret.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
        **kwargs,
    ) -> None:
        context = dict(kwargs.get("context") or {})
        if config_key:
            context["config_key"] = config_key
        if config_value:
            context["config_value"] = config_value

        super().__init__(message, context, kwargs.get("error_code", "CONFIG_001"))
