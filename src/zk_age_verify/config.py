"""
Configuration management for the zk-age-verify system.

This module handles all configuration loading from environment variables
and .env files. Secret values (the registry key) are only ever reported as
set or unset, never echoed.
"""

import os
from typing import Optional
from dotenv import load_dotenv

from .exceptions import ConfigurationError

# Load environment variables from .env file if it exists
load_dotenv()

# =============================================================================
# Environment
# =============================================================================
# Deployment environment: "production" or "development"
APP_ENV: str = os.getenv("APP_ENV", "production").lower()

# Enable debug mode (skips import-time validation, allows diagnostic logs)
DEBUG_MODE: bool = os.getenv("DEBUG_MODE", "false").lower() == "true"

# =============================================================================
# Logging Configuration
# =============================================================================
# Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# Emit JSON lines instead of the console renderer
STRUCTURED_LOGGING: bool = os.getenv("STRUCTURED_LOGGING", "true").lower() == "true"

# =============================================================================
# Verification Policy
# =============================================================================
# Completed years at which a holder counts as an adult
ADULT_AGE_THRESHOLD: int = int(os.getenv("ADULT_AGE_THRESHOLD", "18"))

# =============================================================================
# Registry Collaborator
# =============================================================================
# Registry X25519 public key (base64). Unset means placeholder encoding.
REGISTRY_PUBLIC_KEY: Optional[str] = os.getenv("REGISTRY_PUBLIC_KEY") or None

# Artificial latency of the placeholder registry in milliseconds
REGISTRY_SIMULATED_LATENCY_MS: int = int(os.getenv("REGISTRY_SIMULATED_LATENCY_MS", "0"))

# Upper bound on a single registry lookup in seconds (0 disables the bound)
REGISTRY_TIMEOUT_SECONDS: float = float(os.getenv("REGISTRY_TIMEOUT_SECONDS", "10"))

# =============================================================================
# HTTP Server
# =============================================================================
API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
API_PORT: int = int(os.getenv("API_PORT", "8000"))


def is_production() -> bool:
    """Return True unless the development environment is selected."""
    return APP_ENV != "development"


# =============================================================================
# Configuration Validation
# =============================================================================
def validate_configuration() -> bool:
    """
    Validate the current configuration settings.

    Returns
    -------
    bool
        True if configuration is valid.

    Raises
    ------
    ConfigurationError
        If any configuration parameter is invalid. All problems are
        reported together.
    """
    errors = []

    valid_environments = ["production", "development"]
    if APP_ENV not in valid_environments:
        errors.append(f"APP_ENV must be one of {valid_environments}")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if LOG_LEVEL not in valid_log_levels:
        errors.append(f"LOG_LEVEL must be one of {valid_log_levels}")

    if ADULT_AGE_THRESHOLD < 1:
        errors.append("ADULT_AGE_THRESHOLD must be at least 1")

    if REGISTRY_SIMULATED_LATENCY_MS < 0:
        errors.append("REGISTRY_SIMULATED_LATENCY_MS cannot be negative")

    if REGISTRY_TIMEOUT_SECONDS < 0:
        errors.append("REGISTRY_TIMEOUT_SECONDS cannot be negative")

    if not 0 < API_PORT < 65536:
        errors.append("API_PORT must be between 1 and 65535")

    if REGISTRY_PUBLIC_KEY:
        from .privacy import SealedBoxEncoder

        try:
            SealedBoxEncoder.from_base64(REGISTRY_PUBLIC_KEY)
        except ConfigurationError as e:
            errors.append(e.message)

    if errors:
        raise ConfigurationError(
            "Configuration validation failed:\n"
            + "\n".join(f"- {error}" for error in errors)
        )

    return True


def get_config_summary() -> dict:
    """
    Get a summary of the current configuration.

    Returns
    -------
    dict
        Dictionary containing key configuration parameters.
    """
    return {
        "environment": APP_ENV,
        "logging": {
            "level": LOG_LEVEL,
            "structured": STRUCTURED_LOGGING,
        },
        "policy": {
            "adult_age_threshold": ADULT_AGE_THRESHOLD,
        },
        "registry": {
            "public_key_configured": REGISTRY_PUBLIC_KEY is not None,
            "simulated_latency_ms": REGISTRY_SIMULATED_LATENCY_MS,
            "timeout_seconds": REGISTRY_TIMEOUT_SECONDS,
        },
        "server": {
            "host": API_HOST,
            "port": API_PORT,
        },
    }


# Validate configuration on import
if not DEBUG_MODE:
    validate_configuration()
