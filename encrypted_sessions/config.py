"""
Handler Configuration: Validated construction settings.

Reads settings from environment variables:
    SESSION_CIPHER = <cipher identifier, default aes-256-gcm>
    SESSION_HASH = <hash identifier, default sha256>
    SESSION_ENTROPY = <secret string, at least 64 characters>
    SESSION_ALLOW_WEAK_RAND = <1/true/yes/on to allow a weak generator>

Security Note:
    Never log the entropy. Rotating it makes every stored session
    permanently undecryptable.
"""
import os
import secrets
import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from .crypto import SUPPORTED_CIPHERS, normalize_cipher_name
from .exceptions import ConfigurationError
from .keys import get_hash, normalize_hash_name

logger = logging.getLogger("encrypted_sessions")

MIN_ENTROPY_LENGTH = 64

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def generate_entropy() -> str:
    """Generate a random entropy string suitable for ``SESSION_ENTROPY``.

    This is a utility for operators to bootstrap a deployment.

    Returns:
        URL-safe string of exactly 64 characters.
    """
    return secrets.token_urlsafe(48)


def _describe(err: ValidationError) -> str:
    """Summarize validation errors without echoing input values."""
    return "; ".join(
        f"{'.'.join(str(loc) for loc in error['loc']) or 'config'}: {error['msg']}"
        for error in err.errors(include_url=False, include_input=False)
    )


class HandlerConfig(BaseModel):
    """Validated, immutable handler configuration."""

    cipher: str = Field(default="aes-256-gcm")
    hash_algorithm: str = Field(default="sha256")
    entropy: str = Field(repr=False)
    allow_weak_rand: bool = Field(default=False)

    model_config = {"frozen": True}

    @field_validator("cipher")
    @classmethod
    def validate_cipher(cls, v: str) -> str:
        """Validate cipher is supported."""
        name = normalize_cipher_name(v)
        if name not in SUPPORTED_CIPHERS:
            raise ValueError(f"Unsupported cipher: {v}")
        return name

    @field_validator("hash_algorithm")
    @classmethod
    def validate_hash(cls, v: str) -> str:
        """Validate hash is supported and long enough."""
        try:
            get_hash(v)
        except ConfigurationError as err:
            raise ValueError(str(err)) from None
        return normalize_hash_name(v)

    @field_validator("entropy")
    @classmethod
    def validate_entropy(cls, v: str) -> str:
        """Require at least 64 characters of entropy."""
        if len(v) < MIN_ENTROPY_LENGTH:
            raise ValueError(
                f"Please provide at least {MIN_ENTROPY_LENGTH} characters "
                f"of entropy (got {len(v)})"
            )
        return v

    @classmethod
    def create(cls, **values: Any) -> "HandlerConfig":
        """Build a config, reporting failures as ``ConfigurationError``.

        Raises:
            ConfigurationError: If any setting is invalid.
        """
        try:
            return cls(**values)
        except ValidationError as err:
            raise ConfigurationError(_describe(err)) from None

    @classmethod
    def from_env(cls) -> "HandlerConfig":
        """Create HandlerConfig by loading values from environment.

        Returns:
            Populated HandlerConfig instance.

        Raises:
            ConfigurationError: If SESSION_ENTROPY is missing or any value
                is invalid.
        """
        entropy = os.environ.get("SESSION_ENTROPY")
        if entropy is None:
            raise ConfigurationError(
                "SESSION_ENTROPY environment variable is not set"
            )
        allow_weak = os.environ.get("SESSION_ALLOW_WEAK_RAND", "")
        config = cls.create(
            cipher=os.environ.get("SESSION_CIPHER", "aes-256-gcm"),
            hash_algorithm=os.environ.get("SESSION_HASH", "sha256"),
            entropy=entropy,
            allow_weak_rand=allow_weak.strip().lower() in _TRUE_VALUES,
        )
        logger.debug(
            "Loaded handler config from environment: cipher=%s hash=%s",
            config.cipher, config.hash_algorithm,
        )
        return config
