"""
Cross-Border SDK — Configuration

Loaded once at process start from environment variables (optionally via a
.env file) and read-only afterwards.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from dotenv import find_dotenv, load_dotenv

from crossborder_sdk.errors import ConfigurationError
from crossborder_sdk.keys import load_private_key, load_public_key
from crossborder_sdk.serializer import serializer_for

SANDBOX_URL = "https://sandbox.api.mastercard.com"
ENV_PREFIX = "CROSSBORDER_"

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ApiConfig:
    partner_id: str = ""
    base_url: str = SANDBOX_URL
    consumer_key: Optional[str] = None
    signing_key_path: Optional[str] = None
    signing_key_password: Optional[str] = None
    encryption_enabled: bool = False
    encryption_certificate_path: Optional[str] = None
    decryption_key_path: Optional[str] = None
    decryption_key_password: Optional[str] = None
    content_type: str = "application/xml"
    timeout_seconds: float = 30.0

    def __post_init__(self):
        serializer_for(self.content_type)
        if self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be positive")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ApiConfig":
        env = os.environ if env is None else env

        def get(name: str, default: Optional[str] = None) -> Optional[str]:
            value = env.get(ENV_PREFIX + name)
            return value if value not in (None, "") else default

        timeout = get("TIMEOUT_SECONDS", "30")
        try:
            timeout_seconds = float(timeout)
        except ValueError:
            raise ConfigurationError(f"{ENV_PREFIX}TIMEOUT_SECONDS is not a number: {timeout!r}")

        return cls(
            partner_id=get("PARTNER_ID", ""),
            base_url=get("BASE_URL", SANDBOX_URL),
            consumer_key=get("CONSUMER_KEY"),
            signing_key_path=get("SIGNING_KEY_PATH"),
            signing_key_password=get("SIGNING_KEY_PASSWORD"),
            encryption_enabled=(get("ENCRYPTION_ENABLED", "false").lower() in _TRUE),
            encryption_certificate_path=get("ENCRYPTION_CERTIFICATE_PATH"),
            decryption_key_path=get("DECRYPTION_KEY_PATH"),
            decryption_key_password=get("DECRYPTION_KEY_PASSWORD"),
            content_type=get("CONTENT_TYPE", "application/xml"),
            timeout_seconds=timeout_seconds,
        )

    # -- key material ------------------------------------------------------

    @property
    def has_encryption_keys(self) -> bool:
        return bool(self.encryption_certificate_path and self.decryption_key_path)

    @property
    def has_signing_credentials(self) -> bool:
        return bool(self.consumer_key and self.signing_key_path)

    def encryption_public_key(self) -> RSAPublicKey:
        if not self.encryption_certificate_path:
            raise ConfigurationError(f"{ENV_PREFIX}ENCRYPTION_CERTIFICATE_PATH is not set")
        return load_public_key(self.encryption_certificate_path)

    def decryption_private_key(self) -> RSAPrivateKey:
        if not self.decryption_key_path:
            raise ConfigurationError(f"{ENV_PREFIX}DECRYPTION_KEY_PATH is not set")
        return load_private_key(self.decryption_key_path, self.decryption_key_password)

    def signing_private_key(self) -> RSAPrivateKey:
        if not self.signing_key_path:
            raise ConfigurationError(f"{ENV_PREFIX}SIGNING_KEY_PATH is not set")
        return load_private_key(self.signing_key_path, self.signing_key_password)


def load_config(env_file: Optional[str] = None) -> ApiConfig:
    """Read a .env file into the environment, then build ApiConfig.

    Without ``env_file`` the nearest .env at or above the working directory
    is used, if there is one. Variables already set in the process win.
    """
    load_dotenv(env_file or find_dotenv(usecwd=True))
    return ApiConfig.from_env()
