"""
Cross-Border SDK — Key Material

Loads the RSA keys used for request signing and payload encryption.
Every failure surfaces as ConfigurationError: bad keys are a setup defect,
not a transaction outcome.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from cryptography.hazmat.primitives.serialization import pkcs12

from crossborder_sdk.errors import ConfigurationError

_PKCS12_SUFFIXES = (".p12", ".pfx")


def _read(path: str | Path, what: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {what} at {path}: {exc}") from exc


def _password(password: Optional[str]) -> Optional[bytes]:
    return password.encode() if password else None


def load_private_key(path: str | Path, password: Optional[str] = None) -> RSAPrivateKey:
    """Load an RSA private key from PEM, DER or PKCS#12 (.p12 / .pfx)."""
    data = _read(path, "private key")
    try:
        if str(path).lower().endswith(_PKCS12_SUFFIXES):
            key, _, _ = pkcs12.load_key_and_certificates(data, _password(password))
        elif data.lstrip().startswith(b"-----BEGIN"):
            key = serialization.load_pem_private_key(data, _password(password))
        else:
            key = serialization.load_der_private_key(data, _password(password))
    except (ValueError, TypeError) as exc:
        raise ConfigurationError(f"Invalid private key at {path}: {exc}") from exc

    if not isinstance(key, RSAPrivateKey):
        raise ConfigurationError(f"Private key at {path} is not an RSA key")
    return key


def load_public_key(path: str | Path) -> RSAPublicKey:
    """Load an RSA public key from an X.509 certificate or a bare public key."""
    data = _read(path, "public key")
    pem = data.lstrip().startswith(b"-----BEGIN")
    try:
        if pem and b"CERTIFICATE" in data:
            key = x509.load_pem_x509_certificate(data).public_key()
        elif pem:
            key = serialization.load_pem_public_key(data)
        else:
            try:
                key = x509.load_der_x509_certificate(data).public_key()
            except ValueError:
                key = serialization.load_der_public_key(data)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError(f"Invalid public key at {path}: {exc}") from exc

    if not isinstance(key, RSAPublicKey):
        raise ConfigurationError(f"Public key at {path} is not an RSA key")
    return key


def key_fingerprint(public_key: RSAPublicKey) -> str:
    """SHA-256 hex digest of the DER SubjectPublicKeyInfo."""
    der = public_key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return hashlib.sha256(der).hexdigest()
