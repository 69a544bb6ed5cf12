"""
Cross-Border SDK — Payload Cipher

Encryption strategies for request and response bodies. The execution
routine is written against PayloadCipher; IdentityCipher makes the plain
path and the encrypted path the same code.

JweCipher produces JWE compact serialization (RFC 7516) with RSA-OAEP-256
key wrapping and AES-GCM content encryption.
"""

from __future__ import annotations

import base64
import binascii
import json
import os
from typing import TYPE_CHECKING, Optional, Protocol

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from crossborder_sdk.errors import ConfigurationError, DecryptionError
from crossborder_sdk.keys import key_fingerprint

if TYPE_CHECKING:
    from crossborder_sdk.config import ApiConfig

ALG = "RSA-OAEP-256"
ENC = "A256GCM"

# enc -> content encryption key size in bytes
_ENC_KEY_SIZES = {"A128GCM": 16, "A192GCM": 24, "A256GCM": 32}
_IV_SIZE = 12
_TAG_SIZE = 16


class PayloadCipher(Protocol):
    enabled: bool

    def encrypt(self, plaintext: bytes) -> bytes: ...

    def decrypt(self, ciphertext: bytes) -> bytes: ...


class IdentityCipher:
    """Encryption disabled: both directions return their input."""

    enabled = False

    def encrypt(self, plaintext: bytes) -> bytes:
        return plaintext

    def decrypt(self, ciphertext: bytes) -> bytes:
        return ciphertext


# ---------------------------------------------------------------------------
# JWE
# ---------------------------------------------------------------------------

def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


class JweCipher:
    """
    Encrypts with the service's public key, decrypts with our private key.

    Both keys are fixed at construction and only read afterwards, so one
    instance can be shared between threads.
    """

    enabled = True

    def __init__(
        self,
        encryption_key: RSAPublicKey,
        decryption_key: RSAPrivateKey,
        content_type: str = "application/xml",
        key_id: Optional[str] = None,
    ):
        if not isinstance(encryption_key, RSAPublicKey):
            raise ConfigurationError("Encryption key must be an RSA public key")
        if not isinstance(decryption_key, RSAPrivateKey):
            raise ConfigurationError("Decryption key must be an RSA private key")
        self._encryption_key = encryption_key
        self._decryption_key = decryption_key
        self.content_type = content_type
        self.key_id = key_id or key_fingerprint(encryption_key)

    def encrypt(self, plaintext: bytes) -> bytes:
        header = {"alg": ALG, "enc": ENC, "kid": self.key_id, "cty": self.content_type}
        protected = _b64(json.dumps(header, separators=(",", ":")).encode())

        cek = AESGCM.generate_key(bit_length=256)
        iv = os.urandom(_IV_SIZE)
        wrapped = self._encryption_key.encrypt(cek, _oaep())
        sealed = AESGCM(cek).encrypt(iv, plaintext, protected.encode("ascii"))
        ciphertext, tag = sealed[:-_TAG_SIZE], sealed[-_TAG_SIZE:]

        return ".".join(
            [protected, _b64(wrapped), _b64(iv), _b64(ciphertext), _b64(tag)]
        ).encode("ascii")

    def decrypt(self, ciphertext: bytes) -> bytes:
        try:
            token = ciphertext.decode("ascii").strip()
        except UnicodeDecodeError as exc:
            raise DecryptionError("JWE token is not ASCII") from exc

        parts = token.split(".")
        if len(parts) != 5:
            raise DecryptionError(f"JWE compact form has 5 parts, got {len(parts)}")
        protected, wrapped_b64, iv_b64, body_b64, tag_b64 = parts

        try:
            header = json.loads(_unb64(protected))
            wrapped = _unb64(wrapped_b64)
            iv = _unb64(iv_b64)
            body = _unb64(body_b64)
            tag = _unb64(tag_b64)
        except (ValueError, binascii.Error) as exc:
            raise DecryptionError(f"Malformed JWE segment: {exc}") from exc

        if not isinstance(header, dict) or header.get("alg") != ALG:
            raise DecryptionError(f"Unsupported JWE alg: {header!r}")
        key_size = _ENC_KEY_SIZES.get(str(header.get("enc")))
        if key_size is None:
            raise DecryptionError(f"Unsupported JWE enc: {header.get('enc')!r}")

        try:
            cek = self._decryption_key.decrypt(wrapped, _oaep())
        except ValueError as exc:
            raise DecryptionError("Content key could not be unwrapped") from exc
        if len(cek) != key_size:
            raise DecryptionError("Content key has the wrong length")

        try:
            return AESGCM(cek).decrypt(iv, body + tag, protected.encode("ascii"))
        except (InvalidTag, ValueError) as exc:
            raise DecryptionError("JWE authentication failed") from exc


# ---------------------------------------------------------------------------
# Construction from configuration
# ---------------------------------------------------------------------------

def build_cipher(config: "ApiConfig", force: bool = False) -> PayloadCipher:
    """Cipher selected by configuration.

    Returns IdentityCipher unless encryption is enabled (or ``force``).
    Missing or invalid key material raises ConfigurationError here, at
    setup time.
    """
    if not (config.encryption_enabled or force):
        return IdentityCipher()
    return JweCipher(
        encryption_key=config.encryption_public_key(),
        decryption_key=config.decryption_private_key(),
        content_type=config.content_type,
    )
