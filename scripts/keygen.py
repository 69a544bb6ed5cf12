#!/usr/bin/env python3
"""
Cross-Border SDK Key Generator

Generates an RSA key pair and a self-signed certificate for payload
encryption and prints:
  - The decryption key path (PKCS#8 PEM, keep private)
  - The certificate path (share with the counterparty / sandbox)
  - The key fingerprint used as the JWE "kid"
  - Ready-to-paste .env lines

Usage:  python scripts/keygen.py [output_dir] [common_name]
        output_dir defaults to "./keys", common_name to "crossborder-client"
"""

from __future__ import annotations

import datetime
import sys
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from crossborder_sdk.keys import key_fingerprint  # noqa: E402

KEY_SIZE = 2048
VALID_DAYS = 365


def generate_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=KEY_SIZE)


def self_signed_certificate(key: rsa.RSAPrivateKey, common_name: str) -> x509.Certificate:
    """Return a SHA-256 self-signed certificate valid for VALID_DAYS."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=VALID_DAYS))
        .sign(key, hashes.SHA256())
    )


def main():
    out_dir = Path(sys.argv[1] if len(sys.argv) > 1 else "keys")
    common_name = sys.argv[2] if len(sys.argv) > 2 else "crossborder-client"
    out_dir.mkdir(parents=True, exist_ok=True)

    key = generate_key()
    cert = self_signed_certificate(key, common_name)

    key_path = out_dir / "decryption-key.pem"
    cert_path = out_dir / "encryption-cert.pem"
    key_path.write_bytes(key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ))
    key_path.chmod(0o600)
    cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))

    print()
    print("=== Cross-Border Encryption Keys ===")
    print()
    print(f"  Common Name: {common_name}")
    print(f"  Private Key: {key_path}")
    print(f"  Certificate: {cert_path}")
    print(f"  Fingerprint: {key_fingerprint(key.public_key())}")
    print()
    print("--- Paste into .env ---")
    print("CROSSBORDER_ENCRYPTION_ENABLED=true")
    print(f"CROSSBORDER_ENCRYPTION_CERTIFICATE_PATH={cert_path}")
    print(f"CROSSBORDER_DECRYPTION_KEY_PATH={key_path}")
    print()


if __name__ == "__main__":
    main()
