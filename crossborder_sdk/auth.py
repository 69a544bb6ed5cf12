"""
Cross-Border SDK — Request Signing

OAuth 1.0a with RSA-SHA256 and a body hash, plugged into httpx as an Auth
flow so every outbound request is signed just before it is sent.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
import time
from typing import Generator, Optional
from urllib.parse import quote, urlsplit, parse_qsl

import httpx
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from crossborder_sdk.errors import ConfigurationError

SIGNATURE_METHOD = "RSA-SHA256"
OAUTH_VERSION = "1.0"


def _pct(value: str) -> str:
    """RFC 3986 percent-encoding as required by OAuth 1.0a §3.6."""
    return quote(value, safe="~")


def base_uri(url: str) -> str:
    """Scheme, host, non-default port and path; no query or fragment."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    port = parts.port
    if port and not ((scheme == "http" and port == 80) or (scheme == "https" and port == 443)):
        host = f"{host}:{port}"
    return f"{scheme}://{host}{parts.path or '/'}"


def signature_base_string(method: str, url: str, oauth_params: dict[str, str]) -> str:
    params = parse_qsl(urlsplit(url).query, keep_blank_values=True)
    params.extend(oauth_params.items())
    encoded = sorted((_pct(k), _pct(v)) for k, v in params)
    normalized = "&".join(f"{k}={v}" for k, v in encoded)
    return "&".join([method.upper(), _pct(base_uri(url)), _pct(normalized)])


class OAuth1Signer(httpx.Auth):
    """Adds ``Authorization: OAuth ...`` to each request."""

    requires_request_body = True

    def __init__(self, consumer_key: str, signing_key: RSAPrivateKey):
        if not consumer_key:
            raise ConfigurationError("OAuth consumer key is empty")
        if not isinstance(signing_key, RSAPrivateKey):
            raise ConfigurationError("Signing key must be an RSA private key")
        self.consumer_key = consumer_key
        self._signing_key = signing_key

    def _nonce(self) -> str:
        return secrets.token_hex(8)

    def _timestamp(self) -> str:
        return str(int(time.time()))

    def authorization_header(self, method: str, url: str, body: Optional[bytes]) -> str:
        oauth_params = {
            "oauth_body_hash": base64.b64encode(hashlib.sha256(body or b"").digest()).decode(),
            "oauth_consumer_key": self.consumer_key,
            "oauth_nonce": self._nonce(),
            "oauth_signature_method": SIGNATURE_METHOD,
            "oauth_timestamp": self._timestamp(),
            "oauth_version": OAUTH_VERSION,
        }
        base_string = signature_base_string(method, url, oauth_params)
        signature = self._signing_key.sign(
            base_string.encode("utf-8"), padding.PKCS1v15(), hashes.SHA256()
        )
        oauth_params["oauth_signature"] = base64.b64encode(signature).decode()
        return "OAuth " + ",".join(f'{k}="{_pct(v)}"' for k, v in oauth_params.items())

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = self.authorization_header(
            request.method, str(request.url), request.content
        )
        yield request
