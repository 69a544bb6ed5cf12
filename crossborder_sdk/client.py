"""
Cross-Border SDK — Client
One execution routine shared by every API call.

serialize -> (encrypt) -> transport -> (decrypt) -> deserialize, with every
failure converted to the package's error taxonomy at this boundary.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from crossborder_sdk.cipher import IdentityCipher, PayloadCipher, build_cipher
from crossborder_sdk.config import ApiConfig
from crossborder_sdk.errors import (
    ConfigurationError,
    DecryptionError,
    ProtocolViolation,
    ReasonCode,
    ServiceFailure,
    TransportError,
)
from crossborder_sdk.normalizer import normalize
from crossborder_sdk.serializer import Serializer, serializer_for
from crossborder_sdk.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)

PARTNER_ID_PARAM = "partner-id"
ENCRYPTED_HEADER = "x-encrypted"
ENVELOPE_ROOT = "encrypted_payload"
API_ROOT = "/send/partners/{partner_id}/crossborder"


class ApiClient:
    """
    Shared plumbing for QuotesAPI and RemittanceAPI.

    Holds configuration, transport, codec and the two cipher strategies.
    Nothing here changes after construction, so one instance can serve
    concurrent calls.
    """

    def __init__(
        self,
        config: ApiConfig,
        transport: Optional[Transport] = None,
        serializer: Optional[Serializer] = None,
    ):
        self.config = config
        self.transport = transport or HttpxTransport.from_config(config)
        self.serializer = serializer or serializer_for(config.content_type)
        self._identity = IdentityCipher()
        # Fail fast on bad key material; a missing pair only matters
        # once encryption is actually requested.
        self._jwe: Optional[PayloadCipher] = None
        if config.encryption_enabled or config.has_encryption_keys:
            self._jwe = build_cipher(config, force=True)

    def cipher(self, encrypt: Optional[bool] = None) -> PayloadCipher:
        """Cipher for a call: explicit request wins, else configuration."""
        wanted = self.config.encryption_enabled if encrypt is None else encrypt
        if not wanted:
            return self._identity
        if self._jwe is None:
            raise ConfigurationError(
                "Encryption requested but no encryption certificate / decryption key is configured"
            )
        return self._jwe

    # -- request building ---------------------------------------------------

    def resolve_path(self, params: Optional[Mapping[str, Any]], suffix: str = "") -> tuple[str, dict[str, Any]]:
        """Return (path, query params) with the partner id substituted."""
        query = dict(params or {})
        partner_id = str(query.pop(PARTNER_ID_PARAM, "") or self.config.partner_id or "").strip()
        if not partner_id:
            raise ConfigurationError(f"No {PARTNER_ID_PARAM} in params and no partner id configured")
        return API_ROOT.format(partner_id=partner_id) + suffix, query

    def _headers(self, headers: Optional[Mapping[str, str]], cipher: PayloadCipher) -> httpx.Headers:
        merged = httpx.Headers(headers or {})
        merged.setdefault("Content-Type", self.serializer.content_type)
        merged.setdefault("Accept", self.serializer.content_type)
        if cipher.enabled:
            merged[ENCRYPTED_HEADER] = "true"
        return merged

    def _encode(self, root: str, payload: dict[str, Any], cipher: PayloadCipher) -> bytes:
        body = self.serializer.dumps(root, payload)
        if not cipher.enabled:
            return body
        token = cipher.encrypt(body).decode("ascii")
        return self.serializer.dumps(ENVELOPE_ROOT, {"data": token})

    def _unwrap(self, raw: bytes, cipher: PayloadCipher) -> bytes:
        """Decrypt an encrypted_payload envelope; plain bodies pass through."""
        if not cipher.enabled:
            return raw
        try:
            root, doc = self.serializer.loads(raw)
        except ValueError:
            return raw
        if root != ENVELOPE_ROOT:
            return raw
        token = doc.get("data") if isinstance(doc, dict) else None
        if not token:
            raise DecryptionError("encrypted_payload has no data")
        return cipher.decrypt(str(token).encode("ascii"))

    # -- execution ----------------------------------------------------------

    def execute(
        self,
        method: str,
        path: str,
        headers: Optional[Mapping[str, str]],
        query: Mapping[str, Any],
        root: Optional[str] = None,
        payload: Optional[dict[str, Any]] = None,
        cipher: Optional[PayloadCipher] = None,
    ) -> tuple[str, Any]:
        """
        Send one request and return the decoded (root, document).

        Raises:
            ServiceFailure: the service rejected the call or was unreachable.
            ProtocolViolation: a 2xx response had an empty or unusable body.
        """
        cipher = cipher or self.cipher()
        body = self._encode(root, payload, cipher) if payload is not None else None

        try:
            resp = self.transport.send(method, path, self._headers(headers, cipher), query, body)
        except (TransportError, httpx.HTTPError) as exc:
            raise ServiceFailure.single("transport", ReasonCode.TRANSPORT_ERROR, str(exc)) from exc

        logger.info("%s %s -> %s", method, path, resp.status_code)

        if not 200 <= resp.status_code < 300:
            raw = resp.body
            try:
                raw = self._unwrap(raw, cipher)
            except ValueError as exc:
                logger.debug("Failure body could not be decrypted: %s", exc)
            failure = normalize(raw, status_code=resp.status_code)
            logger.warning(
                "%s %s rejected (status=%s): %s",
                method, path, resp.status_code, ", ".join(failure.errors.reason_codes),
            )
            raise failure

        if not resp.body or not resp.body.strip():
            raise ProtocolViolation.single(
                "response", ReasonCode.EMPTY_RESPONSE,
                "Successful status with an empty body", status_code=resp.status_code,
            )

        try:
            return self.serializer.loads(self._unwrap(resp.body, cipher))
        except (DecryptionError, ValueError) as exc:
            raise ProtocolViolation.single(
                "response", ReasonCode.MALFORMED_RESPONSE, str(exc), status_code=resp.status_code,
            ) from exc

    def decode(self, factory, root: str, doc: Any, expected_root: str):
        """Build a response model, mapping shape errors to ProtocolViolation."""
        if root != expected_root or not isinstance(doc, dict):
            raise ProtocolViolation.single(
                "response", ReasonCode.MALFORMED_RESPONSE,
                f"Expected <{expected_root}> document, got <{root}>",
            )
        try:
            return factory(doc)
        except ValueError as exc:   # includes pydantic.ValidationError
            raise ProtocolViolation.single(
                "response", ReasonCode.MALFORMED_RESPONSE, str(exc),
            ) from exc
