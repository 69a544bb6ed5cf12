"""
Cross-Border SDK — Transport

The execution routine only needs ``send(method, path, headers, params,
body) -> TransportResponse``. HttpxTransport is the production
implementation; connection pooling, TLS and timeouts stay inside httpx.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol

import httpx

from crossborder_sdk.auth import OAuth1Signer
from crossborder_sdk.config import ApiConfig
from crossborder_sdk.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    def send(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        params: Mapping[str, Any],
        body: Optional[bytes],
    ) -> TransportResponse: ...


class HttpxTransport:
    """Synchronous transport over ``httpx.Client``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        auth: Optional[httpx.Auth] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            auth=auth,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: ApiConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "HttpxTransport":
        auth = None
        if config.has_signing_credentials:
            auth = OAuth1Signer(config.consumer_key, config.signing_private_key())
        return cls(config.base_url, timeout=config.timeout_seconds, auth=auth, transport=transport)

    def send(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        params: Mapping[str, Any],
        body: Optional[bytes],
    ) -> TransportResponse:
        try:
            resp = self._client.request(
                method,
                path,
                headers=dict(headers),
                params=dict(params) or None,
                content=body,
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed in transport: %s", method, path, exc)
            raise TransportError(f"{method} {path}: {exc}") from exc

        return TransportResponse(
            status_code=resp.status_code,
            body=resp.content,
            headers=dict(resp.headers),
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
