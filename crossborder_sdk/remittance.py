"""
Cross-Border SDK — Remittance API

Submits payments, either against a proposal id from QuotesAPI or as a
one-shot payment carrying the amount. Plain and encrypted submissions go
through the same routine; only the cipher differs. Nothing is retried:
without a caller-supplied idempotency key a resubmission could pay twice.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote

from crossborder_sdk.cipher import PayloadCipher
from crossborder_sdk.client import ApiClient
from crossborder_sdk.errors import ProtocolViolation, ReasonCode, RequestValidationError
from crossborder_sdk.models import (
    RemittanceRequest,
    RemittanceResponse,
    validate_remittance_request,
)

logger = logging.getLogger(__name__)

REFERENCE_PARAM = "ref"


class RemittanceAPI:
    def __init__(self, client: ApiClient):
        self.client = client

    # -- payment submission -------------------------------------------------

    def make_payment(
        self,
        headers: Optional[Mapping[str, str]],
        params: Optional[Mapping[str, Any]],
        request: RemittanceRequest,
    ) -> RemittanceResponse:
        """
        Submit a payment, encrypted only if the configuration asks for it.

        Raises:
            RequestValidationError: both or neither of proposal_id / payment_amount.
            ServiceFailure: rejected upstream, unreachable, or (as
                ProtocolViolation) a success without a usable receipt.
            ConfigurationError: no partner id, or encryption configured without keys.
        """
        return self._submit(headers, params, request, self.client.cipher())

    def make_payment_with_encryption(
        self,
        headers: Optional[Mapping[str, str]],
        params: Optional[Mapping[str, Any]],
        request: RemittanceRequest,
    ) -> RemittanceResponse:
        """Same as make_payment, with request and response always encrypted."""
        return self._submit(headers, params, request, self.client.cipher(encrypt=True))

    def _submit(
        self,
        headers: Optional[Mapping[str, str]],
        params: Optional[Mapping[str, Any]],
        request: RemittanceRequest,
        cipher: PayloadCipher,
    ) -> RemittanceResponse:
        problems = validate_remittance_request(request)
        if problems:
            raise RequestValidationError(problems)

        path, query = self.client.resolve_path(params, "/payment")
        root, doc = self.client.execute(
            "POST", path, headers, query,
            root=RemittanceRequest.ROOT, payload=request.to_wire(), cipher=cipher,
        )
        response = self._receipt(root, doc)
        logger.info(
            "Payment %s accepted as %s (status=%s, encrypted=%s, quoted=%s)",
            request.transaction_reference, response.remittance_id, response.status,
            cipher.enabled, request.proposal_id is not None,
        )
        return response

    # -- lookups --------------------------------------------------------------

    def retrieve_payment(
        self,
        headers: Optional[Mapping[str, str]],
        params: Optional[Mapping[str, Any]],
        payment_id: str,
    ) -> RemittanceResponse:
        """GET a payment by the remittance id returned at submission."""
        path, query = self.client.resolve_path(params, f"/{quote(payment_id, safe='')}")
        root, doc = self.client.execute("GET", path, headers, query)
        return self._receipt(root, doc)

    def retrieve_payment_by_reference(
        self,
        headers: Optional[Mapping[str, str]],
        params: Optional[Mapping[str, Any]],
        transaction_reference: str,
    ) -> RemittanceResponse:
        """GET a payment by the OI's own transaction reference."""
        path, query = self.client.resolve_path(params)
        query[REFERENCE_PARAM] = transaction_reference
        root, doc = self.client.execute("GET", path, headers, query)
        return self._receipt(root, doc)

    def cancel_payment(
        self,
        headers: Optional[Mapping[str, str]],
        params: Optional[Mapping[str, Any]],
        payment_id: str,
    ) -> RemittanceResponse:
        """Ask the service to cancel a payment that has not settled yet."""
        path, query = self.client.resolve_path(params, f"/{quote(payment_id, safe='')}/cancel")
        root, doc = self.client.execute("POST", path, headers, query)
        response = self._receipt(root, doc)
        logger.info("Payment %s cancel requested (status=%s)", payment_id, response.status)
        return response

    # -- helpers --------------------------------------------------------------

    def _receipt(self, root: str, doc: Any) -> RemittanceResponse:
        response = self.client.decode(RemittanceResponse.from_wire, root, doc, RemittanceResponse.ROOT)
        if not response.remittance_id:
            raise ProtocolViolation.single(
                "remittance_id", ReasonCode.MALFORMED_RESPONSE,
                "Successful payment response without a remittance id",
            )
        return response
