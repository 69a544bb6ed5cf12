"""
Remittance API Test Suite
Payment against a quote, one-shot forward / reverse payments, error
handling, encrypted payments, lookups and cancellation.

Usage:  pytest tests/test_remittance.py
"""

from __future__ import annotations

import dataclasses
from decimal import Decimal

import httpx
import pytest

from crossborder_sdk import samples as rf
from crossborder_sdk.client import ApiClient
from crossborder_sdk.config import ApiConfig
from crossborder_sdk.errors import (
    ConfigurationError,
    ProtocolViolation,
    ReasonCode,
    RequestValidationError,
    ServiceFailure,
)
from crossborder_sdk.models import Amount
from crossborder_sdk.remittance import RemittanceAPI
from crossborder_sdk.transport import HttpxTransport


# ---------------------------------------------------------------------------
# Payment with a forward quote
# ---------------------------------------------------------------------------

def test_payment_with_quote_credits_the_quoted_amount(quotes_api, remittance_api, headers, params):
    quote = quotes_api.get_quote(headers, params, rf.forward_quote("100.00"))
    proposal = quote.first_proposal()
    assert proposal is not None

    payment = remittance_api.make_payment(headers, params, rf.payment_with_quote(proposal.proposal_id))

    assert payment.remittance_id
    assert payment.credited_amount == proposal.credited_amount
    assert payment.credited_amount.amount == Decimal("90.00")
    assert payment.proposal_id == proposal.proposal_id


def test_payment_with_second_proposal_uses_that_proposal(quotes_api, remittance_api, headers, params):
    quote = quotes_api.get_quote(headers, params, rf.forward_quote("250.00"))
    alternate = quote.proposals[1]

    payment = remittance_api.make_payment(headers, params, rf.payment_with_quote(alternate.proposal_id))

    assert payment.credited_amount.amount == alternate.credited_amount.amount
    assert payment.fx_rate == alternate.fx_rate


def test_proposal_cannot_be_used_twice(quotes_api, remittance_api, headers, params):
    proposal = quotes_api.get_quote(headers, params, rf.forward_quote()).first_proposal()
    remittance_api.make_payment(headers, params, rf.payment_with_quote(proposal.proposal_id))

    with pytest.raises(ServiceFailure) as excinfo:
        remittance_api.make_payment(headers, params, rf.payment_with_quote(proposal.proposal_id))

    assert excinfo.value.errors.has("proposal_id", ReasonCode.PROPOSAL_ALREADY_USED)


# ---------------------------------------------------------------------------
# One-shot payments
# ---------------------------------------------------------------------------

def test_one_shot_forward_payment(remittance_api, headers, params):
    payment = remittance_api.make_payment(headers, params, rf.one_shot_forward("100.00"))

    assert payment.remittance_id.startswith("rem_")
    assert payment.charged_amount == Amount(amount=Decimal("100.00"), currency="USD")
    assert payment.credited_amount == Amount(amount=Decimal("90.00"), currency="EUR")
    assert payment.status == "PENDING"


def test_one_shot_reverse_payment(remittance_api, headers, params):
    payment = remittance_api.make_payment(headers, params, rf.one_shot_reverse("90.00"))

    assert payment.remittance_id
    assert payment.credited_amount == Amount(amount=Decimal("90.00"), currency="EUR")
    assert payment.charged_amount == Amount(amount=Decimal("100.00"), currency="USD")


def test_partner_id_falls_back_to_config(remittance_api, headers):
    payment = remittance_api.make_payment(headers, {}, rf.one_shot_forward())
    assert payment.remittance_id


def test_missing_partner_id_is_configuration_error(make_client, headers):
    api = RemittanceAPI(make_client(ApiConfig(base_url="https://sandbox.crossborder.test")))
    with pytest.raises(ConfigurationError):
        api.make_payment(headers, {}, rf.one_shot_forward())


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------

def test_unknown_proposal_id_is_reported_by_field(remittance_api, headers, params):
    with pytest.raises(ServiceFailure) as excinfo:
        remittance_api.make_payment(headers, params, rf.payment_with_unknown_proposal())

    failure = excinfo.value
    assert failure.status_code == 400
    assert len(failure.errors) > 0
    for entry in failure.errors:
        assert entry.source == "proposal_id"
        assert entry.reason_code == "INVALID_INPUT_VALUE"
        assert entry.reason is ReasonCode.INVALID_INPUT_VALUE


def test_both_proposal_and_amount_rejected_before_transport(remittance_api, service, headers, params):
    request = rf.payment_with_quote("pen_123").model_copy(
        update={"payment_amount": Amount(amount=Decimal("10.00"), currency="USD")}
    )
    with pytest.raises(RequestValidationError) as excinfo:
        remittance_api.make_payment(headers, params, request)

    assert "mutually exclusive" in str(excinfo.value)
    assert not isinstance(excinfo.value, ServiceFailure)
    assert service.requests == []


def test_neither_proposal_nor_amount_rejected_before_transport(remittance_api, service, headers, params):
    request = rf.one_shot_forward().model_copy(update={"payment_amount": None})
    with pytest.raises(RequestValidationError):
        remittance_api.make_payment_with_encryption(headers, params, request)
    assert service.requests == []


def test_blank_proposal_id_counts_as_absent(remittance_api, service, headers, params):
    request = rf.payment_with_quote("   ")
    with pytest.raises(RequestValidationError):
        remittance_api.make_payment(headers, params, request)
    assert service.requests == []


def test_empty_success_body_is_protocol_violation(remittance_api, service, headers, params):
    service.canned = httpx.Response(200, content=b"")
    with pytest.raises(ProtocolViolation) as excinfo:
        remittance_api.make_payment(headers, params, rf.one_shot_forward())
    assert excinfo.value.errors.has(reason=ReasonCode.EMPTY_RESPONSE)


def test_success_without_remittance_id_is_protocol_violation(remittance_api, service, headers, params):
    service.canned = httpx.Response(
        200, content=b"<payment><status>PENDING</status></payment>",
    )
    with pytest.raises(ProtocolViolation) as excinfo:
        remittance_api.make_payment(headers, params, rf.one_shot_forward())
    assert excinfo.value.errors.has("remittance_id", ReasonCode.MALFORMED_RESPONSE)


def test_unparseable_success_body_is_protocol_violation(remittance_api, service, headers, params):
    service.canned = httpx.Response(201, content=b"<payment id='rem_1'>")
    with pytest.raises(ProtocolViolation) as excinfo:
        remittance_api.make_payment(headers, params, rf.one_shot_forward())
    assert excinfo.value.errors.has(reason=ReasonCode.MALFORMED_RESPONSE)


def test_wrong_document_is_protocol_violation(remittance_api, service, headers, params):
    service.canned = httpx.Response(200, content=b"<quote><proposals/></quote>")
    with pytest.raises(ProtocolViolation):
        remittance_api.make_payment(headers, params, rf.one_shot_forward())


def test_server_error_without_body_is_normalized(remittance_api, service, headers, params):
    service.canned = httpx.Response(503, content=b"Service Unavailable")
    with pytest.raises(ServiceFailure) as excinfo:
        remittance_api.make_payment(headers, params, rf.one_shot_forward())

    failure = excinfo.value
    assert failure.status_code == 503
    assert [e.reason for e in failure.errors] == [ReasonCode.UNKNOWN_ERROR]


def test_transport_fault_is_service_failure(config, headers, params):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = ApiClient(config, transport=HttpxTransport(config.base_url, transport=httpx.MockTransport(refuse)))
    with pytest.raises(ServiceFailure) as excinfo:
        RemittanceAPI(client).make_payment(headers, params, rf.one_shot_forward())

    assert excinfo.value.errors.has("transport", ReasonCode.TRANSPORT_ERROR)


# ---------------------------------------------------------------------------
# Encryption
# ---------------------------------------------------------------------------

def test_encrypted_payment_matches_plain_payment(remittance_api, service, headers, params):
    reference = rf.new_reference()
    plain = remittance_api.make_payment(headers, params, rf.one_shot_forward(reference=reference))
    encrypted = remittance_api.make_payment_with_encryption(headers, params, rf.one_shot_forward(reference=reference))

    assert encrypted == plain
    assert service.requests[0].headers.get("x-encrypted") is None
    assert service.requests[1].headers["x-encrypted"] == "true"


def test_encrypted_request_does_not_carry_plaintext(remittance_api, service, headers, params):
    request = rf.one_shot_forward()
    remittance_api.make_payment_with_encryption(headers, params, request)

    sent = service.requests[0].content
    assert b"<encrypted_payload>" in sent
    assert request.transaction_reference.encode() not in sent
    assert b"Jones" not in sent


def test_encryption_flag_encrypts_make_payment(config, make_client, service, headers, params):
    api = RemittanceAPI(make_client(dataclasses.replace(config, encryption_enabled=True)))
    payment = api.make_payment(headers, params, rf.one_shot_forward())

    assert payment.remittance_id
    assert service.requests[0].headers["x-encrypted"] == "true"


def test_encryption_without_keys_is_configuration_error(make_client, headers, params):
    api = RemittanceAPI(make_client(ApiConfig(partner_id="ptnr_test_2Ls8dCvE")))
    with pytest.raises(ConfigurationError):
        api.make_payment_with_encryption(headers, params, rf.one_shot_forward())


def test_encrypted_payment_against_quote(quotes_api, remittance_api, headers, params):
    proposal = quotes_api.get_quote(headers, params, rf.forward_quote("40.00")).first_proposal()
    payment = remittance_api.make_payment_with_encryption(
        headers, params, rf.payment_with_quote(proposal.proposal_id),
    )
    assert payment.credited_amount == proposal.credited_amount


def test_encrypted_rejection_is_still_normalized(remittance_api, headers, params):
    with pytest.raises(ServiceFailure) as excinfo:
        remittance_api.make_payment_with_encryption(headers, params, rf.payment_with_unknown_proposal())
    assert excinfo.value.errors.has("proposal_id", "INVALID_INPUT_VALUE")


# ---------------------------------------------------------------------------
# Lookups and cancellation
# ---------------------------------------------------------------------------

def test_retrieve_payment_by_id_and_reference(remittance_api, headers, params):
    request = rf.one_shot_forward()
    created = remittance_api.make_payment(headers, params, request)

    by_id = remittance_api.retrieve_payment(headers, params, created.remittance_id)
    by_ref = remittance_api.retrieve_payment_by_reference(headers, params, request.transaction_reference)

    assert by_id == created
    assert by_ref == created


def test_retrieve_unknown_payment_fails(remittance_api, headers, params):
    with pytest.raises(ServiceFailure) as excinfo:
        remittance_api.retrieve_payment(headers, params, "rem_missing")
    assert excinfo.value.status_code == 404
    assert excinfo.value.errors.has(reason=ReasonCode.NOT_FOUND)


def test_cancel_payment(remittance_api, headers, params):
    created = remittance_api.make_payment(headers, params, rf.one_shot_forward())
    cancelled = remittance_api.cancel_payment(headers, params, created.remittance_id)

    assert cancelled.remittance_id == created.remittance_id
    assert cancelled.status == "CANCELLED"
