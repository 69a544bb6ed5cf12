"""
Cross-Border SDK — Sample Requests

Ready-made requests for sandbox walk-throughs (scripts/demo.py) and the
test suite.

Each builder returns a fresh request for one of the standard use cases:
forward quote, payment against a quote, one-shot forward / reverse
payment, and a payment with an unknown proposal id.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

from crossborder_sdk.models import (
    Address,
    Amount,
    Party,
    QuoteType,
    QuotesRequest,
    RemittanceRequest,
)

SENDER_URI = "tel:+254108989"
RECIPIENT_URI = "ban:DE89370400440532013000;bic=COBADEFFXXX"


def new_reference() -> str:
    return "ref_" + uuid4().hex[:20]


def sender() -> Party:
    return Party(
        first_name="John",
        last_name="Jones",
        address=Address(
            line1="1 Main St",
            city="Nairobi",
            postal_code="00100",
            country="KEN",
        ),
        nationality="KEN",
        date_of_birth="1985-06-24",
    )


def recipient() -> Party:
    return Party(
        first_name="Jane",
        last_name="Smith",
        address=Address(
            line1="Pennsylvania Avenue",
            city="Berlin",
            postal_code="10115",
            country="DEU",
        ),
        email="jane.smith@example.com",
    )


def forward_quote(amount: str = "100.00", currency: str = "USD", receiver_currency: str = "EUR") -> QuotesRequest:
    return QuotesRequest(
        transaction_reference=new_reference(),
        sender_account_uri=SENDER_URI,
        recipient_account_uri=RECIPIENT_URI,
        payment_amount=Amount(amount=Decimal(amount), currency=currency),
        payment_origination_country="USA",
        quote_type=QuoteType.forward(receiver_currency=receiver_currency, fees_included=False),
    )


def reverse_quote(amount: str = "90.00", currency: str = "EUR", sender_currency: str = "USD") -> QuotesRequest:
    return QuotesRequest(
        transaction_reference=new_reference(),
        sender_account_uri=SENDER_URI,
        recipient_account_uri=RECIPIENT_URI,
        payment_amount=Amount(amount=Decimal(amount), currency=currency),
        payment_origination_country="USA",
        quote_type=QuoteType.reverse(sender_currency=sender_currency),
    )


def payment_with_quote(proposal_id: str) -> RemittanceRequest:
    return RemittanceRequest(
        transaction_reference=new_reference(),
        sender_account_uri=SENDER_URI,
        recipient_account_uri=RECIPIENT_URI,
        proposal_id=proposal_id,
        payment_origination_country="USA",
        source_of_income="SALARY",
        sender=sender(),
        recipient=recipient(),
    )


def one_shot_forward(amount: str = "100.00", reference: str | None = None) -> RemittanceRequest:
    return RemittanceRequest(
        transaction_reference=reference or new_reference(),
        sender_account_uri=SENDER_URI,
        recipient_account_uri=RECIPIENT_URI,
        payment_amount=Amount(amount=Decimal(amount), currency="USD"),
        quote_type=QuoteType.forward(receiver_currency="EUR"),
        payment_origination_country="USA",
        source_of_income="SALARY",
        sender=sender(),
        recipient=recipient(),
    )


def one_shot_reverse(amount: str = "90.00") -> RemittanceRequest:
    return RemittanceRequest(
        transaction_reference=new_reference(),
        sender_account_uri=SENDER_URI,
        recipient_account_uri=RECIPIENT_URI,
        payment_amount=Amount(amount=Decimal(amount), currency="EUR"),
        quote_type=QuoteType.reverse(sender_currency="USD"),
        payment_origination_country="USA",
        source_of_income="SALARY",
        sender=sender(),
        recipient=recipient(),
    )


def payment_with_unknown_proposal() -> RemittanceRequest:
    return payment_with_quote("pen_000000000000000000")
