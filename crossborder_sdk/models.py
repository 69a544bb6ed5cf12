"""
Cross-Border SDK — Data Models

Immutable request/response values and their mapping to the wire's
structured form (see serializer.py). Amounts are Decimals end-to-end; the
client never recomputes an amount the service returned.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict


class _Value(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Shared building blocks
# ---------------------------------------------------------------------------

class Amount(_Value):
    amount: Decimal
    currency: str

    def to_wire(self) -> dict[str, Any]:
        return {"amount": self.amount, "currency": self.currency}

    @classmethod
    def from_wire(cls, data: Any) -> Optional["Amount"]:
        if not isinstance(data, dict):
            return None
        amount = _decimal(data.get("amount"))
        if amount is None:
            return None
        return cls(amount=amount, currency=str(data.get("currency") or ""))


class QuoteDirection(str, Enum):
    FORWARD = "forward"     # sender amount fixed
    REVERSE = "reverse"     # destination amount fixed


class QuoteType(_Value):
    direction: QuoteDirection
    fees_included: Optional[bool] = None
    receiver_currency: Optional[str] = None
    sender_currency: Optional[str] = None

    @classmethod
    def forward(cls, receiver_currency: str, fees_included: bool = False) -> "QuoteType":
        return cls(
            direction=QuoteDirection.FORWARD,
            fees_included=fees_included,
            receiver_currency=receiver_currency,
        )

    @classmethod
    def reverse(cls, sender_currency: str) -> "QuoteType":
        return cls(direction=QuoteDirection.REVERSE, sender_currency=sender_currency)

    def to_wire(self) -> dict[str, Any]:
        if self.direction == QuoteDirection.FORWARD:
            body = {
                "fees_included": self.fees_included,
                "receiver_currency": self.receiver_currency,
            }
        else:
            body = {"sender_currency": self.sender_currency}
        return {self.direction.value: body}


class Address(_Value):
    line1: str
    line2: Optional[str] = None
    city: str
    country_subdivision: Optional[str] = None
    postal_code: Optional[str] = None
    country: str

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump()


class Party(_Value):
    """Sender or recipient details."""
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    organization_name: Optional[str] = None
    address: Optional[Address] = None
    nationality: Optional[str] = None
    date_of_birth: Optional[str] = None     # YYYY-MM-DD
    email: Optional[str] = None
    phone: Optional[str] = None
    government_ids: Optional[str] = None

    def to_wire(self) -> dict[str, Any]:
        out = self.model_dump(exclude={"address"})
        if self.address is not None:
            out["address"] = self.address.to_wire()
        return out


# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------

class QuotesRequest(_Value):
    transaction_reference: str
    sender_account_uri: str
    recipient_account_uri: str
    payment_amount: Amount
    payment_origination_country: str
    payment_type: str = "P2P"
    quote_type: QuoteType
    bank_code: Optional[str] = None

    ROOT: ClassVar[str] = "quoterequest"

    def to_wire(self) -> dict[str, Any]:
        return {
            "transaction_reference": self.transaction_reference,
            "sender_account_uri": self.sender_account_uri,
            "recipient_account_uri": self.recipient_account_uri,
            "payment_amount": self.payment_amount.to_wire(),
            "payment_origination_country": self.payment_origination_country,
            "payment_type": self.payment_type,
            "quote_type": self.quote_type.to_wire(),
            "bank_code": self.bank_code,
        }


class Proposal(_Value):
    proposal_id: str
    source_amount: Optional[Amount] = None      # wire: charged_amount
    credited_amount: Amount
    principal_amount: Optional[Amount] = None
    fees_amount: Optional[Amount] = None
    fx_rate: Optional[Decimal] = None
    expiration_date: Optional[str] = None

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "Proposal":
        return cls(
            proposal_id=_attr(data, "id"),
            source_amount=Amount.from_wire(data.get("charged_amount")),
            credited_amount=Amount.from_wire(data.get("credited_amount")),
            principal_amount=Amount.from_wire(data.get("principal_amount")),
            fees_amount=Amount.from_wire(data.get("fees_amount")),
            fx_rate=_decimal(data.get("fx_rate")),
            expiration_date=_optional(data.get("expiration_date")),
        )


class QuotesResponse(_Value):
    transaction_reference: Optional[str] = None
    proposals: tuple[Proposal, ...] = ()

    ROOT: ClassVar[str] = "quote"

    def first_proposal(self) -> Optional[Proposal]:
        return self.proposals[0] if self.proposals else None

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "QuotesResponse":
        container = data.get("proposals")
        items = container.get("proposal") if isinstance(container, dict) else None
        return cls(
            transaction_reference=_optional(data.get("transaction_reference")),
            proposals=tuple(Proposal.from_wire(p) for p in _as_list(items) if isinstance(p, dict)),
        )


# ---------------------------------------------------------------------------
# Remittance
# ---------------------------------------------------------------------------

class RemittanceRequest(_Value):
    """
    Payment instruction.

    Exactly one of ``proposal_id`` (payment against a quote) and
    ``payment_amount`` (one-shot payment) must be set; see
    validate_remittance_request().
    """
    transaction_reference: str
    sender_account_uri: str
    recipient_account_uri: str
    proposal_id: Optional[str] = None
    payment_amount: Optional[Amount] = None
    quote_type: Optional[QuoteType] = None
    payment_origination_country: str
    payment_type: str = "P2P"
    source_of_income: Optional[str] = None
    purpose_of_payment: Optional[str] = None
    sender: Optional[Party] = None
    recipient: Optional[Party] = None
    receiving_bank_name: Optional[str] = None
    receiving_bank_branch_name: Optional[str] = None

    ROOT: ClassVar[str] = "paymentrequest"

    def to_wire(self) -> dict[str, Any]:
        return {
            "transaction_reference": self.transaction_reference,
            "sender_account_uri": self.sender_account_uri,
            "recipient_account_uri": self.recipient_account_uri,
            "proposal_id": self.proposal_id,
            "payment_amount": self.payment_amount.to_wire() if self.payment_amount else None,
            "quote_type": self.quote_type.to_wire() if self.quote_type else None,
            "payment_origination_country": self.payment_origination_country,
            "payment_type": self.payment_type,
            "source_of_income": self.source_of_income,
            "purpose_of_payment": self.purpose_of_payment,
            "sender": self.sender.to_wire() if self.sender else None,
            "recipient": self.recipient.to_wire() if self.recipient else None,
            "receiving_bank_name": self.receiving_bank_name,
            "receiving_bank_branch_name": self.receiving_bank_branch_name,
        }


def validate_remittance_request(request: RemittanceRequest) -> list[str]:
    """
    Return a list of problems with the proposal / amount exclusivity.
    Empty list means the request may be sent.

    The service remains the authority on everything else.
    """
    has_proposal = bool(request.proposal_id and request.proposal_id.strip())
    has_amount = request.payment_amount is not None

    if has_proposal and has_amount:
        return ["proposal_id and payment_amount are mutually exclusive"]
    if not has_proposal and not has_amount:
        return ["one of proposal_id or payment_amount is required"]
    return []


class RemittanceResponse(_Value):
    remittance_id: str
    transaction_reference: Optional[str] = None
    status: Optional[str] = None
    created_timestamp: Optional[str] = None
    proposal_id: Optional[str] = None
    fx_rate: Optional[Decimal] = None
    credited_amount: Optional[Amount] = None
    charged_amount: Optional[Amount] = None
    principal_amount: Optional[Amount] = None
    fees_amount: Optional[Amount] = None

    ROOT: ClassVar[str] = "payment"

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "RemittanceResponse":
        return cls(
            remittance_id=_attr(data, "id"),
            transaction_reference=_optional(data.get("transaction_reference")),
            status=_optional(data.get("status")),
            created_timestamp=_optional(data.get("created_timestamp")),
            proposal_id=_optional(data.get("proposal_id")),
            fx_rate=_decimal(data.get("fx_rate")),
            credited_amount=Amount.from_wire(data.get("credited_amount")),
            charged_amount=Amount.from_wire(data.get("charged_amount")),
            principal_amount=Amount.from_wire(data.get("principal_amount")),
            fees_amount=Amount.from_wire(data.get("fees_amount")),
        )


# ---------------------------------------------------------------------------
# Wire helpers
# ---------------------------------------------------------------------------

def _attr(data: dict[str, Any], name: str) -> str:
    """XML attributes arrive as "@name", JSON keys as "name"."""
    value = data.get(f"@{name}", data.get(name))
    return str(value).strip() if value is not None else ""


def _optional(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _decimal(value: Any) -> Optional[Decimal]:
    text = _optional(value)
    if text is None:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Not a decimal amount: {text!r}")


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]
