"""Pytest fixtures: test keys, config, and an in-process remittance service."""

from __future__ import annotations

import datetime
import re
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

# Ensure project root is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from crossborder_sdk.cipher import JweCipher
from crossborder_sdk.client import ApiClient
from crossborder_sdk.config import ApiConfig
from crossborder_sdk.quotes import QuotesAPI
from crossborder_sdk.remittance import RemittanceAPI
from crossborder_sdk.serializer import XmlSerializer
from crossborder_sdk.transport import HttpxTransport

PARTNER_ID = "ptnr_test_2Ls8dCvE"
BASE_URL = "https://sandbox.crossborder.test"
CREATED = "2026-10-19T09:30:00Z"

RATES = {
    ("USD", "EUR"): Decimal("0.90"),
    ("USD", "GBP"): Decimal("0.78"),
}

CENT = Decimal("0.01")


# ---------------------------------------------------------------------------
# Fake upstream service
# ---------------------------------------------------------------------------

def error_document(source: str, reason_code: str, description: str) -> bytes:
    return XmlSerializer().dumps("Errors", {
        "Error": {
            "Source": source,
            "ReasonCode": reason_code,
            "Description": description,
            "Recoverable": False,
            "Details": None,
        },
    })


class FakeCrossBorderService:
    """
    Minimal stand-in for the remittance API, mounted with httpx.MockTransport.

    Issues proposals, honours them once, prices one-shot payments with the
    fixed RATES table and answers encrypted requests with encrypted
    responses.
    """

    def __init__(self, cipher: JweCipher):
        self.cipher = cipher
        self.xml = XmlSerializer()
        self.proposals: dict[str, dict[str, Any]] = {}
        self.used: set[str] = set()
        self.payments: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.canned: Optional[httpx.Response] = None
        self._counter = 0

    # -- plumbing -----------------------------------------------------------

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.canned is not None:
            return self.canned

        encrypted = request.headers.get("x-encrypted") == "true"
        doc: Any = None
        if request.content:
            root, doc = self.xml.loads(request.content)
            if root == "encrypted_payload":
                root, doc = self.xml.loads(self.cipher.decrypt(doc["data"].encode()))

        path = request.url.path
        prefix = f"/send/partners/{PARTNER_ID}/crossborder"
        if not path.startswith(prefix):
            return self._error(404, "partner-id", "NOT_FOUND", "Unknown partner")
        route = path[len(prefix):]

        if request.method == "POST" and route == "/quotes":
            status, root, body = self._quote(doc)
        elif request.method == "POST" and route == "/payment":
            status, root, body = self._pay(doc)
        elif request.method == "POST" and (m := re.fullmatch(r"/([^/]+)/cancel", route)):
            status, root, body = self._cancel(m.group(1))
        elif request.method == "GET" and route == "":
            status, root, body = self._lookup_ref(request.url.params.get("ref", ""))
        elif request.method == "GET" and (m := re.fullmatch(r"/([^/]+)", route)):
            status, root, body = self._lookup(m.group(1))
        else:
            return self._error(404, "path", "NOT_FOUND", "No such resource")

        if status >= 400:
            return httpx.Response(status, content=body)
        content = self.xml.dumps(root, body)
        if encrypted:
            token = self.cipher.encrypt(content).decode()
            content = self.xml.dumps("encrypted_payload", {"data": token})
        return httpx.Response(status, content=content, headers={"Content-Type": "application/xml"})

    def _error(self, status: int, source: str, reason_code: str, description: str) -> httpx.Response:
        return httpx.Response(status, content=error_document(source, reason_code, description))

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}_{self._counter:018d}"

    # -- pricing ------------------------------------------------------------

    def _price(self, amount: dict[str, str], quote_type: dict[str, Any], spread: Decimal = Decimal("0")):
        """Return (charged, credited, rate) or None for an unsupported pair."""
        value = Decimal(amount["amount"])
        if "forward" in quote_type:
            pair = (amount["currency"], quote_type["forward"]["receiver_currency"])
            rate = RATES.get(pair)
            if rate is None:
                return None
            rate -= spread
            charged = {"amount": value, "currency": pair[0]}
            credited = {"amount": (value * rate).quantize(CENT), "currency": pair[1]}
        else:
            pair = (quote_type["reverse"]["sender_currency"], amount["currency"])
            rate = RATES.get(pair)
            if rate is None:
                return None
            rate -= spread
            charged = {"amount": (value / rate).quantize(CENT), "currency": pair[0]}
            credited = {"amount": value, "currency": pair[1]}
        return charged, credited, rate

    # -- routes -------------------------------------------------------------

    def _quote(self, doc: dict[str, Any]):
        proposals = []
        for spread in (Decimal("0"), Decimal("0.01")):
            priced = self._price(doc["payment_amount"], doc["quote_type"], spread)
            if priced is None:
                return 400, None, error_document(
                    "quote_type", "INVALID_INPUT_VALUE", "Currency pair not supported",
                )
            charged, credited, rate = priced
            proposal = {
                "@id": self._next_id("pen"),
                "charged_amount": charged,
                "credited_amount": credited,
                "principal_amount": charged,
                "fx_rate": rate,
                "expiration_date": "2026-10-19T10:00:00Z",
            }
            self.proposals[proposal["@id"]] = proposal
            proposals.append(proposal)
        return 200, "quote", {
            "transaction_reference": doc["transaction_reference"],
            "proposals": {"proposal": proposals},
        }

    def _pay(self, doc: dict[str, Any]):
        proposal_id = doc.get("proposal_id")
        if proposal_id:
            proposal = self.proposals.get(proposal_id)
            if proposal is None:
                return 400, None, error_document(
                    "proposal_id", "INVALID_INPUT_VALUE", "Invalid proposal id",
                )
            if proposal_id in self.used:
                return 400, None, error_document(
                    "proposal_id", "PROPOSAL_ALREADY_USED", "Proposal already used",
                )
            self.used.add(proposal_id)
            charged, credited, rate = (
                proposal["charged_amount"], proposal["credited_amount"], proposal["fx_rate"],
            )
        else:
            priced = self._price(doc["payment_amount"], doc["quote_type"])
            if priced is None:
                return 400, None, error_document(
                    "quote_type", "INVALID_INPUT_VALUE", "Currency pair not supported",
                )
            charged, credited, rate = priced

        payment = {
            "@id": f"rem_{doc['transaction_reference']}",
            "transaction_reference": doc["transaction_reference"],
            "created_timestamp": CREATED,
            "payment_type": doc.get("payment_type"),
            "proposal_id": proposal_id or None,
            "fx_rate": rate,
            "credited_amount": credited,
            "charged_amount": charged,
            "status": "PENDING",
        }
        self.payments[payment["@id"]] = payment
        return 200, "payment", payment

    def _lookup(self, payment_id: str):
        payment = self.payments.get(payment_id)
        if payment is None:
            return 404, None, error_document("payment_id", "NOT_FOUND", "No such payment")
        return 200, "payment", payment

    def _lookup_ref(self, reference: str):
        for payment in self.payments.values():
            if payment["transaction_reference"] == reference:
                return 200, "payment", payment
        return 404, None, error_document("ref", "NOT_FOUND", "No such payment")

    def _cancel(self, payment_id: str):
        payment = self.payments.get(payment_id)
        if payment is None:
            return 404, None, error_document("payment_id", "NOT_FOUND", "No such payment")
        payment = {**payment, "status": "CANCELLED"}
        self.payments[payment_id] = payment
        return 200, "payment", payment


# ---------------------------------------------------------------------------
# Key material
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def key_files(rsa_key, tmp_path_factory) -> dict[str, Path]:
    """PEM private key, PEM public key and a self-signed certificate."""
    root = tmp_path_factory.mktemp("keys")

    private_pem = root / "decryption-key.pem"
    private_pem.write_bytes(rsa_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ))

    public_pem = root / "encryption-key.pub.pem"
    public_pem.write_bytes(rsa_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ))

    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "crossborder-test")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(rsa_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .sign(rsa_key, hashes.SHA256())
    )
    cert_pem = root / "encryption-cert.pem"
    cert_pem.write_bytes(cert.public_bytes(serialization.Encoding.PEM))

    return {"private": private_pem, "public": public_pem, "certificate": cert_pem}


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

@pytest.fixture
def config(key_files) -> ApiConfig:
    return ApiConfig(
        partner_id=PARTNER_ID,
        base_url=BASE_URL,
        encryption_certificate_path=str(key_files["certificate"]),
        decryption_key_path=str(key_files["private"]),
    )


@pytest.fixture
def service(rsa_key) -> FakeCrossBorderService:
    return FakeCrossBorderService(JweCipher(rsa_key.public_key(), rsa_key))


@pytest.fixture
def make_client(service):
    """Build an ApiClient for any config, wired to the fake service."""
    def _make(config: ApiConfig) -> ApiClient:
        transport = HttpxTransport(config.base_url, transport=httpx.MockTransport(service))
        return ApiClient(config, transport=transport)
    return _make


@pytest.fixture
def api_client(config, make_client) -> ApiClient:
    return make_client(config)


@pytest.fixture
def quotes_api(api_client) -> QuotesAPI:
    return QuotesAPI(api_client)


@pytest.fixture
def remittance_api(api_client) -> RemittanceAPI:
    return RemittanceAPI(api_client)


@pytest.fixture
def headers() -> dict[str, str]:
    return {"Content-Type": "application/xml"}


@pytest.fixture
def params() -> dict[str, str]:
    return {"partner-id": PARTNER_ID}
