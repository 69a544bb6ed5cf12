"""
Cross-Border SDK
Client for quoting and paying cross-border remittances.
"""

from crossborder_sdk.cipher import IdentityCipher, JweCipher, PayloadCipher, build_cipher
from crossborder_sdk.client import ApiClient
from crossborder_sdk.config import ApiConfig, load_config
from crossborder_sdk.errors import (
    ConfigurationError,
    CrossBorderError,
    DecryptionError,
    ErrorEntry,
    ErrorSet,
    ProtocolViolation,
    ReasonCode,
    RequestValidationError,
    ServiceFailure,
    TransportError,
)
from crossborder_sdk.models import (
    Address,
    Amount,
    Party,
    Proposal,
    QuoteDirection,
    QuoteType,
    QuotesRequest,
    QuotesResponse,
    RemittanceRequest,
    RemittanceResponse,
    validate_remittance_request,
)
from crossborder_sdk.normalizer import normalize
from crossborder_sdk.quotes import QuotesAPI
from crossborder_sdk.remittance import RemittanceAPI

__all__ = [
    "Address",
    "Amount",
    "ApiClient",
    "ApiConfig",
    "ConfigurationError",
    "CrossBorderError",
    "DecryptionError",
    "ErrorEntry",
    "ErrorSet",
    "IdentityCipher",
    "JweCipher",
    "Party",
    "PayloadCipher",
    "Proposal",
    "ProtocolViolation",
    "QuoteDirection",
    "QuoteType",
    "QuotesAPI",
    "QuotesRequest",
    "QuotesResponse",
    "ReasonCode",
    "RemittanceAPI",
    "RemittanceRequest",
    "RemittanceResponse",
    "RequestValidationError",
    "ServiceFailure",
    "TransportError",
    "build_cipher",
    "load_config",
    "normalize",
    "validate_remittance_request",
]
