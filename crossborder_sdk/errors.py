"""
Cross-Border SDK — Error Taxonomy

ServiceFailure is the single failure type surfaced for upstream outcomes.
ConfigurationError and RequestValidationError are local defects raised
before anything is sent.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional


# ---------------------------------------------------------------------------
# Reason codes
# ---------------------------------------------------------------------------

class ReasonCode(str, Enum):
    INVALID_INPUT_VALUE = "INVALID_INPUT_VALUE"
    INVALID_INPUT_FORMAT = "INVALID_INPUT_FORMAT"
    INVALID_INPUT_LENGTH = "INVALID_INPUT_LENGTH"
    MISSING_REQUIRED_INPUT = "MISSING_REQUIRED_INPUT"
    DUPLICATE_VALUE = "DUPLICATE_VALUE"
    PROPOSAL_EXPIRED = "PROPOSAL_EXPIRED"
    PROPOSAL_ALREADY_USED = "PROPOSAL_ALREADY_USED"
    NOT_ALLOWED = "NOT_ALLOWED"
    DECLINE = "DECLINE"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    SYSTEM_ERROR = "SYSTEM_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    # Synthesised locally, never sent by the service
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    # Catch-all for codes this client does not know yet
    OTHER = "OTHER"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "ReasonCode":
        """Map a raw upstream code to a known member, or OTHER."""
        if not raw:
            return cls.UNKNOWN_ERROR
        try:
            return cls(raw.strip().upper())
        except ValueError:
            return cls.OTHER


# ---------------------------------------------------------------------------
# Error entries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorEntry:
    source: str             # field path that caused the rejection
    reason_code: str        # raw code as sent upstream
    description: str = ""
    recoverable: Optional[bool] = None
    details: tuple[tuple[str, str], ...] = ()     # (name, value) pairs, upstream order

    @property
    def reason(self) -> ReasonCode:
        return ReasonCode.parse(self.reason_code)

    def detail(self, name: str, default: Optional[str] = None) -> Optional[str]:
        for key, value in self.details:
            if key == name:
                return value
        return default

    def matches(self, source: Optional[str] = None, reason: Optional[ReasonCode | str] = None) -> bool:
        if source is not None and self.source != source:
            return False
        if reason is not None and self.reason_code != str(getattr(reason, "value", reason)):
            return False
        return True


@dataclass(frozen=True)
class ErrorSet:
    entries: tuple[ErrorEntry, ...] = ()

    def __iter__(self) -> Iterator[ErrorEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    def find(self, source: Optional[str] = None, reason: Optional[ReasonCode | str] = None) -> list[ErrorEntry]:
        """Entries matching the given source and/or reason code."""
        return [e for e in self.entries if e.matches(source, reason)]

    def has(self, source: Optional[str] = None, reason: Optional[ReasonCode | str] = None) -> bool:
        return bool(self.find(source, reason))

    @property
    def reason_codes(self) -> list[str]:
        return [e.reason_code for e in self.entries]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class CrossBorderError(Exception):
    """Base class for every error raised by this package."""


class ServiceFailure(CrossBorderError):
    """The service rejected the call, or its outcome could not be established."""

    def __init__(
        self,
        errors: ErrorSet,
        status_code: Optional[int] = None,
    ):
        self.errors = errors
        self.status_code = status_code
        super().__init__(self._message())

    def _message(self) -> str:
        parts = [
            f"{e.source or '-'}: {e.reason_code}" + (f" ({e.description})" if e.description else "")
            for e in self.errors
        ]
        return "; ".join(parts) or "Service call failed"

    @classmethod
    def single(
        cls,
        source: str,
        reason: ReasonCode,
        description: str = "",
        status_code: Optional[int] = None,
    ) -> "ServiceFailure":
        entry = ErrorEntry(source=source, reason_code=reason.value, description=description)
        return cls(ErrorSet((entry,)), status_code=status_code)


class ProtocolViolation(ServiceFailure):
    """A successful status carried no usable result (empty or malformed body)."""


class ConfigurationError(CrossBorderError):
    """Local setup defect: missing partner id, unreadable or wrong-typed keys."""


class RequestValidationError(CrossBorderError, ValueError):
    """Request rejected locally before transport was invoked."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


class TransportError(CrossBorderError):
    """Raised by Transport implementations when no response was obtained."""


class DecryptionError(CrossBorderError, ValueError):
    """Ciphertext could not be decrypted or is not a valid JWE."""
