"""
Cross-Border SDK — Error Normalizer

Turns an upstream failure body into a ServiceFailure. Total by contract:
whatever the input, the result carries at least one ErrorEntry and the
function itself never raises.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from crossborder_sdk.errors import ErrorEntry, ErrorSet, ReasonCode, ServiceFailure
from crossborder_sdk.serializer import XmlSerializer

logger = logging.getLogger(__name__)

_MAX_EXCERPT = 200
_BOM = b"\xef\xbb\xbf"


def normalize(
    raw: bytes | str | None,
    status_code: Optional[int] = None,
) -> ServiceFailure:
    """Build a ServiceFailure from a failure response body.

    Understands the XML ``<Errors><Error>...`` document and its JSON
    equivalent. Anything else becomes a single UNKNOWN_ERROR entry.
    """
    entries: list[ErrorEntry] = []
    try:
        entries = _parse(raw)
    except Exception as exc:  # normalization must always produce a failure
        logger.debug("Unparseable failure body (status=%s): %s", status_code, exc)

    if not entries:
        entries = [_unknown(raw, status_code)]
    return ServiceFailure(ErrorSet(tuple(entries)), status_code=status_code)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _parse(raw: bytes | str | None) -> list[ErrorEntry]:
    if raw is None:
        return []
    if isinstance(raw, bytes):
        body = raw.removeprefix(_BOM).strip()
    else:
        body = raw.removeprefix("\ufeff").strip()
    if not body:
        return []

    if body[:1] in (b"<", "<"):
        # Bytes go to expat untouched so the declared encoding is honoured
        _, doc = XmlSerializer().loads(body)
        # Root is <Errors>; its payload is {"Error": ...}
        return _entries(doc)

    text = body.decode("utf-8") if isinstance(body, bytes) else body
    if text[0] in "{[":
        doc = json.loads(text)
        errors = _get(doc, "Errors") if isinstance(doc, dict) else doc
        return _entries(errors if errors is not None else doc)
    return []


def _entries(doc: Any) -> list[ErrorEntry]:
    if isinstance(doc, dict):
        items = _get(doc, "Error")
        if items is None and _get(doc, "ReasonCode") is not None:
            items = doc
    else:
        items = doc
    if items is None:
        return []
    if not isinstance(items, list):
        items = [items]
    return [_entry(item) for item in items if isinstance(item, dict)]


def _entry(item: dict[str, Any]) -> ErrorEntry:
    return ErrorEntry(
        source=_text(_get(item, "Source")),
        reason_code=_text(_get(item, "ReasonCode")) or ReasonCode.UNKNOWN_ERROR.value,
        description=_text(_get(item, "Description")),
        recoverable=_flag(_get(item, "Recoverable")),
        details=_details(_get(item, "Details")),
    )


def _details(value: Any) -> tuple[tuple[str, str], ...]:
    if not isinstance(value, dict):
        return ()
    items = _get(value, "Detail")
    if items is None:
        return tuple((str(k), _text(v)) for k, v in value.items())
    if not isinstance(items, list):
        items = [items]
    return tuple(
        (_text(_get(item, "Name")), _text(_get(item, "Value")))
        for item in items
        if isinstance(item, dict)
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get(doc: dict[str, Any], key: str) -> Any:
    """Case-insensitive lookup; tolerates Source / source / SOURCE."""
    if key in doc:
        return doc[key]
    wanted = key.lower()
    for k, v in doc.items():
        if isinstance(k, str) and k.lower() == wanted:
            return v
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, dict):
        return str(value.get("#text", ""))
    return str(value).strip()


def _flag(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    text = _text(value).lower()
    if text in ("true", "false"):
        return text == "true"
    return None


def _unknown(raw: bytes | str | None, status_code: Optional[int]) -> ErrorEntry:
    if isinstance(raw, bytes):
        excerpt = raw[:_MAX_EXCERPT].decode("utf-8", errors="replace")
    else:
        excerpt = (raw or "")[:_MAX_EXCERPT]
    description = f"Unrecognised failure response (status={status_code})"
    if excerpt.strip():
        description += f": {excerpt.strip()}"
    return ErrorEntry(
        source="",
        reason_code=ReasonCode.UNKNOWN_ERROR.value,
        description=description,
    )
