"""
Cross-Border SDK — Wire Serializers

Converts between plain structured values (dicts, lists, strings) and the
wire format. XML is the reference deployment; JSON is accepted as well.

Conventions for the structured form:
  - dict keys become child elements, in insertion order
  - keys starting with "@" are XML attributes
  - lists repeat the element once per item
  - None values are omitted
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Optional

import xml.etree.ElementTree as ET

from crossborder_sdk.errors import ConfigurationError

XML_CONTENT_TYPE = "application/xml"
JSON_CONTENT_TYPE = "application/json"

TEXT_KEY = "#text"


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


# ---------------------------------------------------------------------------
# XML
# ---------------------------------------------------------------------------

class XmlSerializer:
    content_type = XML_CONTENT_TYPE

    def dumps(self, root: str, data: dict[str, Any]) -> bytes:
        doc = ET.Element(root)
        self._fill(doc, data)
        return ET.tostring(doc, encoding="utf-8", xml_declaration=True)

    def _fill(self, el: ET.Element, value: Any) -> None:
        if isinstance(value, dict):
            for key, child in value.items():
                if child is None:
                    continue
                if key == TEXT_KEY:
                    el.text = _scalar(child)
                elif key.startswith("@"):
                    el.set(key[1:], _scalar(child))
                elif isinstance(child, (list, tuple)):
                    for item in child:
                        self._fill(ET.SubElement(el, key), item)
                else:
                    self._fill(ET.SubElement(el, key), child)
        else:
            el.text = _scalar(value)

    def loads(self, raw: bytes | str) -> tuple[str, Any]:
        """Parse a document into (root tag, structured value).

        Raises ValueError when the input is not well-formed XML.
        """
        try:
            root = ET.fromstring(raw)
        except ET.ParseError as exc:
            raise ValueError(f"Invalid XML document: {exc}") from exc
        return _local(root.tag), self._read(root)

    def _read(self, el: ET.Element) -> Any:
        children = list(el)
        if not children and not el.attrib:
            return (el.text or "").strip()

        out: dict[str, Any] = {f"@{_local(k)}": v for k, v in el.attrib.items()}
        for child in children:
            key = _local(child.tag)
            value = self._read(child)
            if key in out:
                existing = out[key]
                if not isinstance(existing, list):
                    out[key] = [existing]
                out[key].append(value)
            else:
                out[key] = value
        text = (el.text or "").strip()
        if text and not children:
            out[TEXT_KEY] = text
        return out


def _local(tag: str) -> str:
    """Strip an ElementTree "{namespace}" prefix."""
    return tag.rsplit("}", 1)[-1]


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

class JsonSerializer:
    content_type = JSON_CONTENT_TYPE

    def dumps(self, root: str, data: dict[str, Any]) -> bytes:
        return json.dumps({root: self._strip(data)}, default=_scalar).encode("utf-8")

    def _strip(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {k.lstrip("@"): self._strip(v) for k, v in value.items() if v is not None}
        if isinstance(value, (list, tuple)):
            return [self._strip(v) for v in value]
        if isinstance(value, Decimal):
            return format(value, "f")
        return value

    def loads(self, raw: bytes | str) -> tuple[str, Any]:
        try:
            doc = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ValueError(f"Invalid JSON document: {exc}") from exc
        if not isinstance(doc, dict) or len(doc) != 1:
            raise ValueError("JSON document must have exactly one root key")
        root, value = next(iter(doc.items()))
        return root, value


Serializer = XmlSerializer | JsonSerializer


def serializer_for(content_type: Optional[str]) -> Serializer:
    """Pick the codec for a Content-Type value (parameters are ignored)."""
    media = (content_type or XML_CONTENT_TYPE).split(";", 1)[0].strip().lower()
    if media in (XML_CONTENT_TYPE, "text/xml"):
        return XmlSerializer()
    if media == JSON_CONTENT_TYPE:
        return JsonSerializer()
    raise ConfigurationError(f"Unsupported content type: {content_type}")
