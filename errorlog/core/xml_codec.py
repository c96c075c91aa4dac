"""
XML serialization of Error objects.

The XML form is the full-fidelity copy of an error kept alongside the
indexed columns. Layout::

    <error application="..." host="..." type="..." message="..." source="..."
           detail="..." user="..." time="2024-01-01T10:00:00+00:00"
           statusCode="500" webHostHtmlMessage="...">
      <serverVariables>
        <item name="HTTP_HOST"><value string="example.org" /></item>
      </serverVariables>
      <queryString />
      <form />
      <cookies />
    </error>

Empty attributes and empty collections are omitted.

XML 1.0 cannot carry most control characters (NUL, ESC, ...). A text value
containing any of them is written base64-encoded (UTF-8) under the same
attribute name with a ``Base64`` suffix instead, e.g. ``detailBase64="..."``
or ``<value stringBase64="..." />``, so it decodes back unchanged.
"""
import base64
import binascii
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring as defused_fromstring

from errorlog.core.domain.error import Error
from errorlog.core.exceptions import ErrorXmlError

# Characters outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile(
    "[^\u0009\u000a\u000d\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)

_BASE64_SUFFIX = "Base64"

_STRING_ATTRIBUTES = (
    ("application", "application_name"),
    ("host", "host_name"),
    ("type", "type"),
    ("message", "message"),
    ("source", "source"),
    ("detail", "detail"),
    ("user", "user"),
    ("webHostHtmlMessage", "web_host_html_message"),
)

_COLLECTIONS = (
    ("serverVariables", "server_variables"),
    ("queryString", "query_string"),
    ("form", "form"),
    ("cookies", "cookies"),
)


def _set_text(element: ET.Element, attribute: str, text: str) -> None:
    if _INVALID_XML_CHARS.search(text):
        encoded = base64.b64encode(text.encode("utf-8", "surrogatepass")).decode("ascii")
        element.set(attribute + _BASE64_SUFFIX, encoded)
    else:
        element.set(attribute, text)


def _get_text(element, attribute: str) -> Optional[str]:
    encoded = element.get(attribute + _BASE64_SUFFIX)
    if encoded is None:
        return element.get(attribute)
    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8", "surrogatepass")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ErrorXmlError(f"Invalid {attribute}{_BASE64_SUFFIX} attribute") from e


def _encode_collection(parent: ET.Element, tag: str, values: Mapping[str, str]) -> None:
    if not values:
        return
    collection = ET.SubElement(parent, tag)
    for name, value in values.items():
        item = ET.SubElement(collection, "item")
        _set_text(item, "name", name)
        _set_text(ET.SubElement(item, "value"), "string", value)


def _decode_collection(element) -> Dict[str, str]:
    values = {}
    if element is None:
        return values
    for item in element.findall("item"):
        name = _get_text(item, "name")
        if name is None:
            continue
        value = item.find("value")
        values[name] = (_get_text(value, "string") or "") if value is not None else ""
    return values


def encode_error(error: Error) -> ET.Element:
    """
    Build the XML element for an error.

    Args:
        error: Error to encode

    Returns:
        ``<error>`` element
    """
    root = ET.Element("error")

    for attribute, field_name in _STRING_ATTRIBUTES:
        value = getattr(error, field_name)
        if value:
            _set_text(root, attribute, value)

    root.set("time", error.time.astimezone(timezone.utc).isoformat())

    if error.status_code:
        root.set("statusCode", str(error.status_code))

    for tag, field_name in _COLLECTIONS:
        _encode_collection(root, tag, getattr(error, field_name))

    return root


def encode_string(error: Error) -> str:
    """Serialize an error to an XML string"""
    return ET.tostring(encode_error(error), encoding="unicode")


def decode_error(root) -> Error:
    """
    Rebuild an error from its ``<error>`` element.

    Args:
        root: Parsed ``<error>`` element

    Returns:
        Decoded Error with ``time`` in UTC

    Raises:
        ErrorXmlError: If the element is not a valid error document
    """
    if root.tag != "error":
        raise ErrorXmlError(f"Expected <error> root element, found <{root.tag}>")

    fields = {
        field_name: _get_text(root, attribute) or ""
        for attribute, field_name in _STRING_ATTRIBUTES
    }

    time_text = root.get("time")
    if not time_text:
        raise ErrorXmlError("Error document has no time attribute")
    try:
        time = datetime.fromisoformat(time_text)
    except ValueError as e:
        raise ErrorXmlError(f"Invalid time attribute: {time_text!r}") from e
    if time.tzinfo is None:
        time = time.replace(tzinfo=timezone.utc)

    status_text = root.get("statusCode", "0")
    try:
        status_code = int(status_text)
    except ValueError as e:
        raise ErrorXmlError(f"Invalid statusCode attribute: {status_text!r}") from e

    for tag, field_name in _COLLECTIONS:
        fields[field_name] = _decode_collection(root.find(tag))

    return Error(
        time=time,
        status_code=status_code,
        **fields,
    )


def decode_string(xml: str) -> Error:
    """
    Parse an error from its XML string form.

    Raises:
        ErrorXmlError: If the text is not well-formed or not an error document
    """
    try:
        root = defused_fromstring(xml)
    except (ET.ParseError, DefusedXmlException) as e:
        raise ErrorXmlError(f"Malformed error XML: {e}") from e
    return decode_error(root)
