"""SOAP helpers for ONVIF device management messages.

This module renders SOAP 1.2 request envelopes carrying a WS-Security
UsernameToken (PasswordDigest profile) and parses SOAP responses into plain
nested dicts keyed by local element names.
"""

from __future__ import annotations

import base64
import hashlib
import os
import time
import xml.etree.ElementTree as ET
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any
from xml.sax.saxutils import escape

SOAP_ENV_NS = "http://www.w3.org/2003/05/soap-envelope"
WSSE_NS = (
    "http://docs.oasis-open.org/wss/2004/01/"
    "oasis-200401-wss-wssecurity-secext-1.0.xsd"
)
WSU_NS = (
    "http://docs.oasis-open.org/wss/2004/01/"
    "oasis-200401-wss-wssecurity-utility-1.0.xsd"
)
PASSWORD_DIGEST_TYPE = (
    "http://docs.oasis-open.org/wss/2004/01/"
    "oasis-200401-wss-username-token-profile-1.0#PasswordDigest"
)
BASE64_ENCODING_TYPE = (
    "http://docs.oasis-open.org/wss/2004/01/"
    "oasis-200401-wss-soap-message-security-1.0#Base64Binary"
)
DEVICE_WSDL_NS = "http://www.onvif.org/ver10/device/wsdl"

# Namespace declarations every device management request carries.
DEVICE_NAMESPACES: tuple[str, ...] = (
    f'xmlns:tds="{DEVICE_WSDL_NS}"',
    'xmlns:tt="http://www.onvif.org/ver10/schema"',
)

NONCE_SIZE = 16


def now_ms() -> int:
    """Return local wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def _random_nonce() -> bytes:
    return os.urandom(NONCE_SIZE)


def compute_password_digest(nonce: bytes, created: str, password: str) -> str:
    """Compute a UsernameToken PasswordDigest.

    Digest = Base64(SHA1(nonce + created + password)), where ``nonce`` is the
    raw (decoded) nonce bytes.
    """
    raw = nonce + created.encode("utf-8") + password.encode("utf-8")
    return base64.b64encode(hashlib.sha1(raw).digest()).decode("ascii")


def format_created(timestamp_ms: int) -> str:
    """Format epoch milliseconds as an xsd:dateTime in UTC with millisecond precision."""
    seconds, millis = divmod(timestamp_ms, 1000)
    moment = datetime.fromtimestamp(seconds, tz=UTC)
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{millis:03d}Z"


class SoapEnvelopeCodec:
    """Render authenticated SOAP envelopes.

    The nonce source and wall clock are injectable so that rendering is
    reproducible under test.
    """

    def __init__(
        self,
        *,
        nonce_factory: Callable[[], bytes] | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._nonce_factory = nonce_factory or _random_nonce
        self._clock = clock or now_ms

    def build_envelope(
        self,
        body: str,
        *,
        namespaces: Sequence[str] = DEVICE_NAMESPACES,
        clock_skew: int = 0,
        username: str | None = None,
        password: str | None = None,
    ) -> str:
        """Build a SOAP envelope around ``body``.

        Args:
            body: Action-specific XML fragment placed inside ``s:Body``.
            namespaces: ``xmlns`` attribute declarations for the envelope.
            clock_skew: Device-minus-local offset in ms applied to ``Created``.
            username: WS-Security user; the header is omitted without one.
            password: WS-Security password; the header is omitted without one.

        Returns:
            The serialized envelope.
        """
        declarations = " ".join((f'xmlns:s="{SOAP_ENV_NS}"', *namespaces))
        header = ""
        if username and password:
            header = self._security_header(username, password, clock_skew)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            f"<s:Envelope {declarations}>"
            f"{header}"
            f"<s:Body>{body}</s:Body>"
            "</s:Envelope>"
        )

    def _security_header(self, username: str, password: str, clock_skew: int) -> str:
        nonce = self._nonce_factory()
        created = format_created(self._clock() + clock_skew)
        digest = compute_password_digest(nonce, created, password)
        return (
            "<s:Header>"
            f'<Security s:mustUnderstand="1" xmlns="{WSSE_NS}">'
            "<UsernameToken>"
            f"<Username>{escape(username)}</Username>"
            f'<Password Type="{PASSWORD_DIGEST_TYPE}">{digest}</Password>'
            f'<Nonce EncodingType="{BASE64_ENCODING_TYPE}">'
            f"{base64.b64encode(nonce).decode('ascii')}</Nonce>"
            f'<Created xmlns="{WSU_NS}">{created}</Created>'
            "</UsernameToken>"
            "</Security>"
            "</s:Header>"
        )


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _element_to_value(element: ET.Element) -> Any:
    """Convert an element to a string (leaf) or dict (branch).

    Repeated child elements collapse into a list. Attributes are kept under
    the ``"$"`` key; a leaf that has attributes keeps its text under ``"_"``.
    """
    attrs = {_local_name(k): v for k, v in element.attrib.items()}
    children = list(element)
    if not children:
        text = (element.text or "").strip()
        if not attrs:
            return text
        leaf: dict[str, Any] = {"$": attrs}
        if text:
            leaf["_"] = text
        return leaf

    result: dict[str, Any] = {"$": attrs} if attrs else {}
    for child in children:
        key = _local_name(child.tag)
        value = _element_to_value(child)
        if key not in result:
            result[key] = value
        elif isinstance(result[key], list):
            result[key].append(value)
        else:
            result[key] = [result[key], value]
    return result


def parse_response(xml: str | bytes) -> dict[str, Any]:
    """Parse a SOAP response and return the contents of its Body.

    Pass the undecoded bytes where possible so the XML encoding declaration
    decides the character set.

    Raises:
        ET.ParseError: If the document is not well-formed XML.
        ValueError: If the document has no SOAP Body.
    """
    root = ET.fromstring(xml)
    if _local_name(root.tag) != "Envelope":
        raise ValueError("Response is not a SOAP envelope")
    for child in root:
        if _local_name(child.tag) == "Body":
            body = _element_to_value(child)
            return body if isinstance(body, dict) else {}
    raise ValueError("SOAP Body not found")


def _text(value: Any) -> str:
    if isinstance(value, dict):
        return str(value.get("_", ""))
    if isinstance(value, list):
        return _text(value[0]) if value else ""
    return str(value or "")


def find_fault(data: dict[str, Any]) -> str | None:
    """Return the fault reason when a parsed Body carries a SOAP Fault."""
    fault = data.get("Fault")
    if fault is None:
        return None
    if not isinstance(fault, dict):
        return _text(fault) or "SOAP fault"
    reason = fault.get("Reason")
    if isinstance(reason, dict) and "Text" in reason:
        return _text(reason["Text"]) or "SOAP fault"
    # SOAP 1.1 style
    if "faultstring" in fault:
        return _text(fault["faultstring"]) or "SOAP fault"
    return "SOAP fault"
