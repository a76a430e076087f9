"""Tests for SOAP envelope rendering and response parsing."""

from __future__ import annotations

import base64
import hashlib
import xml.etree.ElementTree as ET

import pytest

from onvif_device_core.protocol import (
    DEVICE_NAMESPACES,
    PASSWORD_DIGEST_TYPE,
    SoapEnvelopeCodec,
    compute_password_digest,
    find_fault,
    format_created,
    parse_response,
)

from .conftest import FIXED_NONCE, FIXED_NOW_MS, soap_response


class TestPasswordDigest:
    """UsernameToken PasswordDigest computation."""

    def test_digest_matches_sha1_of_nonce_created_password(self) -> None:
        nonce = base64.b64decode("LKqI6G/AikKCQrN0zqZFlg==")
        created = "2024-01-01T00:00:00Z"
        expected = base64.b64encode(
            hashlib.sha1(nonce + b"2024-01-01T00:00:00Z" + b"thingino").digest()
        ).decode("ascii")

        assert compute_password_digest(nonce, created, "thingino") == expected

    def test_digest_depends_on_created(self) -> None:
        first = compute_password_digest(FIXED_NONCE, "2024-01-01T00:00:00Z", "pw")
        second = compute_password_digest(FIXED_NONCE, "2024-01-01T00:00:01Z", "pw")
        assert first != second


class TestFormatCreated:
    """xsd:dateTime rendering of epoch milliseconds."""

    def test_whole_seconds(self) -> None:
        assert format_created(FIXED_NOW_MS) == "2024-03-10T12:00:00.000Z"

    def test_milliseconds_are_kept(self) -> None:
        assert format_created(FIXED_NOW_MS + 123) == "2024-03-10T12:00:00.123Z"

    def test_negative_offset_crosses_second_boundary(self) -> None:
        assert format_created(FIXED_NOW_MS - 5001) == "2024-03-10T11:59:54.999Z"


class TestBuildEnvelope:
    """SoapEnvelopeCodec.build_envelope()."""

    def test_unauthenticated_envelope_has_no_header(
        self, fixed_codec: SoapEnvelopeCodec
    ) -> None:
        envelope = fixed_codec.build_envelope("<tds:GetHostname/>")

        assert "<s:Header>" not in envelope
        assert "Security" not in envelope
        assert "<s:Body><tds:GetHostname/></s:Body>" in envelope
        for declaration in DEVICE_NAMESPACES:
            assert declaration in envelope

    def test_envelope_is_well_formed(self, fixed_codec: SoapEnvelopeCodec) -> None:
        envelope = fixed_codec.build_envelope(
            "<tds:GetHostname/>", username="admin", password="secret"
        )
        root = ET.fromstring(envelope)
        assert root.tag == "{http://www.w3.org/2003/05/soap-envelope}Envelope"

    def test_authenticated_envelope_carries_username_token(
        self, fixed_codec: SoapEnvelopeCodec
    ) -> None:
        envelope = fixed_codec.build_envelope(
            "<tds:GetHostname/>", username="admin", password="secret"
        )
        created = "2024-03-10T12:00:00.000Z"
        digest = compute_password_digest(FIXED_NONCE, created, "secret")

        assert "<Username>admin</Username>" in envelope
        assert f'<Password Type="{PASSWORD_DIGEST_TYPE}">{digest}</Password>' in envelope
        assert base64.b64encode(FIXED_NONCE).decode("ascii") in envelope
        assert f">{created}</Created>" in envelope
        assert "secret<" not in envelope

    def test_clock_skew_shifts_created(self, fixed_codec: SoapEnvelopeCodec) -> None:
        envelope = fixed_codec.build_envelope(
            "<tds:GetHostname/>",
            clock_skew=-5000,
            username="admin",
            password="secret",
        )
        created = "2024-03-10T11:59:55.000Z"
        digest = compute_password_digest(FIXED_NONCE, created, "secret")

        assert f">{created}</Created>" in envelope
        assert digest in envelope

    def test_missing_password_yields_unauthenticated_envelope(
        self, fixed_codec: SoapEnvelopeCodec
    ) -> None:
        envelope = fixed_codec.build_envelope("<tds:GetHostname/>", username="admin")
        assert "Security" not in envelope

    def test_username_is_escaped(self, fixed_codec: SoapEnvelopeCodec) -> None:
        envelope = fixed_codec.build_envelope(
            "<tds:GetHostname/>", username="a&b<c", password="pw"
        )
        assert "<Username>a&amp;b&lt;c</Username>" in envelope

    def test_random_nonce_by_default(self) -> None:
        codec = SoapEnvelopeCodec(clock=lambda: FIXED_NOW_MS)
        first = codec.build_envelope("<x/>", username="u", password="p")
        second = codec.build_envelope("<x/>", username="u", password="p")
        assert first != second


class TestParseResponse:
    """parse_response() conversion into nested dicts."""

    def test_body_children_keyed_by_local_name(self) -> None:
        xml = soap_response(
            "<tds:GetHostnameResponse><tds:HostnameInformation>"
            "<tt:FromDHCP>false</tt:FromDHCP><tt:Name>camera</tt:Name>"
            "</tds:HostnameInformation></tds:GetHostnameResponse>"
        )

        data = parse_response(xml)

        assert data == {
            "GetHostnameResponse": {
                "HostnameInformation": {"FromDHCP": "false", "Name": "camera"}
            }
        }

    def test_repeated_elements_become_list(self) -> None:
        xml = soap_response(
            "<tds:GetScopesResponse>"
            "<tds:Scopes><tt:ScopeDef>Fixed</tt:ScopeDef>"
            "<tt:ScopeItem>onvif://www.onvif.org/type/video_encoder</tt:ScopeItem>"
            "</tds:Scopes>"
            "<tds:Scopes><tt:ScopeDef>Configurable</tt:ScopeDef>"
            "<tt:ScopeItem>onvif://www.onvif.org/name/cam</tt:ScopeItem>"
            "</tds:Scopes>"
            "</tds:GetScopesResponse>"
        )

        scopes = parse_response(xml)["GetScopesResponse"]["Scopes"]

        assert isinstance(scopes, list)
        assert [s["ScopeDef"] for s in scopes] == ["Fixed", "Configurable"]

    def test_attributes_are_kept(self) -> None:
        xml = soap_response(
            "<tds:GetServicesResponse><tds:Service>"
            '<tds:Version Major="2">x</tds:Version>'
            "</tds:Service></tds:GetServicesResponse>"
        )

        version = parse_response(xml)["GetServicesResponse"]["Service"]["Version"]

        assert version == {"$": {"Major": "2"}, "_": "x"}

    def test_empty_body_yields_empty_dict(self) -> None:
        assert parse_response(soap_response("")) == {}

    def test_malformed_xml_raises(self) -> None:
        with pytest.raises(ET.ParseError):
            parse_response("<env:Envelope")

    def test_non_envelope_raises(self) -> None:
        with pytest.raises(ValueError, match="not a SOAP envelope"):
            parse_response("<html><body>Unauthorized</body></html>")


class TestFindFault:
    """find_fault() detection of SOAP faults."""

    def test_no_fault(self) -> None:
        assert find_fault({"GetHostnameResponse": {}}) is None

    def test_soap12_fault_reason(self) -> None:
        xml = soap_response(
            "<env:Fault><env:Code><env:Value>env:Sender</env:Value></env:Code>"
            '<env:Reason><env:Text xml:lang="en">Sender not Authorized</env:Text>'
            "</env:Reason></env:Fault>"
        )
        assert find_fault(parse_response(xml)) == "Sender not Authorized"

    def test_soap11_faultstring(self) -> None:
        data = {"Fault": {"faultcode": "Client", "faultstring": "Bad request"}}
        assert find_fault(data) == "Bad request"

    def test_fault_without_reason(self) -> None:
        assert find_fault({"Fault": {"Code": {}}}) == "SOAP fault"
