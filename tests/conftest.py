"""Pytest configuration and fixtures for onvif_device_core tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from onvif_device_core import DeviceEndpoint, SoapEnvelopeCodec, SoapResult

FIXED_NONCE = b"0123456789abcdef"
# 2024-03-10T12:00:00Z
FIXED_NOW_MS = 1710072000000


class RecordingTransport:
    """Transport spy that records dispatches and replays scripted outcomes."""

    def __init__(self, *outcomes: SoapResult | BaseException) -> None:
        self.calls: list[tuple[DeviceEndpoint, str, str]] = []
        self._outcomes = list(outcomes)

    async def dispatch(
        self, endpoint: DeviceEndpoint, action: str, envelope: str
    ) -> SoapResult:
        self.calls.append((endpoint, action, envelope))
        outcome = self._outcomes.pop(0) if self._outcomes else SoapResult()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def soap_response(body: str) -> str:
    """Wrap a body fragment in a SOAP 1.2 response envelope."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<env:Envelope xmlns:env="http://www.w3.org/2003/05/soap-envelope" '
        'xmlns:tds="http://www.onvif.org/ver10/device/wsdl" '
        'xmlns:tt="http://www.onvif.org/ver10/schema">'
        f"<env:Body>{body}</env:Body>"
        "</env:Envelope>"
    )


def date_and_time_data(
    *,
    year: str | None = "2024",
    month: str | None = "3",
    day: str | None = "10",
    hour: str | None = "12",
    minute: str | None = "0",
    second: str | None = "0",
) -> dict[str, Any]:
    """Build a parsed GetSystemDateAndTime body, omitting fields given as None."""
    date = {k: v for k, v in (("Year", year), ("Month", month), ("Day", day)) if v}
    time = {
        k: v for k, v in (("Hour", hour), ("Minute", minute), ("Second", second)) if v
    }
    return {
        "GetSystemDateAndTimeResponse": {
            "SystemDateAndTime": {
                "DateTimeType": "NTP",
                "DaylightSavings": "false",
                "TimeZone": {"TZ": "CST-8"},
                "UTCDateTime": {"Time": time, "Date": date},
            }
        }
    }


@pytest.fixture
def endpoint() -> DeviceEndpoint:
    return DeviceEndpoint(host="192.168.1.100", port=8080)


@pytest.fixture
def fixed_codec() -> SoapEnvelopeCodec:
    """Codec with a constant nonce and clock."""
    return SoapEnvelopeCodec(
        nonce_factory=lambda: FIXED_NONCE, clock=lambda: FIXED_NOW_MS
    )


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


def create_mock_response(
    status: int = 200, text_data: str | bytes | None = None
) -> AsyncMock:
    """Create a configured mock response.

    Args:
        status: HTTP status code
        text_data: Body returned from read(), UTF-8 encoded when given as str

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status

    if text_data is not None:
        if isinstance(text_data, str):
            text_data = text_data.encode("utf-8")
        response.read.return_value = text_data

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response
