"""HTTP transport for ONVIF device management endpoints."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp

from .errors import (
    OnvifConnectionError,
    OnvifResponseError,
    OnvifTimeout,
)
from .protocol import DEVICE_WSDL_NS, find_fault, parse_response
from .session import DeviceEndpoint

_LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True, slots=True)
class SoapResult:
    """Parsed SOAP response.

    Attributes:
        data: Body contents keyed by local element name.
        xml: Raw response document.
        status: HTTP status code.
    """

    data: dict[str, Any] = field(default_factory=dict)
    xml: str = ""
    status: int = 200


class OnvifTransport(Protocol):
    """Boundary the action dispatcher sends envelopes through."""

    async def dispatch(
        self, endpoint: DeviceEndpoint, action: str, envelope: str
    ) -> SoapResult: ...


class OnvifHttpTransport:
    """POST SOAP envelopes to a device service over aiohttp."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._session = session
        self._timeout = timeout

    @staticmethod
    def _headers(action: str) -> dict[str, str]:
        return {
            "Content-Type": (
                "application/soap+xml; charset=utf-8; "
                f'action="{DEVICE_WSDL_NS}/{action}"'
            ),
        }

    async def dispatch(
        self, endpoint: DeviceEndpoint, action: str, envelope: str
    ) -> SoapResult:
        """Send one envelope and parse the reply.

        Raises:
            OnvifResponseError: Non-200 status, SOAP fault, or malformed reply.
            OnvifTimeout: If the request times out.
            OnvifConnectionError: If the network request fails.
        """
        try:
            async with self._session.post(
                endpoint.url,
                data=envelope.encode("utf-8"),
                headers=self._headers(action),
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                status = resp.status
                raw = await resp.read()
        except TimeoutError as err:
            raise OnvifTimeout(f"{action} request timed out") from err
        except aiohttp.ClientError as err:
            raise OnvifConnectionError(f"{action} request failed") from err

        body = raw.decode("utf-8", errors="replace")

        try:
            data = parse_response(raw)
        except (ET.ParseError, ValueError) as err:
            message = (
                f"{action} failed with HTTP {status}"
                if status != 200
                else f"{action} returned a malformed response"
            )
            raise OnvifResponseError(status, message, xml=body) from err

        fault = find_fault(data)
        if fault is not None:
            raise OnvifResponseError(status, f"{action} failed: {fault}", xml=body)
        if status != 200:
            raise OnvifResponseError(
                status, f"{action} failed with HTTP {status}", xml=body
            )

        _LOGGER.debug("[%s] %s -> HTTP %d", endpoint.host, action, status)
        return SoapResult(data=data, xml=body, status=status)
