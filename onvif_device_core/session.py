"""Per-device session state and request construction.

A session holds everything needed to authenticate a request against one
device: its service endpoint, optional credentials, and the clock skew
measured by the last successful GetSystemDateAndTime call. One session
exists per client; nothing here is process-wide.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import urlsplit

from .protocol import DEVICE_NAMESPACES, SoapEnvelopeCodec

_LOGGER = logging.getLogger(__name__)

DEFAULT_SERVICE_PATH = "/onvif/device_service"
DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True, slots=True)
class DeviceEndpoint:
    """Device management service address."""

    host: str
    port: int = 80
    path: str = DEFAULT_SERVICE_PATH
    scheme: str = "http"

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}{self.path}"

    @classmethod
    def from_url(cls, url: str) -> DeviceEndpoint:
        """Build an endpoint from a service URL (e.g. a GetCapabilities XAddr)."""
        parts = urlsplit(url)
        if not parts.hostname:
            raise ValueError(f"Service URL has no host: {url!r}")
        scheme = parts.scheme or "http"
        return cls(
            host=parts.hostname,
            port=parts.port or DEFAULT_PORTS.get(scheme, 80),
            path=parts.path or DEFAULT_SERVICE_PATH,
            scheme=scheme,
        )


class OnvifSession:
    """Identity and clock skew for one device.

    Usage:
        session = OnvifSession(DeviceEndpoint("192.168.1.10"), "admin", "secret")
        envelope = session.build_request("<tds:GetHostname/>")
    """

    def __init__(
        self,
        endpoint: DeviceEndpoint,
        username: str | None = None,
        password: str | None = None,
        *,
        codec: SoapEnvelopeCodec | None = None,
        namespaces: Sequence[str] = DEVICE_NAMESPACES,
    ) -> None:
        self.endpoint = endpoint
        self.username = username
        self.password = password
        self._codec = codec or SoapEnvelopeCodec()
        self._namespaces = tuple(namespaces)
        self._clock_skew = 0

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    def current_skew(self) -> int:
        """Return device time minus local time, in milliseconds."""
        return self._clock_skew

    def record_skew(self, device_utc_ms: int, observed_local_ms: int) -> None:
        """Store the offset between a device instant and a local instant.

        Both arguments are epoch milliseconds. The previous value is
        overwritten unconditionally.
        """
        self._clock_skew = device_utc_ms - observed_local_ms
        _LOGGER.info(
            "[%s] Clock skew set to %d ms", self.endpoint.host, self._clock_skew
        )

    def build_request(self, body: str) -> str:
        """Wrap an action body fragment in an envelope for this session.

        When both credentials are set the envelope carries a UsernameToken
        whose Created timestamp is shifted by the current skew.
        """
        return self._codec.build_envelope(
            body,
            namespaces=self._namespaces,
            clock_skew=self._clock_skew,
            username=self.username if self.has_credentials else None,
            password=self.password if self.has_credentials else None,
        )
