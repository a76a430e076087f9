"""ONVIF Device Management client.

Every action runs the same four steps: validate the caller's parameters,
build an authenticated envelope from the session, dispatch it through the
transport, and resolve with the transport's result. Every action returns an
``asyncio.Task``; a legacy ``callback(error, result)`` may be supplied as well.

Usage:
    client = OnvifDeviceClient(OnvifHttpTransport(http_session))
    client.configure(DeviceEndpoint("192.168.1.10"), "admin", "secret")
    await client.get_system_date_and_time()
    info = await client.get_device_information()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from .actions import SUPPORTED_ACTIONS, DeviceAction, lookup_action
from .clock import parse_system_date_and_time
from .completion import CompletionCallback, attach_callback
from .errors import (
    OnvifConfigurationError,
    OnvifInternalError,
    OnvifNotImplementedError,
)
from .http import OnvifHttpTransport, OnvifTransport, SoapResult
from .protocol import SoapEnvelopeCodec, now_ms
from .session import DeviceEndpoint, OnvifSession

if TYPE_CHECKING:
    import aiohttp

    from .config import OnvifClientConfig

_LOGGER = logging.getLogger(__name__)

_UNSUPPORTED_BY_METHOD: dict[str, DeviceAction] = {
    action.method_name: action for action in DeviceAction if not action.supported
}


class OnvifDeviceClient:
    """Facade over the Device Management service of one device."""

    def __init__(
        self,
        transport: OnvifTransport,
        *,
        clock: Callable[[], int] | None = None,
        codec: SoapEnvelopeCodec | None = None,
    ) -> None:
        """Initialize client.

        Args:
            transport: Sends envelopes to the device.
            clock: Local wall clock in epoch ms, used to measure clock skew.
            codec: Envelope renderer handed to the session.
        """
        self._transport = transport
        self._clock = clock or now_ms
        self._codec = codec
        self._session: OnvifSession | None = None

    @classmethod
    def from_config(
        cls, config: OnvifClientConfig, http_session: aiohttp.ClientSession
    ) -> OnvifDeviceClient:
        """Create a configured client talking HTTP through ``http_session``."""
        client = cls(OnvifHttpTransport(http_session, timeout=config.timeout))
        client.configure(config.endpoint, config.username, config.password)
        return client

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def configure(
        self,
        endpoint: DeviceEndpoint | str,
        username: str | None = None,
        password: str | None = None,
    ) -> OnvifSession:
        """Create the session. Must be called exactly once, before any action.

        Args:
            endpoint: Device service endpoint, or its URL.
            username: Optional only if the device has no users.
            password: Optional only if the device has no users.
        """
        if self._session is not None:
            raise OnvifConfigurationError("Client is already configured")
        if isinstance(endpoint, str):
            endpoint = DeviceEndpoint.from_url(endpoint)
        self._session = OnvifSession(endpoint, username, password, codec=self._codec)
        return self._session

    @property
    def session(self) -> OnvifSession | None:
        return self._session

    def _require_session(self) -> OnvifSession:
        if self._session is None:
            raise OnvifConfigurationError(
                "configure() must be called before dispatching actions"
            )
        return self._session

    def current_skew(self) -> int:
        """Return the device clock skew in ms.

        Only meaningful after get_system_date_and_time() has succeeded.
        """
        return self._require_session().current_skew()

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def call(
        self,
        action: DeviceAction | str,
        callback: CompletionCallback | None = None,
        **params: Any,
    ) -> asyncio.Task[SoapResult]:
        """Run an action by enum member, method name, or SOAP operation name.

        Must be called from a running event loop.
        """
        try:
            resolved = lookup_action(action)
        except KeyError:
            raise ValueError(f"Unknown Device Management action: {action!r}") from None
        task = asyncio.get_running_loop().create_task(
            self._dispatch(resolved, params), name=f"onvif-{resolved.value}"
        )
        return attach_callback(task, callback)

    async def _dispatch(
        self, action: DeviceAction, params: Mapping[str, Any]
    ) -> SoapResult:
        spec = SUPPORTED_ACTIONS.get(action)
        if spec is None:
            raise OnvifNotImplementedError(action.value)

        session = self._require_session()
        validated = spec.validate(params)

        try:
            envelope = session.build_request(spec.build_body(validated))
        except Exception as err:
            raise OnvifInternalError(f"Failed to build {action.value} request") from err

        host = session.endpoint.host
        _LOGGER.debug("[%s] Dispatching %s", host, action.value)
        try:
            result = await self._transport.dispatch(
                session.endpoint, action.value, envelope
            )
        except Exception as err:
            _LOGGER.warning("[%s] %s failed: %s", host, action.value, err)
            raise
        received_at = self._clock()

        if spec.syncs_clock:
            self._sync_clock(session, result, received_at)
        return result

    @staticmethod
    def _sync_clock(session: OnvifSession, result: SoapResult, received_at: int) -> None:
        device_time = parse_system_date_and_time(result.data)
        device_ms = device_time.utc_ms if device_time is not None else None
        if device_ms is None:
            _LOGGER.debug(
                "[%s] No usable UTC time in response, skew unchanged",
                session.endpoint.host,
            )
            return
        session.record_skew(device_ms, received_at)

    def __getattr__(self, name: str) -> Callable[..., asyncio.Task[SoapResult]]:
        action = _UNSUPPORTED_BY_METHOD.get(name)
        if action is None:
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r}"
            )

        def _unsupported(
            *args: Any, callback: CompletionCallback | None = None, **_kwargs: Any
        ) -> asyncio.Task[SoapResult]:
            # The completion handler may also trail the positional arguments.
            if callback is None and args and callable(args[-1]):
                callback = args[-1]
            return self.call(action, callback)

        _unsupported.__name__ = name
        return _unsupported

    # -------------------------------------------------------------------------
    # Device Management API
    # -------------------------------------------------------------------------

    def get_wsdl_url(
        self, callback: CompletionCallback | None = None
    ) -> asyncio.Task[SoapResult]:
        """Request the URL where the device's WSDL and schema definitions live."""
        return self.call(DeviceAction.GET_WSDL_URL, callback)

    def get_services(
        self,
        include_capability: bool | None = None,
        callback: CompletionCallback | None = None,
    ) -> asyncio.Task[SoapResult]:
        """List the device's services.

        Args:
            include_capability: When True the device includes each service's
                capabilities. Omitted from the request when None.
            callback: Optional completion handler.
        """
        return self.call(
            DeviceAction.GET_SERVICES, callback, include_capability=include_capability
        )

    def get_service_capabilities(
        self, callback: CompletionCallback | None = None
    ) -> asyncio.Task[SoapResult]:
        """Return the capabilities of the device service."""
        return self.call(DeviceAction.GET_SERVICE_CAPABILITIES, callback)

    def get_capabilities(
        self, callback: CompletionCallback | None = None
    ) -> asyncio.Task[SoapResult]:
        """Return all base capabilities (Category ``All``)."""
        return self.call(DeviceAction.GET_CAPABILITIES, callback)

    def get_hostname(
        self, callback: CompletionCallback | None = None
    ) -> asyncio.Task[SoapResult]:
        """Return the device hostname and whether it was obtained from DHCP."""
        return self.call(DeviceAction.GET_HOSTNAME, callback)

    def get_device_information(
        self, callback: CompletionCallback | None = None
    ) -> asyncio.Task[SoapResult]:
        """Return manufacturer, model, firmware version, serial number and hardware id."""
        return self.call(DeviceAction.GET_DEVICE_INFORMATION, callback)

    def get_system_date_and_time(
        self, callback: CompletionCallback | None = None
    ) -> asyncio.Task[SoapResult]:
        """Fetch the device clock and record the clock skew.

        Call this first on devices that check UsernameToken timestamps; the
        measured skew is applied to every later request. A response without
        a complete UTC date and time still resolves but leaves the skew as is.
        """
        return self.call(DeviceAction.GET_SYSTEM_DATE_AND_TIME, callback)

    def system_reboot(
        self, callback: CompletionCallback | None = None
    ) -> asyncio.Task[SoapResult]:
        """Reboot the device. The result carries the device's reboot message."""
        return self.call(DeviceAction.SYSTEM_REBOOT, callback)

    def get_scopes(
        self, callback: CompletionCallback | None = None
    ) -> asyncio.Task[SoapResult]:
        """Return the device's discovery scope parameters."""
        return self.call(DeviceAction.GET_SCOPES, callback)
