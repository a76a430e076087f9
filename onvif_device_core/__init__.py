"""Client for the ONVIF Device Management service."""

__version__ = "0.1.0"

from .actions import SUPPORTED_ACTIONS, ActionSpec, DeviceAction, ParamSpec
from .client import OnvifDeviceClient
from .clock import DeviceTime, parse_system_date_and_time
from .completion import attach_callback
from .config import OnvifClientConfig, load_client_config
from .errors import (
    OnvifClientError,
    OnvifConfigLoadError,
    OnvifConfigurationError,
    OnvifConnectionError,
    OnvifInternalError,
    OnvifNotImplementedError,
    OnvifResponseError,
    OnvifTimeout,
    OnvifTransportError,
    OnvifValidationError,
)
from .http import OnvifHttpTransport, OnvifTransport, SoapResult
from .protocol import (
    DEVICE_NAMESPACES,
    SoapEnvelopeCodec,
    compute_password_digest,
    parse_response,
)
from .session import DeviceEndpoint, OnvifSession

__all__ = [
    "DEVICE_NAMESPACES",
    "SUPPORTED_ACTIONS",
    "ActionSpec",
    "DeviceAction",
    "DeviceEndpoint",
    "DeviceTime",
    "OnvifClientConfig",
    "OnvifClientError",
    "OnvifConfigLoadError",
    "OnvifConfigurationError",
    "OnvifConnectionError",
    "OnvifDeviceClient",
    "OnvifHttpTransport",
    "OnvifInternalError",
    "OnvifNotImplementedError",
    "OnvifResponseError",
    "OnvifSession",
    "OnvifTimeout",
    "OnvifTransport",
    "OnvifTransportError",
    "OnvifValidationError",
    "ParamSpec",
    "SoapEnvelopeCodec",
    "SoapResult",
    "__version__",
    "attach_callback",
    "compute_password_digest",
    "load_client_config",
    "parse_response",
]
