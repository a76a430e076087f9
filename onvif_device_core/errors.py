"""Client error types for ONVIF device management interactions."""

from __future__ import annotations


class OnvifClientError(Exception):
    """Base error for ONVIF device client failures."""


class OnvifConfigurationError(OnvifClientError):
    """Client used before (or configured after) session initialization."""


class OnvifValidationError(OnvifClientError):
    """Caller-supplied parameter failed its declared constraint."""

    def __init__(self, action: str, param: str, constraint: str) -> None:
        super().__init__(
            f'The "{param}" argument for {action} is invalid: {constraint}'
        )
        self.action = action
        self.param = param
        self.constraint = constraint


class OnvifNotImplementedError(OnvifClientError, NotImplementedError):
    """Action is recognized but deliberately not implemented."""

    def __init__(self, action: str) -> None:
        super().__init__(f"{action} is not implemented")
        self.action = action


class OnvifInternalError(OnvifClientError):
    """Request envelope could not be built."""


class OnvifTransportError(OnvifClientError):
    """Network or protocol failure reported by the transport."""

    def __init__(self, message: str, *, xml: str | None = None) -> None:
        super().__init__(message)
        self.xml = xml


class OnvifTimeout(OnvifTransportError):
    """Timeout while communicating with the device."""


class OnvifConnectionError(OnvifTransportError):
    """Network connection to the device failed."""


class OnvifResponseError(OnvifTransportError):
    """HTTP or SOAP fault response from the device."""

    def __init__(self, status: int, message: str, *, xml: str | None = None) -> None:
        super().__init__(message, xml=xml)
        self.status = status


class OnvifConfigLoadError(OnvifClientError):
    """Client configuration file is missing or malformed."""
