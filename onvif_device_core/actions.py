"""Device Management action set.

Every action of the ONVIF Device Management service is a member of
:class:`DeviceAction`. Actions with an entry in ``SUPPORTED_ACTIONS`` have a
body builder and declared parameter constraints; all others are recognized
but unsupported and always reject with ``OnvifNotImplementedError``.
Supporting a new action means adding an ``ActionSpec`` entry.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import OnvifValidationError


class DeviceAction(Enum):
    """Device Management actions, valued by their SOAP operation name.

    The lowercased member name is the client method name.
    """

    GET_WSDL_URL = "GetWsdlUrl"
    GET_SERVICES = "GetServices"
    GET_SERVICE_CAPABILITIES = "GetServiceCapabilities"
    GET_CAPABILITIES = "GetCapabilities"
    GET_HOSTNAME = "GetHostname"
    SET_HOSTNAME_FROM_DHCP = "SetHostnameFromDHCP"
    GET_DNS = "GetDNS"
    SET_DNS = "SetDNS"
    GET_NTP = "GetNTP"
    SET_NTP = "SetNTP"
    GET_DYNAMIC_DNS = "GetDynamicDNS"
    SET_DYNAMIC_DNS = "SetDynamicDNS"
    GET_NETWORK_INTERFACES = "GetNetworkInterfaces"
    SET_NETWORK_INTERFACES = "SetNetworkInterfaces"
    GET_NETWORK_PROTOCOLS = "GetNetworkProtocols"
    SET_NETWORK_PROTOCOLS = "SetNetworkProtocols"
    GET_NETWORK_DEFAULT_GATEWAY = "GetNetworkDefaultGateway"
    SET_NETWORK_DEFAULT_GATEWAY = "SetNetworkDefaultGateway"
    GET_ZERO_CONFIGURATION = "GetZeroConfiguration"
    SET_ZERO_CONFIGURATION = "SetZeroConfiguration"
    GET_IP_ADDRESS_FILTER = "GetIPAddressFilter"
    SET_IP_ADDRESS_FILTER = "SetIPAddressFilter"
    ADD_IP_ADDRESS_FILTER = "AddIPAddressFilter"
    REMOVE_IP_ADDRESS_FILTER = "RemoveIPAddressFilter"
    GET_DOT11_CAPABILITIES = "GetDot11Capabilities"
    GET_DOT11_STATUS = "GetDot11Status"
    SCAN_AVAILABLE_DOT11_NETWORKS = "ScanAvailableDot11Networks"
    GET_DEVICE_INFORMATION = "GetDeviceInformation"
    GET_SYSTEM_URIS = "GetSystemUris"
    GET_SYSTEM_BACKUP = "GetSystemBackup"
    RESTORE_SYSTEM = "RestoreSystem"
    START_SYSTEM_RESTORE = "StartSystemRestore"
    GET_SYSTEM_DATE_AND_TIME = "GetSystemDateAndTime"
    SET_SYSTEM_DATE_AND_TIME = "SetSystemDateAndTime"
    SET_SYSTEM_FACTORY_DEFAULT = "SetSystemFactoryDefault"
    UPGRADE_SYSTEM_FIRMWARE = "UpgradeSystemFirmware"
    START_FIRMWARE_UPGRADE = "StartFirmwareUpgrade"
    GET_SYSTEM_LOG = "GetSystemLog"
    GET_SYSTEM_SUPPORT_INFORMATION = "GetSystemSupportInformation"
    SYSTEM_REBOOT = "SystemReboot"
    GET_SCOPES = "GetScopes"
    SET_SCOPES = "SetScopes"
    ADD_SCOPES = "AddScopes"
    REMOVE_SCOPES = "RemoveScopes"
    GET_GEO_LOCATION = "GetGeoLocation"
    SET_GEO_LOCATION = "SetGeoLocation"
    DELETE_GEO_LOCATION = "DeleteGeoLocation"
    GET_DISCOVERY_MODE = "GetDiscoveryMode"
    SET_DISCOVERY_MODE = "SetDiscoveryMode"
    GET_REMOTE_DISCOVERY_MODE = "GetRemoteDiscoveryMode"
    SET_REMOTE_DISCOVERY_MODE = "SetRemoteDiscoveryMode"
    GET_DP_ADDRESSES = "GetDPAddresses"
    SET_DP_ADDRESSES = "SetDPAddresses"
    GET_ACCESS_POLICY = "GetAccessPolicy"
    SET_ACCESS_POLICY = "SetAccessPolicy"
    GET_USERS = "GetUsers"
    CREATE_USERS = "CreateUsers"
    DELETE_USERS = "DeleteUsers"
    SET_USER = "SetUser"
    CREATE_DOT1X_CONFIGURATION = "CreateDot1XConfiguration"
    SET_DOT1X_CONFIGURATION = "SetDot1XConfiguration"
    GET_DOT1X_CONFIGURATION = "GetDot1XConfiguration"
    GET_DOT1X_CONFIGURATIONS = "GetDot1XConfigurations"
    DELETE_DOT1X_CONFIGURATIONS = "DeleteDot1XConfigurations"
    CREATE_CERTIFICATE = "CreateCertificate"
    GET_CERTIFICATES = "GetCertificates"
    GET_CA_CERTIFICATES = "GetCACertificates"
    GET_CERTIFICATES_STATUS = "GetCertificatesStatus"
    SET_CERTIFICATES_STATUS = "SetCertificatesStatus"
    GET_PKCS10_REQUEST = "GetPkcs10Request"
    GET_CLIENT_CERTIFICATE_MODE = "GetClientCertificateMode"
    SET_CLIENT_CERTIFICATE_MODE = "SetClientCertificateMode"
    LOAD_CERTIFICATES = "LoadCertificates"
    LOAD_CERTIFICATE_WITH_PRIVATE_KEY = "LoadCertificateWithPrivateKey"
    GET_CERTIFICATE_INFORMATION = "GetCertificateInformation"
    LOAD_CA_CERTIFICATES = "LoadCACertificates"
    DELETE_CERTIFICATES = "DeleteCertificates"
    GET_REMOTE_USER = "GetRemoteUser"
    SET_REMOTE_USER = "SetRemoteUser"
    GET_ENDPOINT_REFERENCE = "GetEndpointReference"
    GET_RELAY_OUTPUTS = "GetRelayOutputs"
    SET_RELAY_OUTPUT_SETTINGS = "SetRelayOutputSettings"
    SET_RELAY_OUTPUT_STATE = "SetRelayOutputState"
    SEND_AUXILIARY_COMMAND = "SendAuxiliaryCommand"

    @property
    def method_name(self) -> str:
        return self.name.lower()

    @property
    def supported(self) -> bool:
        return self in SUPPORTED_ACTIONS


@dataclass(frozen=True, slots=True)
class ParamSpec:
    """Declared constraint for one action parameter."""

    name: str
    kind: type
    required: bool = False

    @property
    def constraint(self) -> str:
        if self.kind is bool:
            return "must be a boolean"
        return f"must be of type {self.kind.__name__}"

    def accepts(self, value: Any) -> bool:
        if self.kind is not bool and isinstance(value, bool):
            return False
        return isinstance(value, self.kind)


@dataclass(frozen=True, slots=True)
class ActionSpec:
    """Request shape of a supported action."""

    action: DeviceAction
    build_body: Callable[[Mapping[str, Any]], str]
    params: tuple[ParamSpec, ...] = ()
    syncs_clock: bool = False

    def validate(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Check ``params`` against the declared constraints.

        Parameters given as None count as absent.

        Raises:
            OnvifValidationError: On an unknown, missing, or mistyped parameter.
        """
        declared = {p.name: p for p in self.params}
        for name in params:
            if name not in declared:
                raise OnvifValidationError(
                    self.action.method_name, name, "unexpected argument"
                )

        validated: dict[str, Any] = {}
        for spec in self.params:
            value = params.get(spec.name)
            if value is None:
                if spec.required:
                    raise OnvifValidationError(
                        self.action.method_name, spec.name, "is required"
                    )
                continue
            if not spec.accepts(value):
                raise OnvifValidationError(
                    self.action.method_name, spec.name, spec.constraint
                )
            validated[spec.name] = value
        return validated


def _empty_body(action: DeviceAction) -> Callable[[Mapping[str, Any]], str]:
    return lambda _params: f"<tds:{action.value}/>"


def _get_services_body(params: Mapping[str, Any]) -> str:
    include = params.get("include_capability")
    inner = ""
    if include is not None:
        inner = f"<tds:IncludeCapability>{str(include).lower()}</tds:IncludeCapability>"
    return f"<tds:GetServices>{inner}</tds:GetServices>"


def _get_capabilities_body(_params: Mapping[str, Any]) -> str:
    return "<tds:GetCapabilities><tds:Category>All</tds:Category></tds:GetCapabilities>"


def _simple(action: DeviceAction, **kwargs: Any) -> ActionSpec:
    return ActionSpec(action=action, build_body=_empty_body(action), **kwargs)


SUPPORTED_ACTIONS: dict[DeviceAction, ActionSpec] = {
    spec.action: spec
    for spec in (
        _simple(DeviceAction.GET_WSDL_URL),
        ActionSpec(
            action=DeviceAction.GET_SERVICES,
            build_body=_get_services_body,
            params=(ParamSpec("include_capability", bool),),
        ),
        _simple(DeviceAction.GET_SERVICE_CAPABILITIES),
        ActionSpec(
            action=DeviceAction.GET_CAPABILITIES,
            build_body=_get_capabilities_body,
        ),
        _simple(DeviceAction.GET_HOSTNAME),
        _simple(DeviceAction.GET_DEVICE_INFORMATION),
        _simple(DeviceAction.GET_SYSTEM_DATE_AND_TIME, syncs_clock=True),
        _simple(DeviceAction.SYSTEM_REBOOT),
        _simple(DeviceAction.GET_SCOPES),
    )
}

_BY_NAME: dict[str, DeviceAction] = {
    **{action.method_name: action for action in DeviceAction},
    **{action.value: action for action in DeviceAction},
}


def lookup_action(name: str | DeviceAction) -> DeviceAction:
    """Resolve a method name or SOAP operation name to its action.

    Raises:
        KeyError: If the name is not a Device Management action.
    """
    if isinstance(name, DeviceAction):
        return name
    return _BY_NAME[name]
