"""Client configuration loading.

A device is described by a small YAML document:

    host: 192.168.1.10
    port: 80
    path: /onvif/device_service
    username: admin
    password: secret
    timeout: 10
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import OnvifConfigLoadError
from .http import DEFAULT_TIMEOUT
from .session import DEFAULT_SERVICE_PATH, DeviceEndpoint


@dataclass(frozen=True, slots=True)
class OnvifClientConfig:
    """Connection settings for one device."""

    host: str
    port: int = 80
    path: str = DEFAULT_SERVICE_PATH
    scheme: str = "http"
    username: str | None = None
    password: str | None = None
    timeout: float = DEFAULT_TIMEOUT

    @property
    def endpoint(self) -> DeviceEndpoint:
        return DeviceEndpoint(
            host=self.host, port=self.port, path=self.path, scheme=self.scheme
        )


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file with error handling."""
    if not path.exists():
        raise OnvifConfigLoadError(f"File not found: {path}")
    with path.open() as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as err:
            raise OnvifConfigLoadError(f"Invalid YAML in {path}") from err
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise OnvifConfigLoadError(f"Expected a mapping in {path}")
    return data


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    return None if value is None else str(value)


def load_client_config(path: Path | str) -> OnvifClientConfig:
    """Load device connection settings from a YAML file.

    Raises:
        OnvifConfigLoadError: If the file is missing, unreadable, or lacks a host.
    """
    path = Path(path)
    data = _load_yaml(path)

    host = data.get("host")
    if not host:
        raise OnvifConfigLoadError(f"Missing 'host' in {path}")

    try:
        return OnvifClientConfig(
            host=str(host),
            port=int(data.get("port", 80)),
            path=str(data.get("path", DEFAULT_SERVICE_PATH)),
            scheme=str(data.get("scheme", "http")),
            username=_optional_str(data, "username"),
            password=_optional_str(data, "password"),
            timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
        )
    except (TypeError, ValueError) as err:
        raise OnvifConfigLoadError(f"Invalid value in {path}: {err}") from err
