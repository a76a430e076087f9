"""Device clock parsing and skew estimation.

GetSystemDateAndTime is the only action whose response is interpreted by
this package: the device's UTC time is compared to the local clock and the
difference is used to timestamp every later UsernameToken.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

_DATE_FIELDS = ("Year", "Month", "Day")
_TIME_FIELDS = ("Hour", "Minute", "Second")


def dig(data: Any, *path: str) -> Any:
    """Follow ``path`` through nested mappings, returning None on the first gap."""
    node = data
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node


def _text(value: Any) -> str:
    if isinstance(value, Mapping):
        value = value.get("_", "")
    return value if isinstance(value, str) else ""


def _int_fields(block: Any, names: tuple[str, ...]) -> tuple[int, ...] | None:
    values = []
    for name in names:
        raw = _text(dig(block, name)).strip()
        if not raw:
            return None
        try:
            values.append(int(raw))
        except ValueError:
            return None
    return tuple(values)


@dataclass(frozen=True, slots=True)
class DeviceTime:
    """Device clock settings reported by GetSystemDateAndTime.

    Attributes:
        time_zone: POSIX TZ string, empty when not reported.
        daylight_savings: DST flag, None when not reported.
        date_time_type: "Manual", "NTP", or empty when not reported.
        utc: Device UTC instant, None unless all six date/time fields are present.
    """

    time_zone: str = ""
    daylight_savings: bool | None = None
    date_time_type: str = ""
    utc: datetime | None = None

    @property
    def utc_ms(self) -> int | None:
        if self.utc is None:
            return None
        return int(self.utc.timestamp()) * 1000


def _parse_utc(utc_block: Any) -> datetime | None:
    date = _int_fields(dig(utc_block, "Date"), _DATE_FIELDS)
    clock = _int_fields(dig(utc_block, "Time"), _TIME_FIELDS)
    if date is None or clock is None:
        return None
    try:
        return datetime(*date, *clock, tzinfo=UTC)
    except ValueError:
        return None


def parse_system_date_and_time(data: Any) -> DeviceTime | None:
    """Extract DeviceTime from a parsed GetSystemDateAndTime response body.

    Returns None when the response carries no SystemDateAndTime block.
    """
    block = dig(data, "GetSystemDateAndTimeResponse", "SystemDateAndTime")
    if not isinstance(block, Mapping):
        return None

    dst_raw = _text(dig(block, "DaylightSavings")).strip()
    return DeviceTime(
        time_zone=_text(dig(block, "TimeZone", "TZ")),
        daylight_savings=(dst_raw == "true") if dst_raw else None,
        date_time_type=_text(dig(block, "DateTimeType")),
        utc=_parse_utc(dig(block, "UTCDateTime")),
    )
