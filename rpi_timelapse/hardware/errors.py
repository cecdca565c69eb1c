"""Errors raised by capture sessions."""

from rpi_timelapse.core.errors import TimelapseError


class HardwareError(TimelapseError):
    """Base class for capture-session failures."""


class InvalidSettings(HardwareError):
    """A backend setting is missing or malformed."""


class DeviceFailed(HardwareError):
    """The backend could not be opened, negotiated or decoded."""


class MissingCapability(HardwareError):
    """No usable video stream or decoder was found."""


class DeviceNoLongerAvailable(HardwareError):
    """The source is exhausted or disconnected."""


class InvalidBuffer(HardwareError):
    """Pixel data does not match the expected geometry."""


class NotReady(HardwareError):
    """The session is not in a state that allows the call."""


__all__ = [
    "HardwareError",
    "InvalidSettings",
    "DeviceFailed",
    "MissingCapability",
    "DeviceNoLongerAvailable",
    "InvalidBuffer",
    "NotReady",
]
