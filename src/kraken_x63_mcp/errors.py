"""Exception types raised by the driver.

Each error derives from the built-in family callers would already catch
(``ConnectionError``, ``ValueError``, ``TimeoutError``, ...), so code that
only knows about the built-ins keeps working.
"""

from __future__ import annotations


class DeviceNotFound(ConnectionError):
    """No device with the requested vendor/product ID is attached."""


class DeviceAccessDenied(ConnectionError, PermissionError):
    """The device exists but could not be opened (usually udev permissions)."""


class SessionClosed(ConnectionError):
    """An operation was attempted on a closed session."""


class TransportError(OSError):
    """A USB read or write failed."""


class ReadTimeout(TimeoutError):
    """No report arrived within the read timeout."""


class HandshakeTimeout(TimeoutError):
    """The device never acknowledged both handshake requests."""

    def __init__(self, message: str, firmware_ack: bool = False, lighting_ack: bool = False):
        super().__init__(message)
        self.firmware_ack = firmware_ack
        self.lighting_ack = lighting_ack


class InvalidColorCount(ValueError):
    """The number of colors does not fit the effect.

    ``reason`` is one of ``"too-few"``, ``"none-needed"`` or ``"too-many"``.
    """

    TOO_FEW = "too-few"
    NONE_NEEDED = "none-needed"
    TOO_MANY = "too-many"

    def __init__(self, message: str, reason: str, given: int, minimum: int, maximum: int):
        super().__init__(message)
        self.reason = reason
        self.given = given
        self.minimum = minimum
        self.maximum = maximum


class InvalidSpeedIndex(LookupError):
    """A speed class or speed level lies outside the timing table."""


class UnknownEffect(LookupError):
    """An effect has no row in the color mode catalog."""
