"""USB transport backends."""

from .usb_connection import USBConnection, DeviceInfo
