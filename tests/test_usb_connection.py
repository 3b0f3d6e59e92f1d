"""Tests for the USB connection with mocked hidapi/pyusb backends."""

from __future__ import annotations

import errno
import sys
from unittest.mock import MagicMock, patch

import pytest

from kraken_x63_mcp.errors import DeviceAccessDenied, DeviceNotFound, ReadTimeout, TransportError
from kraken_x63_mcp.protocol.framing import HID_REPORT_SIZE, pad_report
from kraken_x63_mcp.transport.usb_connection import PRODUCT_ID, VENDOR_ID, USBConnection

_ENUMERATED = {
    "path": b"/dev/hidraw3",
    "manufacturer_string": "NZXT",
    "product_string": "Kraken X",
}


def _backends(enumerated=(_ENUMERATED,), device=None, usb_device=None):
    """Fake ``hid`` and ``usb`` modules for ``patch.dict(sys.modules, ...)``."""
    hid = MagicMock()
    hid.enumerate.return_value = list(enumerated)
    hid.device.return_value = device if device is not None else MagicMock()

    usb = MagicMock()
    usb.core.find.return_value = usb_device
    return {"hid": hid, "usb": usb, "usb.core": usb.core, "usb.util": usb.util}


def _open(modules) -> USBConnection:
    conn = USBConnection()
    with patch.dict(sys.modules, modules):
        conn.open()
    return conn


def test_open_hidapi():
    modules = _backends()
    conn = _open(modules)
    assert conn.connected
    assert conn.backend == "hidapi"
    assert conn.device_info.manufacturer == "NZXT"
    assert conn.device_info.path == "/dev/hidraw3"
    modules["hid"].enumerate.assert_called_once_with(VENDOR_ID, PRODUCT_ID)
    modules["hid"].device.return_value.open_path.assert_called_once_with(b"/dev/hidraw3")


def test_open_not_found():
    modules = _backends(enumerated=())
    conn = USBConnection()
    with patch.dict(sys.modules, modules), pytest.raises(DeviceNotFound):
        conn.open()
    assert not conn.connected


def test_open_access_denied():
    device = MagicMock()
    device.open_path.side_effect = OSError("open failed")
    modules = _backends(device=device)
    conn = USBConnection()
    with patch.dict(sys.modules, modules), pytest.raises(DeviceAccessDenied):
        conn.open()


def test_access_denied_is_connection_error():
    assert issubclass(DeviceAccessDenied, ConnectionError)
    assert issubclass(DeviceNotFound, ConnectionError)


def test_write_requires_full_report():
    conn = _open(_backends())
    with pytest.raises(ValueError):
        conn.write(b"\x10\x01")


def test_write_passes_report_through():
    modules = _backends()
    conn = _open(modules)
    report = pad_report(b"\x10\x01")
    conn.write(report)
    modules["hid"].device.return_value.write.assert_called_once_with(report)


def test_write_failure():
    device = MagicMock()
    device.write.side_effect = OSError("device disconnected")
    conn = _open(_backends(device=device))
    with pytest.raises(TransportError):
        conn.write(pad_report(b"\x10\x01"))


def test_read_returns_bytes():
    device = MagicMock()
    device.read.return_value = [0x75, 0x02] + [0] * 62
    conn = _open(_backends(device=device))
    report = conn.read(250)
    assert isinstance(report, bytes)
    assert len(report) == HID_REPORT_SIZE
    device.read.assert_called_once_with(HID_REPORT_SIZE, 250)


def test_read_timeout():
    device = MagicMock()
    device.read.return_value = []
    conn = _open(_backends(device=device))
    with pytest.raises(ReadTimeout):
        conn.read(10)


def test_flush_drains_queue():
    device = MagicMock()
    device.read.side_effect = [[1] * 64, [2] * 64, []]
    conn = _open(_backends(device=device))
    assert conn.flush() == 2


def test_not_connected():
    conn = USBConnection()
    with pytest.raises(ConnectionError):
        conn.write(pad_report(b""))
    with pytest.raises(ConnectionError):
        conn.read()


def test_close():
    modules = _backends()
    conn = _open(modules)
    conn.close()
    assert not conn.connected
    modules["hid"].device.return_value.close.assert_called_once()
    conn.close()


def test_hidapi_write_failure_drops_handle():
    device = MagicMock()
    device.write.side_effect = OSError("device disconnected")
    conn = _open(_backends(device=device))
    with pytest.raises(TransportError):
        conn.write(pad_report(b"\x10\x01"))
    assert not conn.connected
    device.close.assert_called_once()


def test_hidapi_read_failure_drops_handle():
    device = MagicMock()
    device.read.side_effect = OSError("read error")
    conn = _open(_backends(device=device))
    with pytest.raises(TransportError):
        conn.read(10)
    assert not conn.connected


class _USBError(OSError):
    def __init__(self, message, errno=None):
        super().__init__(message)
        self.errno = errno


class _USBTimeoutError(_USBError):
    pass


def _pyusb_backends(usb_device):
    modules = _backends(enumerated=(), usb_device=usb_device)
    modules["usb.core"].USBError = _USBError
    modules["usb.core"].USBTimeoutError = _USBTimeoutError
    usb_device.is_kernel_driver_active.return_value = False
    return modules


@pytest.mark.parametrize("code, lost", [
    (errno.ENODEV, True),
    (errno.EIO, True),
    (errno.EPIPE, False),
])
def test_pyusb_read_failure(code, lost):
    usb_device = MagicMock()
    modules = _pyusb_backends(usb_device)
    conn = _open(modules)
    assert conn.backend == "pyusb"
    usb_device.read.side_effect = _USBError("transfer failed", errno=code)
    with patch.dict(sys.modules, modules), pytest.raises(TransportError):
        conn.read(10)
    assert conn.connected is not lost
