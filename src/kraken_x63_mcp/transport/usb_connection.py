"""USB HID connection to the NZXT Kraken X63.

Supports both ``hidapi`` (preferred) and ``pyusb`` backends.
The cooler exposes a single HID interface (0) with interrupt endpoints
0x81 (IN) and 0x01 (OUT); every report is 64 bytes in both directions.
"""

from __future__ import annotations

import errno
import logging
from dataclasses import dataclass

from ..errors import (
    DeviceAccessDenied,
    DeviceNotFound,
    ReadTimeout,
    TransportError,
)
from ..protocol.framing import HID_REPORT_SIZE, hexdump

logger = logging.getLogger(__name__)

VENDOR_ID = 0x1E71
PRODUCT_ID = 0x2007
HID_INTERFACE = 0
EP_IN = 0x81
EP_OUT = 0x01
READ_TIMEOUT_MS = 1000
FLUSH_TIMEOUT_MS = 1

# Stop draining after this many reports so a chatty device cannot stall flush()
_MAX_FLUSH_REPORTS = 64

_LOST_ERRNOS = (errno.ENODEV, errno.EIO)


@dataclass
class DeviceInfo:
    """Basic device identification from USB descriptors."""

    vendor_id: int = VENDOR_ID
    product_id: int = PRODUCT_ID
    manufacturer: str = ""
    product: str = ""
    path: str = ""


class USBConnection:
    """Manages the USB HID connection to the cooler.

    Usage::

        conn = USBConnection()
        conn.open()
        conn.write(report)
        response = conn.read()
        conn.close()
    """

    def __init__(
        self,
        vendor_id: int = VENDOR_ID,
        product_id: int = PRODUCT_ID,
    ) -> None:
        self._vendor_id = vendor_id
        self._product_id = product_id
        self._device = None
        self._backend: str = ""
        self._connected = False
        self._device_info = DeviceInfo(vendor_id=vendor_id, product_id=product_id)

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def backend(self) -> str:
        return self._backend

    @property
    def device_info(self) -> DeviceInfo:
        return self._device_info

    def open(self) -> DeviceInfo:
        """Open a connection to the cooler, trying hidapi first, then pyusb.

        Returns:
            DeviceInfo with USB descriptor information.

        Raises:
            DeviceNotFound: If no backend can find the device.
            DeviceAccessDenied: If the device was found but could not be opened.
        """
        denied: DeviceAccessDenied | None = None
        last_error: Exception | None = None
        for opener in (self._open_hidapi, self._open_pyusb):
            try:
                return opener()
            except DeviceAccessDenied as e:
                logger.debug("%s: %s", opener.__name__, e)
                denied = e
            except (ImportError, DeviceNotFound, OSError) as e:
                logger.debug("%s failed: %s", opener.__name__, e)
                last_error = e

        ids = f"{self._vendor_id:#06x}:{self._product_id:#06x}"
        if denied is not None:
            raise DeviceAccessDenied(
                f"Kraken device ({ids}) found but could not be opened. "
                f"Check that you have permission to access it. Last error: {denied}"
            ) from denied
        raise DeviceNotFound(
            f"Could not find Kraken device ({ids}). "
            f"Ensure the device is connected. Last error: {last_error}"
        ) from last_error

    def _open_hidapi(self) -> DeviceInfo:
        """Open using the hidapi library."""
        import hid

        matches = hid.enumerate(self._vendor_id, self._product_id)
        if not matches:
            raise DeviceNotFound("Device not found via hidapi")

        device = hid.device()
        try:
            device.open_path(matches[0]["path"])
        except (OSError, IOError) as e:
            raise DeviceAccessDenied(f"hidapi could not open device: {e}") from e
        device.set_nonblocking(False)

        self._device = device
        self._backend = "hidapi"
        self._connected = True
        path = matches[0]["path"]
        self._device_info = DeviceInfo(
            vendor_id=self._vendor_id,
            product_id=self._product_id,
            manufacturer=matches[0].get("manufacturer_string") or "",
            product=matches[0].get("product_string") or "",
            path=path.decode(errors="replace") if isinstance(path, bytes) else str(path),
        )

        logger.info(
            "Connected via hidapi: %s %s",
            self._device_info.manufacturer,
            self._device_info.product,
        )
        return self._device_info

    def _open_pyusb(self) -> DeviceInfo:
        """Open using pyusb + libusb."""
        import usb.core
        import usb.util

        dev = usb.core.find(idVendor=self._vendor_id, idProduct=self._product_id)
        if dev is None:
            raise DeviceNotFound("Device not found via pyusb")

        try:
            # Detach kernel driver if needed
            if dev.is_kernel_driver_active(HID_INTERFACE):
                dev.detach_kernel_driver(HID_INTERFACE)
            usb.util.claim_interface(dev, HID_INTERFACE)
        except usb.core.USBError as e:
            if e.errno in (errno.EACCES, errno.EPERM):
                raise DeviceAccessDenied(f"pyusb could not claim device: {e}") from e
            raise

        self._device = dev
        self._backend = "pyusb"
        self._connected = True
        self._device_info = DeviceInfo(
            vendor_id=self._vendor_id,
            product_id=self._product_id,
            manufacturer=usb.util.get_string(dev, dev.iManufacturer) or "",
            product=usb.util.get_string(dev, dev.iProduct) or "",
        )

        logger.info(
            "Connected via pyusb: %s %s",
            self._device_info.manufacturer,
            self._device_info.product,
        )
        return self._device_info

    def close(self) -> None:
        """Close the USB connection."""
        if not self._connected:
            return

        try:
            if self._backend == "hidapi":
                self._device.close()
            elif self._backend == "pyusb":
                import usb.util
                usb.util.release_interface(self._device, HID_INTERFACE)
                usb.util.dispose_resources(self._device)
        except Exception as e:
            logger.warning("Error closing device: %s", e)
        finally:
            self._device = None
            self._connected = False
            logger.info("Disconnected")

    def write(self, data: bytes) -> int:
        """Write a 64-byte HID report to the device.

        Args:
            data: A 64-byte HID report.

        Returns:
            Number of bytes written.

        Raises:
            ConnectionError: If not connected.
            TransportError: If the write fails.
        """
        if not self._connected:
            raise ConnectionError("Not connected to device")

        if len(data) != HID_REPORT_SIZE:
            raise ValueError(
                f"HID report must be {HID_REPORT_SIZE} bytes, got {len(data)}"
            )

        logger.debug("Write: %s", hexdump(data))
        try:
            if self._backend == "hidapi":
                written = self._device.write(data)
            elif self._backend == "pyusb":
                written = self._device.write(EP_OUT, data, timeout=READ_TIMEOUT_MS)
            else:
                raise RuntimeError(f"Unknown backend: {self._backend}")
        except (OSError, ValueError) as e:
            self._check_lost(e)
            raise TransportError(f"Write failed: {e}") from e

        if isinstance(written, int) and written < 0:
            raise TransportError(f"Write failed with status {written}")
        return written

    def read(self, timeout_ms: int = READ_TIMEOUT_MS) -> bytes:
        """Read a 64-byte HID report from the device.

        Args:
            timeout_ms: Read timeout in milliseconds.

        Returns:
            A 64-byte report.

        Raises:
            ConnectionError: If not connected.
            ReadTimeout: If no report arrived within ``timeout_ms``.
            TransportError: If the read fails.
        """
        if not self._connected:
            raise ConnectionError("Not connected to device")

        data = self._read_raw(timeout_ms)
        if not data:
            raise ReadTimeout(f"No report within {timeout_ms} ms")
        report = bytes(data)
        logger.debug("Read:  %s", hexdump(report))
        return report

    def _check_lost(self, error: Exception) -> None:
        """Drop the handle if ``error`` means the device is gone.

        Any hidapi failure counts; for pyusb only ENODEV and EIO do.
        """
        if self._backend == "pyusb" and getattr(error, "errno", None) not in _LOST_ERRNOS:
            return
        logger.warning("Device lost: %s", error)
        self.close()

    def _read_raw(self, timeout_ms: int):
        if self._backend == "hidapi":
            try:
                return self._device.read(HID_REPORT_SIZE, timeout_ms)
            except (OSError, ValueError) as e:
                self._check_lost(e)
                raise TransportError(f"Read failed: {e}") from e

        import usb.core
        try:
            return self._device.read(EP_IN, HID_REPORT_SIZE, timeout=timeout_ms)
        except usb.core.USBTimeoutError:
            return None
        except usb.core.USBError as e:
            self._check_lost(e)
            raise TransportError(f"Read failed: {e}") from e

    def flush(self) -> int:
        """Discard reports the device has already queued.

        Returns:
            Number of reports discarded.
        """
        if not self._connected:
            raise ConnectionError("Not connected to device")

        discarded = 0
        while discarded < _MAX_FLUSH_REPORTS:
            if not self._read_raw(FLUSH_TIMEOUT_MS):
                break
            discarded += 1
        if discarded:
            logger.debug("Discarded %d queued report(s)", discarded)
        return discarded
