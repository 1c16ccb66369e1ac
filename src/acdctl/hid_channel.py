"""
HID feature-report channel over the Linux hiddev interface.

The ``HidChannel`` ABC abstracts the hiddev ioctl directive set so that:
  • Tests can inject a fake display (no real hardware needed).
  • ``HiddevChannel`` talks to a real /dev/hiddevN (or /dev/usb/hiddevN)
    node through ``fcntl.ioctl``.

Every directive either succeeds or raises ``OSError``; nothing is retried.

Linux requirements:
  • usbhid kernel driver with CONFIG_USB_HIDDEV
  • read access to the node for queries, write access for brightness
    changes (``acdctl --setup-udev`` installs a rule for known displays)
"""

import fcntl
import logging
import os
import struct
from abc import ABC, abstractmethod
from dataclasses import astuple, dataclass

from .constants import (
    BRIGHTNESS_CONTROL_ID,
    DEVINFO_FORMAT,
    HID_REPORT_TYPE_FEATURE,
    HIDIOCAPPLICATION,
    HIDIOCGDEVINFO,
    HIDIOCGREPORT,
    HIDIOCGUSAGE,
    HIDIOCGVERSION,
    HIDIOCINITREPORT,
    HIDIOCSREPORT,
    HIDIOCSUSAGE,
    INT_FORMAT,
    MONITOR_BRIGHTNESS_USAGE,
    REPORT_INFO_FORMAT,
    USAGE_REF_FORMAT,
)

log = logging.getLogger(__name__)


# =========================================================================
# Data classes (mirror linux/hiddev.h structures)
# =========================================================================

@dataclass(frozen=True)
class DevInfo:
    """struct hiddev_devinfo. vendor/product are raw (signed) driver values."""
    bustype: int = 0
    busnum: int = 0
    devnum: int = 0
    ifnum: int = 0
    vendor: int = 0
    product: int = 0
    version: int = 0
    num_applications: int = 0


@dataclass
class UsageRef:
    """struct hiddev_usage_ref."""
    report_type: int = HID_REPORT_TYPE_FEATURE
    report_id: int = BRIGHTNESS_CONTROL_ID
    field_index: int = 0
    usage_index: int = 0
    usage_code: int = MONITOR_BRIGHTNESS_USAGE
    value: int = 0

    def pack(self) -> bytearray:
        return bytearray(struct.pack(USAGE_REF_FORMAT, *astuple(self)))

    @classmethod
    def unpack(cls, buf: bytes) -> 'UsageRef':
        return cls(*struct.unpack(USAGE_REF_FORMAT, bytes(buf)))


@dataclass(frozen=True)
class ReportInfo:
    """struct hiddev_report_info."""
    report_type: int = HID_REPORT_TYPE_FEATURE
    report_id: int = BRIGHTNESS_CONTROL_ID
    num_fields: int = 1

    def pack(self) -> bytearray:
        return bytearray(struct.pack(REPORT_INFO_FORMAT, *astuple(self)))


def format_driver_version(version: int) -> str:
    """Unpack the HIDIOCGVERSION integer (0x00MMmmpp) as ``M.m.p``."""
    return f"{version >> 16}.{(version >> 8) & 0xFF}.{version & 0xFF}"


# =========================================================================
# Abstract channel
# =========================================================================

class HidChannel(ABC):
    """hiddev directive set against one open device — mockable for testing."""

    path: str = ""

    @abstractmethod
    def driver_version(self) -> int:
        """HIDIOCGVERSION. Packed 0x00MMmmpp integer."""

    @abstractmethod
    def device_info(self) -> DevInfo:
        """HIDIOCGDEVINFO."""

    @abstractmethod
    def application(self, index: int) -> int:
        """HIDIOCAPPLICATION. Usage of the application collection at *index*."""

    @abstractmethod
    def init_report(self) -> None:
        """HIDIOCINITREPORT. Re-initialise the driver's report structures."""

    @abstractmethod
    def get_usage(self, ref: UsageRef) -> int:
        """HIDIOCGUSAGE. Returns the usage value."""

    @abstractmethod
    def get_report(self, info: ReportInfo) -> None:
        """HIDIOCGREPORT."""

    @abstractmethod
    def set_usage(self, ref: UsageRef) -> None:
        """HIDIOCSUSAGE. Stores ``ref.value`` in the driver's report."""

    @abstractmethod
    def set_report(self, info: ReportInfo) -> None:
        """HIDIOCSREPORT. Sends the report to the device."""

    @abstractmethod
    def close(self) -> None:
        """Release the device handle."""

    def __enter__(self) -> 'HidChannel':
        return self

    def __exit__(self, *exc) -> None:
        self.close()


# =========================================================================
# Real hiddev implementation
# =========================================================================

class HiddevChannel(HidChannel):
    """HidChannel backed by a /dev/hiddevN file descriptor."""

    def __init__(self, path: str, writable: bool = False):
        self.path = path
        flags = os.O_RDWR if writable else os.O_RDONLY
        self._fd = os.open(path, flags | getattr(os, 'O_CLOEXEC', 0))
        log.debug("Opened %s (%s)", path, "rw" if writable else "ro")

    @classmethod
    def open(cls, path: str, writable: bool = False) -> 'HiddevChannel':
        return cls(path, writable)

    @property
    def is_open(self) -> bool:
        return self._fd is not None

    def _fileno(self) -> int:
        if self._fd is None:
            raise ValueError(f"{self.path} is closed")
        return self._fd

    def driver_version(self) -> int:
        buf = bytearray(struct.calcsize(INT_FORMAT))
        fcntl.ioctl(self._fileno(), HIDIOCGVERSION, buf, True)
        return struct.unpack(INT_FORMAT, buf)[0]

    def device_info(self) -> DevInfo:
        buf = bytearray(struct.calcsize(DEVINFO_FORMAT))
        fcntl.ioctl(self._fileno(), HIDIOCGDEVINFO, buf, True)
        info = DevInfo(*struct.unpack(DEVINFO_FORMAT, buf))
        log.debug("%s: devinfo %s", self.path, info)
        return info

    def application(self, index: int) -> int:
        # The usage comes back as the ioctl return value
        return fcntl.ioctl(self._fileno(), HIDIOCAPPLICATION, index)

    def init_report(self) -> None:
        fcntl.ioctl(self._fileno(), HIDIOCINITREPORT, 0)

    def get_usage(self, ref: UsageRef) -> int:
        buf = ref.pack()
        fcntl.ioctl(self._fileno(), HIDIOCGUSAGE, buf, True)
        ref.value = UsageRef.unpack(buf).value
        return ref.value

    def get_report(self, info: ReportInfo) -> None:
        fcntl.ioctl(self._fileno(), HIDIOCGREPORT, info.pack(), True)

    def set_usage(self, ref: UsageRef) -> None:
        fcntl.ioctl(self._fileno(), HIDIOCSUSAGE, ref.pack(), True)

    def set_report(self, info: ReportInfo) -> None:
        fcntl.ioctl(self._fileno(), HIDIOCSREPORT, info.pack(), True)

    def close(self) -> None:
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None
            log.debug("Closed %s", self.path)
