"""Shared constants for acdctl.

hiddev ioctl request numbers from linux/hiddev.h, built with the
asm-generic/ioctl.h encoding.  Brightness report layout from the Apple
Cinema/Studio Display vendor-defined monitor control page.
"""

# =========================================================================
# ioctl request encoding (asm-generic/ioctl.h)
# =========================================================================

_IOC_NRBITS = 8
_IOC_TYPEBITS = 8
_IOC_SIZEBITS = 14
_IOC_NRSHIFT = 0
_IOC_TYPESHIFT = _IOC_NRSHIFT + _IOC_NRBITS
_IOC_SIZESHIFT = _IOC_TYPESHIFT + _IOC_TYPEBITS
_IOC_DIRSHIFT = _IOC_SIZESHIFT + _IOC_SIZEBITS

IOC_NONE = 0
IOC_WRITE = 1
IOC_READ = 2


def _ioc(dir_: int, type_: int, nr: int, size: int) -> int:
    return ((dir_ << _IOC_DIRSHIFT) | (type_ << _IOC_TYPESHIFT)
            | (nr << _IOC_NRSHIFT) | (size << _IOC_SIZESHIFT))


def _io(nr: int) -> int:
    return _ioc(IOC_NONE, ord('H'), nr, 0)


def _ior(nr: int, size: int) -> int:
    return _ioc(IOC_READ, ord('H'), nr, size)


def _iow(nr: int, size: int) -> int:
    return _ioc(IOC_WRITE, ord('H'), nr, size)


def _iowr(nr: int, size: int) -> int:
    return _ioc(IOC_READ | IOC_WRITE, ord('H'), nr, size)


# =========================================================================
# hiddev structures (struct module formats, native alignment)
# =========================================================================

# struct hiddev_devinfo: bustype, busnum, devnum, ifnum (u32),
# vendor, product, version (s16), num_applications (u32)
DEVINFO_FORMAT = 'IIIIhhhI'
DEVINFO_SIZE = 28

# struct hiddev_report_info: report_type, report_id, num_fields
REPORT_INFO_FORMAT = 'III'
REPORT_INFO_SIZE = 12

# struct hiddev_usage_ref: report_type, report_id, field_index,
# usage_index, usage_code (u32), value (s32)
USAGE_REF_FORMAT = 'IIIIIi'
USAGE_REF_SIZE = 24

INT_FORMAT = 'i'
INT_SIZE = 4

# =========================================================================
# hiddev ioctl requests
# =========================================================================

HIDIOCGVERSION = _ior(0x01, INT_SIZE)
HIDIOCAPPLICATION = _io(0x02)
HIDIOCGDEVINFO = _ior(0x03, DEVINFO_SIZE)
HIDIOCINITREPORT = _io(0x05)
HIDIOCGREPORT = _iow(0x07, REPORT_INFO_SIZE)
HIDIOCSREPORT = _iow(0x08, REPORT_INFO_SIZE)
HIDIOCGUSAGE = _iowr(0x0B, USAGE_REF_SIZE)
HIDIOCSUSAGE = _iow(0x0C, USAGE_REF_SIZE)

# =========================================================================
# HID report layout
# =========================================================================

HID_REPORT_TYPE_FEATURE = 3

# Application usage page high byte for monitor control (USB Monitor
# Control Class: usage pages 0x80-0x83)
MONITOR_USAGE_PAGE = 0x80

# Feature report carrying the backlight value
BRIGHTNESS_CONTROL_ID = 16
MONITOR_BRIGHTNESS_USAGE = 0x820010

BRIGHTNESS_MIN = 0
BRIGHTNESS_MAX = 255

# udev rules written by ``acdctl --setup-udev``
UDEV_RULES_PATH = "/etc/udev/rules.d/99-acdctl.rules"
