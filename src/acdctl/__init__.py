"""
acdctl - USB HID display brightness control for Linux

Reads and sets the backlight of Apple Cinema/Studio Displays and compatible
USB monitors through HID feature reports on /dev/hiddevN nodes.

Features:
- Query, set and relative brightness changes
- Detection of monitor-class HID devices among arbitrary hiddev nodes
- Built-in list of supported displays
- udev rule setup for non-root access

Usage:
    # As a library
    from acdctl import BrightnessControl, HiddevChannel
    with HiddevChannel.open('/dev/usb/hiddev0', writable=True) as channel:
        control = BrightnessControl(channel)
        control.init_reports()
        control.adjust(+10)

    # Command line
    acdctl --detect /dev/usb/hiddev*   # Find the display
    acdctl /dev/usb/hiddev0            # Read brightness
    acdctl /dev/usb/hiddev0 160        # Set brightness
"""

from acdctl.__version__ import __version__
from acdctl.brightness import BrightnessControl, clamp_brightness
from acdctl.errors import AcdError, ExitCode
from acdctl.hid_channel import HidChannel, HiddevChannel
from acdctl.probe import DeviceIdentity, identify, is_monitor_application
from acdctl.registry import DEFAULT_REGISTRY, DeviceRecord, DeviceRegistry
from acdctl.session import Mode, Request, Session, SessionOptions, SessionResult

__all__ = [
    # Version
    "__version__",
    # Protocol
    "HidChannel",
    "HiddevChannel",
    "BrightnessControl",
    "clamp_brightness",
    "DeviceIdentity",
    "identify",
    "is_monitor_application",
    # Registry
    "DEFAULT_REGISTRY",
    "DeviceRecord",
    "DeviceRegistry",
    # Session
    "Mode",
    "Request",
    "Session",
    "SessionOptions",
    "SessionResult",
    "AcdError",
    "ExitCode",
]
