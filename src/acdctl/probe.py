"""HID probe: device identity and monitor-control classification."""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .constants import MONITOR_USAGE_PAGE
from .hid_channel import DevInfo, HidChannel

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceIdentity:
    """16-bit USB vendor/product pair."""
    vendor_id: int
    product_id: int

    @classmethod
    def from_devinfo(cls, info: DevInfo) -> 'DeviceIdentity':
        # hiddev reports vendor/product as signed 16-bit
        return cls(info.vendor & 0xFFFF, info.product & 0xFFFF)

    @property
    def key(self) -> Tuple[int, int]:
        return (self.vendor_id, self.product_id)

    def __str__(self) -> str:
        return f"{self.vendor_id:04x}:{self.product_id:04x}"


def identify(channel: HidChannel,
             info: Optional[DevInfo] = None) -> DeviceIdentity:
    """Read vendor/product from *channel* (or an already-read *info*)."""
    if info is None:
        info = channel.device_info()
    return DeviceIdentity.from_devinfo(info)


def is_monitor_application(channel: HidChannel,
                           info: Optional[DevInfo] = None) -> bool:
    """Whether any HID application collection is on the monitor usage page.

    Heuristic: the usage page high byte (bits 16-23 of the application
    usage) is 0x80 for USB monitor control.  An application index whose
    query fails is skipped.
    """
    if info is None:
        info = channel.device_info()

    for index in range(info.num_applications):
        try:
            usage = channel.application(index)
        except OSError as e:
            log.debug("%s: application %d query failed: %s",
                      channel.path, index, e)
            continue
        log.debug("%s: application %d usage=%#x", channel.path, index, usage)
        if (usage >> 16) & 0xFF == MONITOR_USAGE_PAGE:
            return True
    return False
