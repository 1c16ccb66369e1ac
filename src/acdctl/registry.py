"""
Supported display registry.

Known USB displays whose backlight is exposed as a HID feature report:

- Apple:   VID=0x05AC, PID=0x9215/0x9217  (Studio Display 15"/17")
- Apple:   VID=0x05AC, PID=0x9218/0x9219  (Cinema Display 23"/20", old)
- Apple:   VID=0x05AC, PID=0x921E         (Cinema Display 24")
- Apple:   VID=0x05AC, PID=0x9232         (Cinema HD Display 30")
- Samsung: VID=0x0419, PID=0x8002         (SyncMaster 757NF)

The newer 20" and 23" Cinema Displays report the same PIDs as the old
ones, so they are covered by the same entries.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

from .probe import DeviceIdentity

APPLE = 0x05AC
SAMSUNG = 0x0419


@dataclass(frozen=True)
class VendorRecord:
    """Vendor id and display name."""
    vendor_id: int
    name: str


@dataclass(frozen=True, order=True)
class DeviceRecord:
    """Supported display. Ordering is by vendor, then product."""
    vendor_id: int
    product_id: int
    description: str = ""

    @property
    def key(self) -> Tuple[int, int]:
        return (self.vendor_id, self.product_id)


KNOWN_VENDORS: Tuple[VendorRecord, ...] = (
    VendorRecord(SAMSUNG, "Samsung Electronics"),
    VendorRecord(APPLE, "Apple"),
)

KNOWN_DISPLAYS: Tuple[DeviceRecord, ...] = (
    DeviceRecord(APPLE, 0x9215, 'Apple Studio Display 15"'),
    DeviceRecord(APPLE, 0x9217, 'Apple Studio Display 17"'),
    DeviceRecord(APPLE, 0x9219, 'Apple Cinema Display 20" (old)'),
    DeviceRecord(APPLE, 0x9218, 'Apple Cinema Display 23" (old)'),
    DeviceRecord(APPLE, 0x921E, 'Apple Cinema Display 24"'),
    DeviceRecord(APPLE, 0x9232, 'Apple Cinema HD Display 30"'),
    DeviceRecord(SAMSUNG, 0x8002, "Samsung SyncMaster 757NF"),
)


class DeviceRegistry:
    """Read-only lookup of supported displays and vendor names.

    Built once from fixed tables; duplicate (vendor, product) keys are
    rejected at construction.
    """

    def __init__(self, devices: Iterable[DeviceRecord],
                 vendors: Iterable[VendorRecord] = ()):
        by_key: Dict[Tuple[int, int], DeviceRecord] = {}
        for record in devices:
            if record.key in by_key:
                raise ValueError(
                    f"Duplicate display {record.vendor_id:04x}:{record.product_id:04x}"
                )
            by_key[record.key] = record
        self._devices = by_key
        self._vendors: Dict[int, str] = {v.vendor_id: v.name for v in vendors}
        self._ordered = tuple(sorted(by_key.values()))

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, identity: DeviceIdentity) -> bool:
        return self.is_supported(identity)

    def is_supported(self, identity: DeviceIdentity) -> bool:
        return identity.key in self._devices

    def describe(self, identity: DeviceIdentity) -> str:
        """Description of a supported display, or "" when unknown."""
        record = self._devices.get(identity.key)
        return record.description if record else ""

    def is_known_vendor(self, vendor_id: int) -> bool:
        return (vendor_id & 0xFFFF) in self._vendors

    def vendor_name(self, vendor_id: int) -> str:
        return self._vendors.get(vendor_id & 0xFFFF, "")

    def list_all(self) -> Tuple[DeviceRecord, ...]:
        """All supported displays ordered by vendor, then product."""
        return self._ordered

    def vendor_ids(self) -> Tuple[int, ...]:
        return tuple(sorted({r.vendor_id for r in self._ordered}))

    # -- Formatting ------------------------------------------------------

    def format_identity(self, identity: DeviceIdentity) -> str:
        """Render e.g. ``Vendor= 0x5ac (Apple), Product=0x9219[Apple ...]``."""
        text = f"Vendor={identity.vendor_id:>#6x}"
        if self.is_known_vendor(identity.vendor_id):
            text += f" ({self.vendor_name(identity.vendor_id)})"
        text += f", Product={identity.product_id:>#6x}"
        if self.is_supported(identity):
            text += f"[{self.describe(identity)}]"
        return text

    def format_record(self, record: DeviceRecord) -> str:
        """One ``--list-all`` line."""
        return (
            f"Vendor={record.vendor_id:>#6x} ({self.vendor_name(record.vendor_id)}), "
            f"Product={record.product_id:#x} [{record.description}]"
        )


DEFAULT_REGISTRY = DeviceRegistry(KNOWN_DISPLAYS, KNOWN_VENDORS)
