"""Environment health check for acdctl.

Usage: acdctl --doctor
"""

from __future__ import annotations

import ctypes.util
import logging
import os
import platform
import sys

from .constants import UDEV_RULES_PATH
from .probe import DeviceIdentity
from .registry import DEFAULT_REGISTRY, DeviceRegistry

log = logging.getLogger(__name__)

# ── Distro → package manager mapping ────────────────────────────────────────

_DISTRO_TO_PM: dict[str, str] = {
    'fedora': 'dnf', 'rhel': 'dnf', 'centos': 'dnf', 'rocky': 'dnf',
    'ubuntu': 'apt', 'debian': 'apt', 'linuxmint': 'apt', 'pop': 'apt',
    'raspbian': 'apt',
    'arch': 'pacman', 'manjaro': 'pacman', 'endeavouros': 'pacman',
    'opensuse-tumbleweed': 'zypper', 'opensuse-leap': 'zypper',
    'void': 'xbps', 'alpine': 'apk', 'gentoo': 'emerge',
}

# Fallback: ID_LIKE family → package manager
_FAMILY_TO_PM: dict[str, str] = {
    'fedora': 'dnf', 'rhel': 'dnf',
    'debian': 'apt', 'ubuntu': 'apt',
    'arch': 'pacman',
    'suse': 'zypper',
}

_LIBUSB_PACKAGE: dict[str, str] = {
    'dnf': 'libusb1', 'apt': 'libusb-1.0-0', 'pacman': 'libusb',
    'zypper': 'libusb-1_0-0', 'xbps': 'libusb', 'apk': 'libusb',
    'emerge': 'dev-libs/libusb',
}

_INSTALL_CMD: dict[str, str] = {
    'dnf': 'sudo dnf install', 'apt': 'sudo apt install',
    'pacman': 'sudo pacman -S', 'zypper': 'sudo zypper install',
    'xbps': 'sudo xbps-install', 'apk': 'sudo apk add',
    'emerge': 'sudo emerge',
}


# ── Distro detection ────────────────────────────────────────────────────────

def _read_os_release() -> dict[str, str]:
    """Read /etc/os-release into a dict."""
    try:
        return platform.freedesktop_os_release()
    except OSError:
        return {}


def _detect_pkg_manager() -> str | None:
    """Detect the system package manager from os-release."""
    info = _read_os_release()
    if pm := _DISTRO_TO_PM.get(info.get('ID', '').lower()):
        return pm
    for like in info.get('ID_LIKE', '').lower().split():
        if pm := _FAMILY_TO_PM.get(like):
            return pm
    return None


def _libusb_hint(pm: str | None) -> str:
    """Build 'sudo apt install libusb-1.0-0' string, or list all distros."""
    if pm in _LIBUSB_PACKAGE:
        return f"{_INSTALL_CMD[pm]} {_LIBUSB_PACKAGE[pm]}"
    lines = [f"  {_INSTALL_CMD[m]} {pkg}" for m, pkg in _LIBUSB_PACKAGE.items()]
    return "install one of:\n" + "\n".join(lines)


_OK = "\033[32m[OK]\033[0m"
_MISS = "\033[31m[MISSING]\033[0m"
_OPT = "\033[33m[--]\033[0m"


# ── Checks ───────────────────────────────────────────────────────────────────

def _check_pyusb() -> bool:
    try:
        import usb
    except ImportError:
        print(f"  {_MISS}  pyusb — pip install pyusb")
        return False
    print(f"  {_OK}  pyusb {getattr(usb, '__version__', '')}".rstrip())
    return True


def _check_libusb(pm: str | None) -> bool:
    if ctypes.util.find_library('usb-1.0'):
        print(f"  {_OK}  libusb-1.0")
        return True
    print(f"  {_MISS}  libusb-1.0 — {_libusb_hint(pm)}")
    return False


def _check_udev_rules(registry: DeviceRegistry,
                      path: str = UDEV_RULES_PATH) -> bool:
    """Check the udev rules file exists and covers every known display."""
    if not os.path.isfile(path):
        print(f"  {_OPT}  udev rules not installed (brightness changes need root)"
              " — run: sudo acdctl --setup-udev")
        return True

    try:
        with open(path) as f:
            content = f.read()
    except OSError as e:
        print(f"  {_MISS}  udev rules unreadable: {e}")
        return False

    covered = {v for v in registry.vendor_ids() if f'"{v:04x}"' in content}
    missing = [
        f"{r.vendor_id:04x}:{r.product_id:04x}" for r in registry.list_all()
        if r.vendor_id not in covered
        or f'"{r.product_id:04x}"' not in content
    ]
    if missing:
        print(f"  {_MISS}  udev rules outdated — missing: {', '.join(missing)}")
        print("         run: sudo acdctl --setup-udev")
        return False

    print(f"  {_OK}  udev rules ({path})")
    return True


def find_attached_displays(registry: DeviceRegistry = DEFAULT_REGISTRY
                           ) -> list[DeviceIdentity]:
    """USB devices currently attached whose VID:PID is a supported display."""
    import usb.core

    found = []
    for dev in usb.core.find(find_all=True):
        identity = DeviceIdentity(dev.idVendor & 0xFFFF, dev.idProduct & 0xFFFF)
        if registry.is_supported(identity):
            found.append(identity)
    return found


def _check_attached(registry: DeviceRegistry) -> None:
    """List attached supported displays (informational)."""
    import usb.core

    try:
        displays = find_attached_displays(registry)
    except usb.core.NoBackendError:
        print(f"  {_OPT}  USB scan skipped (no libusb backend)")
        return
    except usb.core.USBError as e:
        print(f"  {_OPT}  USB scan failed: {e}")
        return

    if not displays:
        print(f"  {_OPT}  no supported display attached")
        return
    for identity in displays:
        print(f"  {_OK}  {registry.format_identity(identity)}")


# ── Main entry point ─────────────────────────────────────────────────────────

def run_doctor(registry: DeviceRegistry = DEFAULT_REGISTRY) -> int:
    """Run health check. Returns 0 if all required pieces are present."""
    pm = _detect_pkg_manager()
    distro = _read_os_release().get('PRETTY_NAME', 'Unknown')
    all_ok = True

    print(f"\n  acdctl doctor — {distro}\n")

    v = sys.version_info
    ver = f"{v.major}.{v.minor}.{v.micro}"
    if v >= (3, 10):
        print(f"  {_OK}  Python {ver}")
    else:
        print(f"  {_MISS}  Python {ver} (need >= 3.10)")
        all_ok = False

    print()
    has_pyusb = _check_pyusb()
    all_ok = has_pyusb and all_ok
    if not _check_libusb(pm):
        all_ok = False

    print()
    if not _check_udev_rules(registry):
        all_ok = False

    if has_pyusb:
        print()
        _check_attached(registry)

    print()
    if all_ok:
        print("  All required dependencies OK.\n")
        return 0
    print("  Some required dependencies are missing.\n")
    return 1
