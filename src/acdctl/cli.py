#!/usr/bin/env python3
"""
acdctl - Command Line Interface

Entry point for reading and setting display brightness.
"""

import argparse
import logging
import os
import re
import subprocess
import sys
from typing import List, Optional, Sequence, Tuple

from .__version__ import __version__
from .conf import get_defaults
from .constants import UDEV_RULES_PATH
from .errors import ExitCode
from .registry import DEFAULT_REGISTRY, DeviceRegistry
from .session import Mode, Request, Session, SessionOptions

log = logging.getLogger(__name__)

_BRIGHTNESS_RE = re.compile(r'[+-]?\d+')

NOTICE = ("Apple Cinema and Studio Display Control Program. "
          "Please, use --about switch to learn more")

ABOUT = f"""acdctl {__version__}

Reads and sets the backlight of Apple Cinema/Studio Displays and compatible
USB monitors through the Linux hiddev interface.

This program is free software and is distributed under the GPL2.

CREDITS

Based on acdcontrol by Pavel Gurevich, which in turn owes much to Andre
Beckedorf's Windows tool (http://metaexception.de/) and the people who
tested it:

    * Dmitri Kitaynik (20" Display)
    * Mark Wagner (15" and 17" Displays)
    * Veit Wahlich (30" Display)
    * Charles Lepple (24" Display)
    * Arne Zellentin (relative brightness change)

NOTE: You can suppress the startup message with --silent (-s)"""

EPILOG = """
brightness:
    An absolute value 0-255 sets the brightness; a value starting with
    '+' or '-' changes it relative to the current one. Without a value the
    current brightness is printed. You need write permission on the device
    node to change brightness (see --setup-udev).

Examples:
    acdctl --detect /dev/usb/hiddev*   Find which HID device is your display
    acdctl /dev/hiddev0                Read current brightness
    acdctl /dev/hiddev0 160            Set brightness to 160
    acdctl /dev/hiddev0 +10            Increase brightness by 10
    acdctl /dev/hiddev0 -10            Decrease brightness by 10
    acdctl --list-all                  List supported displays
"""


def _setup_logging(verbose: int) -> None:
    """Configure logging from -v count."""
    if verbose >= 2:
        logging.basicConfig(level=logging.DEBUG,
                            format='[%(levelname)s] %(name)s: %(message)s')
        logging.getLogger('usb').setLevel(logging.WARNING)
    elif verbose == 1:
        logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acdctl",
        description="Apple Cinema/Studio Display brightness control",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase verbosity (-v, -vv)")
    parser.add_argument("-s", "--silent", action="store_true",
                        help="Suppress non-functional program output")
    parser.add_argument("-b", "--brief", action="store_true",
                        help="Print only the brightness value when reading it")
    parser.add_argument("-f", "--force", action="store_true",
                        help="Continue on devices that are not in the supported list")
    parser.add_argument("-d", "--detect", action="store_true",
                        help="Perform detection only")
    parser.add_argument("-l", "--list-all", action="store_true",
                        help="List supported devices and exit")
    parser.add_argument("-a", "--about", action="store_true",
                        help="Show information about the program and exit")
    parser.add_argument("--doctor", action="store_true",
                        help="Check dependencies, udev rules and attached displays")
    parser.add_argument("--setup-udev", action="store_true",
                        help="Install udev rules granting access to supported displays")
    parser.add_argument("--dry-run", action="store_true",
                        help="With --setup-udev: print the rules without installing")
    parser.add_argument("targets", nargs="*", metavar="device|brightness",
                        help="hiddev device path(s), e.g. /dev/usb/hiddev0, "
                             "optionally followed by a brightness")
    return parser


def split_targets(targets: Sequence[str], detect: bool = False
                  ) -> Tuple[List[str], Request]:
    """Separate device paths from the brightness specifier.

    In detect mode every argument is a device path.  Otherwise a signed
    number selects a relative change and an unsigned one an absolute
    value; the last one given wins.
    """
    if detect:
        return list(targets), Request(Mode.DETECT)

    paths: List[str] = []
    request = Request(Mode.QUERY)
    for arg in targets:
        if _BRIGHTNESS_RE.fullmatch(arg):
            mode = Mode.ADJUST if arg[0] in '+-' else Mode.SET
            request = Request(mode, int(arg))
            continue
        paths.append(arg)
    return paths, request


def list_devices(registry: DeviceRegistry = DEFAULT_REGISTRY) -> int:
    """Print every supported display."""
    for record in registry.list_all():
        print(registry.format_record(record))
    return ExitCode.OK


def build_udev_rules(registry: DeviceRegistry = DEFAULT_REGISTRY) -> str:
    """udev rules making hiddev nodes of supported displays accessible."""
    lines = ["# USB HID displays - auto-generated by acdctl --setup-udev"]
    for record in registry.list_all():
        lines.append(
            f'# {record.description}\n'
            f'SUBSYSTEM=="usbmisc", KERNEL=="hiddev*", '
            f'ATTRS{{idVendor}}=="{record.vendor_id:04x}", '
            f'ATTRS{{idProduct}}=="{record.product_id:04x}", '
            f'MODE="0666"'
        )
    return "\n\n".join(lines) + "\n"


def setup_udev(dry_run: bool = False,
               registry: DeviceRegistry = DEFAULT_REGISTRY) -> int:
    """Install udev rules so brightness can be changed without root."""
    rules = build_udev_rules(registry)

    if dry_run:
        print(rules)
        print(f"# Would write to {UDEV_RULES_PATH}")
        return ExitCode.OK

    if os.geteuid() != 0:
        print("Error: root required. Run with:", file=sys.stderr)
        print("  sudo acdctl --setup-udev", file=sys.stderr)
        print("\nOr preview first:\n  acdctl --setup-udev --dry-run", file=sys.stderr)
        return ExitCode.FATAL

    try:
        with open(UDEV_RULES_PATH, "w") as f:
            f.write(rules)
    except OSError as e:
        print(f"Error: cannot write {UDEV_RULES_PATH}: {e}", file=sys.stderr)
        return ExitCode.FATAL
    print(f"Wrote {UDEV_RULES_PATH}")

    try:
        subprocess.run(["udevadm", "control", "--reload-rules"], check=False)
        subprocess.run(["udevadm", "trigger", "--subsystem-match=usbmisc"], check=False)
    except OSError as e:
        print(f"Warning: rules written but udev was not reloaded: {e}", file=sys.stderr)
        print("Replug your display's USB cable or reboot to apply them.", file=sys.stderr)
        return ExitCode.FATAL
    print("\nDone. Replug your display's USB cable if the node permissions did not change.")
    return ExitCode.OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)

    defaults = get_defaults()
    _setup_logging(max(args.verbose, defaults['verbose']))

    if args.about:
        print(ABOUT)
        return ExitCode.OK
    if args.list_all:
        return list_devices()
    if args.doctor:
        from .doctor import run_doctor
        return run_doctor()
    if args.setup_udev:
        return setup_udev(dry_run=args.dry_run)

    paths, request = split_targets(args.targets, detect=args.detect)
    if request.mode is Mode.SET and not 0 <= request.value <= 255:
        parser.error(f"brightness {request.value} out of range 0-255")

    if not paths:
        parser.print_help()
        return ExitCode.FATAL

    options = SessionOptions(
        silent=args.silent or defaults['silent'],
        brief=args.brief or defaults['brief'],
        force=args.force,
    )
    if not options.silent:
        print(NOTICE)

    log.debug("Request %s on %s", request, paths)
    result = Session(options=options).run(paths, request)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
