"""
Brightness transaction engine.

Protocol against the brightness feature report (report id 16, usage
0x820010) of an already opened and identified display:

    init:   HIDIOCINITREPORT
    get:    HIDIOCGUSAGE → HIDIOCGREPORT        (usage value = brightness)
    set:    HIDIOCSUSAGE → HIDIOCSREPORT
    adjust: get → clamp(current + delta) → set → get (read-back)

Each of the four usage/report directives is attempted exactly once and any
failure aborts the transaction.  Usage failures raise ``UsageCommandError``,
report failures ``ReportCommandError``.

Right after the display powers on (or is reset) a get issued before any
set can return 0 even though a non-zero brightness is persisted in the
monitor.  This is how the firmware behaves; the value is reported as read.
"""

import logging

from .constants import BRIGHTNESS_MAX, BRIGHTNESS_MIN
from .errors import InitReportError, ReportCommandError, UsageCommandError
from .hid_channel import HidChannel, ReportInfo, UsageRef

log = logging.getLogger(__name__)


def clamp_brightness(value: int) -> int:
    """Clamp *value* to the 0-255 usage range."""
    return max(BRIGHTNESS_MIN, min(BRIGHTNESS_MAX, value))


class BrightnessControl:
    """Get/set/adjust the backlight of one display over a HidChannel."""

    def __init__(self, channel: HidChannel):
        self.channel = channel
        self.usage = UsageRef()
        self.report = ReportInfo()

    @property
    def path(self) -> str:
        return self.channel.path

    def init_reports(self) -> None:
        """Re-initialise the driver's report structures."""
        try:
            self.channel.init_report()
        except OSError as e:
            raise InitReportError(
                "FATAL: Failed to initialize internal report structures"
                f" ({self.path}: {e.strerror or e})"
            ) from e
        log.debug("%s: report structures initialised", self.path)

    # -- Directive wrappers ----------------------------------------------

    def _usage_failed(self, op: str, e: OSError) -> UsageCommandError:
        return UsageCommandError(f"{self.path}: {op} usage failed: {e.strerror or e}")

    def _report_failed(self, op: str, e: OSError) -> ReportCommandError:
        return ReportCommandError(f"{self.path}: {op} report failed: {e.strerror or e}")

    def get(self) -> int:
        """Read the current brightness."""
        try:
            self.channel.get_usage(self.usage)
        except OSError as e:
            raise self._usage_failed("get", e) from e
        try:
            self.channel.get_report(self.report)
        except OSError as e:
            raise self._report_failed("get", e) from e
        log.debug("%s: get brightness=%d", self.path, self.usage.value)
        return self.usage.value

    def set(self, value: int) -> None:
        """Write *value* as the new brightness.

        The caller validates *value*; it is sent as given.
        """
        self.usage.value = value
        try:
            self.channel.set_usage(self.usage)
        except OSError as e:
            raise self._usage_failed("set", e) from e
        try:
            self.channel.set_report(self.report)
        except OSError as e:
            raise self._report_failed("set", e) from e
        log.debug("%s: set brightness=%d", self.path, value)

    def adjust(self, delta: int) -> int:
        """Change brightness by *delta* and return the read-back value.

        The device may snap the written value to its own granularity, so
        the result is what the display reports after the write, not the
        computed target.
        """
        current = self.get()
        target = clamp_brightness(current + delta)
        log.debug("%s: adjust %d%+d -> %d", self.path, current, delta, target)
        self.set(target)
        return self.get()
